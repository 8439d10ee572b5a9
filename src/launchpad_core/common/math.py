from decimal import Decimal, ROUND_HALF_EVEN, localcontext
from typing import Optional, Union

LAMPORTS_PER_SOL = 10 ** 9
# Prices are lamports per raw token unit, scaled by PRICE_SCALE.
PRICE_SCALE = 10 ** 18
BPS_DENOMINATOR = 10_000
U64_MAX = 2 ** 64 - 1

_DISPLAY_PRECISION = 80


def ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def coerce_amount(value: Union[int, float, Decimal, None]) -> Optional[int]:
    """
    Returns the value as an int if it is a finite, integral amount, None otherwise.
    Sign is not checked here. Booleans are not amounts.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        if not value.is_integer():
            return None
        return int(value)
    if isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            return None
        return int(value)
    return None


def sol_per_token_to_price_units(price: Decimal, decimals: int) -> int:
    """
    Converts a display price (SOL per whole token) into integer price units
    (lamports per raw unit * PRICE_SCALE), rounding half-even.
    """
    with localcontext() as ctx:
        ctx.prec = _DISPLAY_PRECISION
        scaled = Decimal(price) * LAMPORTS_PER_SOL * PRICE_SCALE / (Decimal(10) ** decimals)
        return int(scaled.to_integral_value(rounding=ROUND_HALF_EVEN))


def price_units_to_sol_per_token(price: int, decimals: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _DISPLAY_PRECISION
        return Decimal(price) * (Decimal(10) ** decimals) / (Decimal(LAMPORTS_PER_SOL) * PRICE_SCALE)


def lamports_to_sol(lamports: int) -> Decimal:
    return Decimal(lamports) / LAMPORTS_PER_SOL


def raw_to_tokens(raw: int, decimals: int) -> Decimal:
    return Decimal(raw) / (Decimal(10) ** decimals)


def impact_bps(pre_price: int, post_price: int) -> int:
    """Signed price change in basis points, truncated toward zero. Zero when there is no pre-trade price."""
    if pre_price <= 0:
        return 0
    diff = post_price - pre_price
    magnitude = abs(diff) * BPS_DENOMINATOR // pre_price
    return magnitude if diff >= 0 else -magnitude
