from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, FrozenSet, Optional

from launchpad_core.common.enums import (
    BondingCurveType,
    DataFlag,
    GraduationStatus,
    OrderSide,
    QuoteError,
    QuoteSource,
    SupplySource,
)
from launchpad_core.common.math import (
    U64_MAX,
    lamports_to_sol,
    price_units_to_sol_per_token,
    raw_to_tokens,
    sol_per_token_to_price_units,
)


@dataclass(frozen=True)
class CurveConfig:
    """
    Immutable per-launch parameters of a linear bonding curve.

    The curve is defined by two explicit target prices (SOL per whole token): the price at
    tokens_sold = 0 and the price at tokens_sold = total_supply. The integer coefficients
    b (base) and m (rise over the whole supply) are derived once here:

        P(x) = b + m * x / total_supply      (price units, see common.math)
    """
    total_supply: int
    decimals: int
    initial_price: Decimal
    terminal_price: Decimal
    curve_type: BondingCurveType = BondingCurveType.LINEAR
    base: int = field(init=False, repr=False, compare=False)
    rise: int = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.curve_type != BondingCurveType.LINEAR:
            raise ValueError("Invalid curve type.")
        if self.total_supply <= 0 or self.total_supply > U64_MAX:
            raise ValueError("Total supply must be positive and fit in a u64.")
        if not 0 <= self.decimals <= 18:
            raise ValueError("Decimals must be between 0 and 18.")
        if self.initial_price <= Decimal("0"):
            raise ValueError("Initial price must be positive.")

        base = sol_per_token_to_price_units(self.initial_price, self.decimals)
        terminal = sol_per_token_to_price_units(self.terminal_price, self.decimals)
        if base <= 0:
            raise ValueError("Initial price is below the smallest representable price.")
        if terminal < base:
            raise ValueError("Terminal price must not be below the initial price (curve would decrease).")

        object.__setattr__(self, "base", base)
        object.__setattr__(self, "rise", terminal - base)

    @classmethod
    def from_market_cap_targets(
        cls,
        total_supply: int,
        decimals: int,
        initial_market_cap_sol: Decimal = Decimal("0.1"),
        terminal_multiplier: Decimal = Decimal("10"),
    ) -> "CurveConfig":
        """
        Derives the target prices from a starting market cap (in SOL) spread over the whole
        supply and the price multiple reached when the curve is exhausted.
        """
        whole_tokens = raw_to_tokens(total_supply, decimals)
        if whole_tokens <= 0:
            raise ValueError("Total supply must be positive.")
        initial_price = Decimal(initial_market_cap_sol) / whole_tokens
        return cls(
            total_supply=total_supply,
            decimals=decimals,
            initial_price=initial_price,
            terminal_price=initial_price * Decimal(terminal_multiplier),
        )


@dataclass(frozen=True)
class CurveState:
    """Snapshot of the on-chain bonding curve progress. Only confirmed trades change it."""
    tokens_sold: int = 0

    def __post_init__(self):
        if self.tokens_sold < 0:
            raise ValueError("Tokens sold must be non-negative.")


@dataclass(frozen=True)
class PoolState:
    """Snapshot of the constant-product pool reserves after graduation."""
    sol_reserves: int
    token_reserves: int

    def __post_init__(self):
        if self.sol_reserves <= 0 or self.token_reserves <= 0:
            raise ValueError("Pool reserves must both be positive.")


@dataclass(frozen=True)
class PricingSnapshot:
    """
    The single pricing source for one operation: the graduation status read once, plus
    exactly the state that status calls for.
    """
    status: GraduationStatus
    curve_state: Optional[CurveState] = None
    pool_state: Optional[PoolState] = None
    flags: FrozenSet[DataFlag] = frozenset()

    def __post_init__(self):
        if self.status == GraduationStatus.BONDING:
            if self.curve_state is None or self.pool_state is not None:
                raise ValueError("A bonding snapshot needs curve state and no pool state.")
        elif self.status == GraduationStatus.GRADUATED:
            if self.pool_state is None or self.curve_state is not None:
                raise ValueError("A graduated snapshot needs pool state and no curve state.")

    @classmethod
    def bonding(cls, tokens_sold: int, flags: FrozenSet[DataFlag] = frozenset()) -> "PricingSnapshot":
        return cls(GraduationStatus.BONDING, curve_state=CurveState(tokens_sold), flags=frozenset(flags))

    @classmethod
    def graduated(
        cls, sol_reserves: int, token_reserves: int, flags: FrozenSet[DataFlag] = frozenset()
    ) -> "PricingSnapshot":
        return cls(
            GraduationStatus.GRADUATED,
            pool_state=PoolState(sol_reserves, token_reserves),
            flags=frozenset(flags),
        )


@dataclass(frozen=True)
class Quote:
    """Outcome of a simulated trade. Never mutates any state."""
    direction: OrderSide
    amount_in: int
    amount_out: int
    pre_trade_price: int
    post_trade_price: int
    price_impact_bps: int
    avg_price: int
    status: GraduationStatus
    source: QuoteSource = QuoteSource.LOCAL_CURVE
    fee_paid: int = 0
    flags: FrozenSet[DataFlag] = frozenset()

    def to_dict(self, decimals: int) -> Dict[str, Any]:
        """Display form: SOL and whole-token amounts as strings, prices in SOL per token."""
        if self.direction == OrderSide.BUY:
            amount_in, amount_out = lamports_to_sol(self.amount_in), raw_to_tokens(self.amount_out, decimals)
        else:
            amount_in, amount_out = raw_to_tokens(self.amount_in, decimals), lamports_to_sol(self.amount_out)
        return {
            "direction": self.direction.value,
            "amount_in": str(amount_in),
            "amount_out": str(amount_out),
            "amount_in_raw": self.amount_in,
            "amount_out_raw": self.amount_out,
            "pre_trade_price": str(price_units_to_sol_per_token(self.pre_trade_price, decimals)),
            "post_trade_price": str(price_units_to_sol_per_token(self.post_trade_price, decimals)),
            "avg_price": str(price_units_to_sol_per_token(self.avg_price, decimals)),
            "price_impact_bps": self.price_impact_bps,
            "status": self.status.value,
            "source": self.source.value,
            "fee_paid": self.fee_paid,
            "flags": sorted(flag.value for flag in self.flags),
        }


@dataclass(frozen=True)
class QuoteResult:
    """Either a quote or a typed error, never both."""
    quote: Optional[Quote] = None
    error: Optional[QuoteError] = None
    flags: FrozenSet[DataFlag] = frozenset()

    def __post_init__(self):
        if (self.quote is None) == (self.error is None):
            raise ValueError("A quote result holds exactly one of quote or error.")

    @property
    def ok(self) -> bool:
        return self.quote is not None

    @classmethod
    def success(cls, quote: Quote) -> "QuoteResult":
        return cls(quote=quote, flags=quote.flags)

    @classmethod
    def failure(cls, error: QuoteError, flags: FrozenSet[DataFlag] = frozenset()) -> "QuoteResult":
        return cls(error=error, flags=frozenset(flags))


@dataclass(frozen=True)
class SupplyReading:
    """Resolved tokens sold and where the value came from."""
    tokens_sold: int
    source: SupplySource
    degraded: bool = False


@dataclass(frozen=True)
class MarketCapSnapshot:
    """
    Point-in-time market cap. SOL-denominated values are integers (price units for prices,
    lamports for caps); USD values are display Decimals.
    """
    mint: str
    timestamp_ms: int
    price: int
    price_usd: Decimal
    circulating_supply: int
    total_supply: int
    market_cap: int
    market_cap_usd: Decimal
    fully_diluted_market_cap: int
    fully_diluted_market_cap_usd: Decimal
    sol_usd_price: Decimal
    status: GraduationStatus
    flags: FrozenSet[DataFlag] = frozenset()

    def to_dict(self, decimals: int) -> Dict[str, Any]:
        return {
            "mint": self.mint,
            "timestamp_ms": self.timestamp_ms,
            "price": str(price_units_to_sol_per_token(self.price, decimals)),
            "price_usd": str(self.price_usd),
            "circulating_supply": str(raw_to_tokens(self.circulating_supply, decimals)),
            "total_supply": str(raw_to_tokens(self.total_supply, decimals)),
            "market_cap": str(lamports_to_sol(self.market_cap)),
            "market_cap_usd": str(self.market_cap_usd),
            "fully_diluted_market_cap": str(lamports_to_sol(self.fully_diluted_market_cap)),
            "fully_diluted_market_cap_usd": str(self.fully_diluted_market_cap_usd),
            "sol_usd_price": str(self.sol_usd_price),
            "status": self.status.value,
            "flags": sorted(flag.value for flag in self.flags),
        }
