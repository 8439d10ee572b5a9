import pytest

from decimal import Decimal

from launchpad_core.common.math import (
    U64_MAX,
    ceil_div,
    coerce_amount,
    impact_bps,
    lamports_to_sol,
    price_units_to_sol_per_token,
    raw_to_tokens,
    sol_per_token_to_price_units,
)


@pytest.mark.parametrize(
    "numerator, denominator, expected",
    [
        (7, 2, 4),
        (6, 2, 3),
        (0, 5, 0),
        (1, 10 ** 18, 1),
    ]
)
def test_ceil_div(numerator, denominator, expected):
    """ceil_div rounds up for positive operands."""
    assert ceil_div(numerator, denominator) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (5, 5),
        (-3, -3),
        (5.0, 5),
        (Decimal("7"), 7),
        (Decimal("7.000"), 7),
        (U64_MAX, U64_MAX),
    ]
)
def test_coerce_amount_integral(value, expected):
    """Integral ints, floats and Decimals come back as ints."""
    assert coerce_amount(value) == expected


@pytest.mark.parametrize(
    "value",
    [
        None,
        True,
        5.5,
        float("nan"),
        float("inf"),
        float("-inf"),
        Decimal("7.1"),
        Decimal("NaN"),
        Decimal("Infinity"),
        "5",
    ]
)
def test_coerce_amount_rejects(value):
    """Fractions, non-finite values, booleans and strings are not amounts."""
    assert coerce_amount(value) is None


def test_price_unit_conversions():
    """
    0.00001 SOL per whole token with 9 decimals is 10^-5 lamports per raw unit,
    i.e. 10^13 price units, and converts back exactly.
    """
    units = sol_per_token_to_price_units(Decimal("0.00001"), 9)
    assert units == 10 ** 13
    assert price_units_to_sol_per_token(units, 9) == Decimal("0.00001")


def test_price_units_depend_on_decimals():
    """The same display price is more units per raw token when the token has fewer decimals."""
    assert sol_per_token_to_price_units(Decimal("1"), 0) == 10 ** 27
    assert sol_per_token_to_price_units(Decimal("1"), 6) == 10 ** 21


def test_sol_and_token_conversions():
    """Display conversions for SOL and tokens."""
    assert lamports_to_sol(1_500_000_000) == Decimal("1.5")
    assert raw_to_tokens(2_500_000, 6) == Decimal("2.5")


@pytest.mark.parametrize(
    "pre, post, expected",
    [
        (100, 150, 5000),
        (100, 50, -5000),
        (100, 100, 0),
        (3, 4, 3333),
        (3, 2, -3333),
        (0, 10, 0),
    ]
)
def test_impact_bps(pre, post, expected):
    """Impact is signed and truncated toward zero."""
    assert impact_bps(pre, post) == expected
