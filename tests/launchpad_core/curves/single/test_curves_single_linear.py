import pytest

from decimal import Decimal

from launchpad_core.common.math import LAMPORTS_PER_SOL
from launchpad_core.common.model import CurveConfig
from launchpad_core.curves.single.base import CurveModel
from launchpad_core.curves.single.linear import LinearCurveModel

TOTAL_SUPPLY = 1_000_000 * 10 ** 9


@pytest.fixture
def linear_config():
    """
    1M tokens with 9 decimals, priced from 0.00001 to 0.0001 SOL per token.
    Selling the whole supply raises exactly 55 SOL.
    """
    return CurveConfig(
        total_supply=TOTAL_SUPPLY,
        decimals=9,
        initial_price=Decimal("0.00001"),
        terminal_price=Decimal("0.0001"),
    )


@pytest.fixture
def flat_config():
    """A flat curve at 0.00001 SOL per token."""
    return CurveConfig(
        total_supply=TOTAL_SUPPLY,
        decimals=9,
        initial_price=Decimal("0.00001"),
        terminal_price=Decimal("0.00001"),
    )


@pytest.fixture
def model():
    return LinearCurveModel()


def test_is_curve_model(model):
    """The linear model implements the abstract curve interface."""
    assert isinstance(model, CurveModel)


class TestPrice:
    def test_initial_price(self, model, linear_config):
        """price(0) is the configured initial price."""
        assert model.price(0, linear_config) == 10 ** 13
        assert model.initial_price(linear_config) == 10 ** 13

    def test_midpoint_and_terminal(self, model, linear_config):
        """Halfway through the supply the price is halfway between the targets."""
        assert model.price(TOTAL_SUPPLY // 2, linear_config) == 55 * 10 ** 12
        assert model.terminal_price(linear_config) == 10 ** 14

    def test_monotonic(self, model, linear_config):
        """Price never decreases as tokens are sold."""
        prices = [model.price(x, linear_config) for x in range(0, TOTAL_SUPPLY + 1, TOTAL_SUPPLY // 1000)]
        assert all(a <= b for a, b in zip(prices, prices[1:]))
        assert prices[0] < prices[-1]


class TestCost:
    def test_full_raise(self, model, linear_config):
        """Buying the whole supply costs the trapezoid area: 1M * (0.00001 + 0.0001) / 2 = 55 SOL."""
        assert model.buy_cost(0, TOTAL_SUPPLY, linear_config) == 55 * LAMPORTS_PER_SOL
        assert model.raise_to_complete(0, linear_config) == 55 * LAMPORTS_PER_SOL
        assert model.raise_to_complete(TOTAL_SUPPLY, linear_config) == 0

    def test_cost_between_exact(self, model, linear_config):
        """The exact integral is returned as a fraction."""
        numerator, denominator = model.cost_between(0, TOTAL_SUPPLY, linear_config)
        assert numerator % denominator == 0
        assert numerator // denominator == 55 * LAMPORTS_PER_SOL

    def test_cost_between_invalid_range(self, model, linear_config):
        """A reversed range is rejected."""
        with pytest.raises(ValueError):
            model.cost_between(10, 5, linear_config)

    def test_zero_amounts(self, model, linear_config):
        """Zero tokens cost and return nothing."""
        assert model.buy_cost(100, 0, linear_config) == 0
        assert model.sale_return(100, 0, linear_config) == 0

    def test_buy_rounds_up_sell_rounds_down(self, model, linear_config):
        """One raw token is worth a fraction of a lamport: the buyer pays 1, the seller receives 0."""
        assert model.buy_cost(0, 1, linear_config) == 1
        assert model.sale_return(1, 1, linear_config) == 0

    def test_sell_more_than_sold(self, model, linear_config):
        """Cannot sell back more than the curve has sold."""
        with pytest.raises(ValueError):
            model.sale_return(10, 11, linear_config)

    def test_negative_amounts(self, model, linear_config):
        """Negative amounts raise ValueError."""
        with pytest.raises(ValueError):
            model.buy_cost(0, -1, linear_config)
        with pytest.raises(ValueError):
            model.sale_return(10, -1, linear_config)
        with pytest.raises(ValueError):
            model.tokens_for_sol(-1, 0, linear_config)


class TestTokensForSol:
    @pytest.mark.parametrize("tokens_sold", [0, TOTAL_SUPPLY // 4, TOTAL_SUPPLY // 2])
    @pytest.mark.parametrize("sol_in", [1_000, LAMPORTS_PER_SOL, 5 * LAMPORTS_PER_SOL])
    def test_largest_affordable_amount(self, model, linear_config, tokens_sold, sol_in):
        """The returned amount is affordable and one more raw token is not."""
        tokens = model.tokens_for_sol(sol_in, tokens_sold, linear_config)
        assert tokens > 0
        assert model.buy_cost(tokens_sold, tokens, linear_config) <= sol_in
        assert model.buy_cost(tokens_sold, tokens + 1, linear_config) > sol_in

    @pytest.mark.parametrize("tokens_sold", [0, TOTAL_SUPPLY // 4, TOTAL_SUPPLY // 2])
    @pytest.mark.parametrize("sol_in", [1_000, LAMPORTS_PER_SOL, 5 * LAMPORTS_PER_SOL])
    def test_reversible(self, model, linear_config, tokens_sold, sol_in):
        """Buying then selling the same tokens returns the spend to within one lamport."""
        tokens = model.tokens_for_sol(sol_in, tokens_sold, linear_config)
        returned = model.sale_return(tokens_sold + tokens, tokens, linear_config)
        assert sol_in - 1 <= returned <= sol_in

    def test_exact_buyout(self, model, linear_config):
        """55 SOL from an empty curve buys exactly the whole supply."""
        assert model.tokens_for_sol(55 * LAMPORTS_PER_SOL, 0, linear_config) == TOTAL_SUPPLY

    def test_flat_curve(self, model, flat_config):
        """On a flat curve 1 SOL buys 1 / 0.00001 = 100,000 tokens."""
        assert model.tokens_for_sol(LAMPORTS_PER_SOL, 0, flat_config) == 100_000 * 10 ** 9

    def test_zero_sol(self, model, linear_config):
        """No SOL buys nothing."""
        assert model.tokens_for_sol(0, 123, linear_config) == 0

    def test_one_sol_scenario(self, model, linear_config):
        """1 SOL from an empty curve buys tokens and moves the price up."""
        tokens = model.tokens_for_sol(LAMPORTS_PER_SOL, 0, linear_config)
        assert tokens > 0
        assert model.price(tokens, linear_config) > model.initial_price(linear_config)


class TestCurvePoints:
    def test_three_points(self, model, linear_config):
        """Points are evenly spaced across the supply, ends included."""
        assert model.curve_points(linear_config, count=3) == [
            (0, 10 ** 13),
            (TOTAL_SUPPLY // 2, 55 * 10 ** 12),
            (TOTAL_SUPPLY, 10 ** 14),
        ]

    def test_default_count(self, model, linear_config):
        """Fifty points by default."""
        assert len(model.curve_points(linear_config)) == 50

    def test_too_few_points(self, model, linear_config):
        """A single point cannot describe the curve."""
        with pytest.raises(ValueError):
            model.curve_points(linear_config, count=1)
