from typing import List, Tuple

from launchpad_core.common.enums import BondingCurveType
from launchpad_core.common.model import CurveConfig
from launchpad_core.curves.single.base import CurveModel
from launchpad_core.curves.utils.linear_curve_helper import LinearCurveHelper as helper


class LinearCurveModel(CurveModel):
    """
        A linear bonding curve priced in fixed-point integers.

        The price formula is:
          P(x) = b + m * x / N

        where b and m are the coefficients cached on the CurveConfig (derived from its initial
        and terminal target prices) and N is the total supply.

        The integral for a purchase from supply x to x+Δ is:
          cost(Δ) = ∫(x to x+Δ) [b + m*s/N] ds
                  = b*Δ + (m / 2N)*[(x+Δ)² - x²]

        Buys are rounded against the buyer (cost up, tokens down) and sells against the seller
        (return down), so a quote never promises more than the curve settles.
    """

    @staticmethod
    def _coefficients(config: CurveConfig) -> Tuple[int, int, int]:
        if config.curve_type != BondingCurveType.LINEAR:
            raise ValueError("LinearCurveModel only prices linear curves.")
        return config.base, config.rise, config.total_supply

    def price(self, tokens_sold: int, config: CurveConfig) -> int:
        b, m, n = self._coefficients(config)
        return helper.spot_price(tokens_sold, b, m, n)

    def cost_between(self, start: int, end: int, config: CurveConfig) -> Tuple[int, int]:
        """Exact lamports between two supply levels as (numerator, denominator)."""
        if not 0 <= start <= end:
            raise ValueError("Supply range must satisfy 0 <= start <= end.")
        b, m, n = self._coefficients(config)
        return helper.cost_fraction(start, end, b, m, n)

    def buy_cost(self, tokens_sold: int, amount: int, config: CurveConfig) -> int:
        """
        Integrates price from tokens_sold to tokens_sold + amount.
        """
        if amount < 0:
            raise ValueError("Amount must be non-negative.")
        b, m, n = self._coefficients(config)
        return helper.cost_ceil(tokens_sold, tokens_sold + amount, b, m, n)

    def sale_return(self, tokens_sold: int, amount: int, config: CurveConfig) -> int:
        """
        Integrates price from (tokens_sold - amount) to tokens_sold.
        """
        if amount < 0:
            raise ValueError("Amount must be non-negative.")
        if amount > tokens_sold:
            raise ValueError("Cannot sell more tokens than have been sold.")
        b, m, n = self._coefficients(config)
        return helper.cost_floor(tokens_sold - amount, tokens_sold, b, m, n)

    def tokens_for_sol(self, sol_in: int, tokens_sold: int, config: CurveConfig) -> int:
        if sol_in < 0:
            raise ValueError("SOL amount must be non-negative.")
        b, m, n = self._coefficients(config)
        return helper.solve_end_supply(sol_in, tokens_sold, b, m, n) - tokens_sold

    def curve_points(self, config: CurveConfig, count: int = 50) -> List[Tuple[int, int]]:
        b, m, n = self._coefficients(config)
        return helper.sample_points(b, m, n, count)

    def terminal_price(self, config: CurveConfig) -> int:
        return self.price(config.total_supply, config)

    def raise_to_complete(self, tokens_sold: int, config: CurveConfig) -> int:
        """Lamports needed to buy out every remaining token."""
        return self.buy_cost(tokens_sold, max(0, config.total_supply - tokens_sold), config)
