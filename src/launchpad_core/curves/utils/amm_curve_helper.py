from typing import Tuple

from launchpad_core.common.math import BPS_DENOMINATOR, PRICE_SCALE


class ConstantProductHelper:
    """
    Constant-product pool math (sol_reserves * token_reserves held constant across a swap).
    Outputs are floored so a quote never promises more than the pool pays.
    """

    @staticmethod
    def spot_price(sol_reserves: int, token_reserves: int) -> int:
        """Pool ratio sol/token in price units."""
        return (sol_reserves * PRICE_SCALE) // token_reserves

    @staticmethod
    def split_fee(amount_in: int, fee_bps: int) -> Tuple[int, int]:
        """
        Returns (amount_after_fee, fee). Fee is floored; zero unless a fee rate is supplied.
        """
        if fee_bps < 0 or fee_bps >= BPS_DENOMINATOR:
            raise ValueError("Fee must be in [0, 10000) basis points.")
        fee = (amount_in * fee_bps) // BPS_DENOMINATOR
        return amount_in - fee, fee

    @staticmethod
    def tokens_out(sol_in: int, sol_reserves: int, token_reserves: int) -> int:
        """token_reserves - k / (sol_reserves + sol_in), floored."""
        return (token_reserves * sol_in) // (sol_reserves + sol_in)

    @staticmethod
    def sol_out(tokens_in: int, sol_reserves: int, token_reserves: int) -> int:
        """sol_reserves - k / (token_reserves + tokens_in), floored."""
        return (sol_reserves * tokens_in) // (token_reserves + tokens_in)
