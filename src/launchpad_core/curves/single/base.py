from abc import ABC, abstractmethod
from typing import List, Tuple

from launchpad_core.common.model import CurveConfig


class CurveModel(ABC):
    """
    Abstract base class defining the pricing interface for a bonding curve.

    Implementations are stateless: every method takes the launch's CurveConfig and the
    current tokens sold explicitly, so a model may be shared across mints and threads.
    All amounts are integers (raw token units, lamports, price units).
    """

    @abstractmethod
    def price(self, tokens_sold: int, config: 'CurveConfig') -> int:
        """
        Returns the spot price at the given cumulative tokens sold.

        :param tokens_sold: int - Raw token units sold out of the curve so far.
        :param config: CurveConfig - Launch parameters.
        :return: int: The price in price units.
        """
        pass

    def initial_price(self, config: 'CurveConfig') -> int:
        """Returns the price before any token has been sold."""
        return self.price(0, config)

    @abstractmethod
    def buy_cost(self, tokens_sold: int, amount: int, config: 'CurveConfig') -> int:
        """
        Calculates how many lamports it costs to buy 'amount' tokens from 'tokens_sold' onwards,
        rounded up.

        :param tokens_sold: int - Current tokens sold.
        :param amount: int - Raw token units to buy.
        :return: Lamports required.
        """
        pass

    @abstractmethod
    def sale_return(self, tokens_sold: int, amount: int, config: 'CurveConfig') -> int:
        """
        Calculates how many lamports are returned for selling 'amount' tokens back into the curve,
        rounded down.

        :param tokens_sold: int - Current tokens sold.
        :param amount: int - Raw token units to sell.
        :return: Lamports returned.
        """
        pass

    @abstractmethod
    def tokens_for_sol(self, sol_in: int, tokens_sold: int, config: 'CurveConfig') -> int:
        """
        Calculates the largest token amount whose cost does not exceed 'sol_in'. The result may
        run past the total supply; callers decide whether that is allowed.

        :param sol_in: int - Lamports offered.
        :param tokens_sold: int - Current tokens sold.
        :return: Raw token units.
        """
        pass

    @abstractmethod
    def curve_points(self, config: 'CurveConfig', count: int = 50) -> List[Tuple[int, int]]:
        """Returns (tokens_sold, price) pairs across the whole supply, for plotting."""
        pass
