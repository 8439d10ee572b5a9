from math import isqrt
from typing import List, Tuple

from launchpad_core.common.math import PRICE_SCALE, ceil_div


class LinearCurveHelper:
    """
    Integer arithmetic for the linear curve P(x) = b + m*x/N (price units).

    The cost of moving supply from x0 to x1 is the exact integral
        cost = [2*N*b*(x1 - x0) + m*(x1^2 - x0^2)] / (2*N*PRICE_SCALE)   lamports
    which is kept as a (numerator, denominator) pair so callers choose the rounding.
    """

    @staticmethod
    def spot_price(x: int, b: int, m: int, n: int) -> int:
        """Floor of P(x) in price units."""
        return b + (m * x) // n

    @staticmethod
    def cost_fraction(start: int, end: int, b: int, m: int, n: int) -> Tuple[int, int]:
        """
        Exact integral of the price from 'start' to 'end' in lamports, as (numerator, denominator).
        """
        numerator = 2 * n * b * (end - start) + m * (end * end - start * start)
        return numerator, 2 * n * PRICE_SCALE

    @staticmethod
    def cost_floor(start: int, end: int, b: int, m: int, n: int) -> int:
        numerator, denominator = LinearCurveHelper.cost_fraction(start, end, b, m, n)
        return numerator // denominator

    @staticmethod
    def cost_ceil(start: int, end: int, b: int, m: int, n: int) -> int:
        numerator, denominator = LinearCurveHelper.cost_fraction(start, end, b, m, n)
        return ceil_div(numerator, denominator)

    @staticmethod
    def solve_end_supply(sol_in: int, start: int, b: int, m: int, n: int) -> int:
        """
        Largest integer x1 >= start with cost(start, x1) <= sol_in.

        Multiplying the cost inequality through by 2*N*PRICE_SCALE gives
            m*x1^2 + 2*N*b*x1 - K <= 0,   K = m*x0^2 + 2*N*b*x0 + sol_in*2*N*PRICE_SCALE
        whose non-negative root is x1 = (-N*b + sqrt((N*b)^2 + m*K)) / m.
        """
        half_linear = n * b
        k = m * start * start + 2 * half_linear * start + sol_in * 2 * n * PRICE_SCALE

        def over_budget(x1: int) -> bool:
            return m * x1 * x1 + 2 * half_linear * x1 > k

        if m == 0:
            return k // (2 * half_linear)

        end = (isqrt(half_linear * half_linear + m * k) - half_linear) // m
        # isqrt floors, so the estimate is off by at most one in either direction.
        while over_budget(end):
            end -= 1
        while not over_budget(end + 1):
            end += 1
        return max(end, start)

    @staticmethod
    def sample_points(b: int, m: int, n: int, count: int) -> List[Tuple[int, int]]:
        """Evenly spaced (supply, price) pairs from 0 to N inclusive."""
        if count < 2:
            raise ValueError("At least two points are needed to describe the curve.")
        points = []
        for i in range(count):
            x = (n * i) // (count - 1)
            points.append((x, LinearCurveHelper.spot_price(x, b, m, n)))
        return points
