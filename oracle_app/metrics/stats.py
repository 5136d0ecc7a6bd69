"""Mean and volatility over a price history snapshot"""

import math
from collections.abc import Sequence

from ..data.history import HistoryStore


def calculate_average(values: Sequence[int]) -> int:
    """
    Arithmetic mean of fixed-point values

    Args:
        values: Fixed-point prices, any order

    Returns:
        Mean truncated to 18 decimals, 0 for an empty sequence
    """
    if not values:
        return 0
    return sum(values) // len(values)


def calculate_volatility(values: Sequence[int]) -> int:
    """
    Sample standard deviation of fixed-point values

    Uses the n - 1 denominator. Deviations are taken from the exact rational
    mean, so the only rounding is the final integer square root.

    Args:
        values: Fixed-point prices

    Returns:
        Standard deviation in the same fixed-point scale, 0 with fewer than
        two values
    """
    n = len(values)
    if n < 2:
        return 0

    total = sum(values)
    # sum((x - total/n)^2) scaled by n^2 to stay in integers
    scaled_sq_dev = sum((n * value - total) ** 2 for value in values)
    return math.isqrt(scaled_sq_dev // (n * n * (n - 1)))


class StatsEngine:
    """Stateless statistics over the current HistoryStore snapshot"""

    def __init__(self, history: HistoryStore):
        self.history = history

    def average(self, instrument_id: str) -> int:
        """Mean of the instrument's current history, 0 if empty"""
        return calculate_average(self.history.values(instrument_id))

    def volatility(self, instrument_id: str) -> int:
        """Sample standard deviation of the current history, 0 below two points"""
        return calculate_volatility(self.history.values(instrument_id))
