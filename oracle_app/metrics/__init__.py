"""Statistics derived from the rolling price history"""

from .stats import StatsEngine, calculate_average, calculate_volatility

__all__ = [
    "StatsEngine",
    "calculate_average",
    "calculate_volatility",
]
