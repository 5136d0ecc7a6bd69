"""Tests for mean and volatility calculations"""

import pytest

from oracle_app.data.history import HistoryStore
from oracle_app.metrics.stats import StatsEngine, calculate_average, calculate_volatility
from oracle_app.utils.fixed_point import WAD, to_fixed

BTC = "BTC_USD_FEED"


def fixed(*values):
    return [to_fixed(v) for v in values]


class TestCalculateAverage:
    """Test arithmetic mean"""

    def test_empty(self):
        assert calculate_average([]) == 0

    def test_single_value(self):
        assert calculate_average(fixed("20000")) == to_fixed("20000")

    def test_mean(self):
        assert calculate_average(fixed("100", "200", "600")) == to_fixed("300")

    def test_fractional_mean_keeps_18_digits(self):
        # 1/3 truncated at the 18th fractional digit
        assert calculate_average([0, 0, WAD]) == WAD // 3


class TestCalculateVolatility:
    """Test sample standard deviation"""

    @pytest.mark.parametrize("values", [[], fixed("20000")])
    def test_fewer_than_two_points(self, values):
        assert calculate_volatility(values) == 0

    def test_constant_series(self):
        assert calculate_volatility(fixed("5", "5", "5", "5")) == 0

    def test_sample_denominator(self):
        # mean 20, squared deviations 100 + 0 + 100, divided by n - 1 = 2
        assert calculate_volatility(fixed("10", "20", "30")) == to_fixed("10")

    def test_two_points(self):
        # deviations of +/-1 from 2, variance 2 / 1
        result = calculate_volatility(fixed("1", "3"))
        assert result == 1414213562373095048  # sqrt(2) at 18 decimals, truncated

    def test_order_independent(self):
        assert calculate_volatility(fixed("30", "10", "20")) == calculate_volatility(
            fixed("10", "20", "30")
        )


class TestStatsEngine:
    """Test engine over the history store"""

    def test_empty_history(self, history):
        stats = StatsEngine(history)
        assert stats.average(BTC) == 0
        assert stats.volatility(BTC) == 0

    def test_tracks_latest_append(self, history, point):
        stats = StatsEngine(history)
        history.append(BTC, point(BTC, "10", seconds=0))
        assert stats.average(BTC) == to_fixed("10")
        assert stats.volatility(BTC) == 0

        history.append(BTC, point(BTC, "20", seconds=1))
        history.append(BTC, point(BTC, "30", seconds=2))
        assert stats.average(BTC) == to_fixed("20")
        assert stats.volatility(BTC) == to_fixed("10")

    def test_uses_window_only(self, registry, point):
        store = HistoryStore(registry, window_size=2)
        stats = StatsEngine(store)
        for i, value in enumerate(["1000", "10", "20"]):
            store.append(BTC, point(BTC, value, seconds=i))
        assert stats.average(BTC) == to_fixed("15")
