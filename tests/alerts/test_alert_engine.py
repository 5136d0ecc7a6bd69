"""Tests for price alert evaluation and the bounded alert log."""

from unittest.mock import Mock

import pytest

from oracle_app.alerts.engine import AlertEngine
from oracle_app.data.models import AlertThreshold, BoundKind
from oracle_app.errors import InvalidThreshold, UnknownInstrument
from oracle_app.utils.fixed_point import to_fixed

BTC = "BTC_USD_FEED"
ETH = "ETH_USD_FEED"


@pytest.fixture
def configured(alerts):
    alerts.set_threshold(BTC, upper_bound=to_fixed("100"), lower_bound=to_fixed("50"))
    return alerts


class TestSetThreshold:
    """Test threshold configuration."""

    def test_set_both_bounds(self, alerts):
        threshold = alerts.set_threshold(BTC, to_fixed("100"), to_fixed("50"))
        assert threshold.upper_bound == to_fixed("100")
        assert threshold.lower_bound == to_fixed("50")
        assert alerts.threshold(BTC) == threshold

    def test_single_bound_allowed(self, alerts):
        assert alerts.set_threshold(BTC, upper_bound=to_fixed("100")).lower_bound is None
        assert alerts.set_threshold(ETH, lower_bound=to_fixed("10")).upper_bound is None

    def test_last_write_wins(self, configured):
        configured.set_threshold(BTC, upper_bound=to_fixed("200"))
        threshold = configured.threshold(BTC)
        assert threshold.upper_bound == to_fixed("200")
        assert threshold.lower_bound is None

    @pytest.mark.parametrize("upper,lower", [("50", "100"), ("50", "50")])
    def test_upper_must_exceed_lower(self, alerts, upper, lower):
        with pytest.raises(InvalidThreshold) as exc_info:
            alerts.set_threshold(BTC, to_fixed(upper), to_fixed(lower))
        assert exc_info.value.upper_bound == to_fixed(upper)
        assert alerts.threshold(BTC) is None

    def test_rejected_update_keeps_previous(self, configured):
        with pytest.raises(InvalidThreshold):
            configured.set_threshold(BTC, to_fixed("1"), to_fixed("2"))
        assert configured.threshold(BTC).upper_bound == to_fixed("100")

    @pytest.mark.parametrize("bound", [-1, 1.5, "100"])
    def test_malformed_bound(self, alerts, bound):
        with pytest.raises(InvalidThreshold):
            alerts.set_threshold(BTC, upper_bound=bound)

    def test_no_bounds_clears(self, configured):
        assert configured.set_threshold(BTC) is None
        assert configured.threshold(BTC) is None

    def test_clear_threshold(self, configured):
        configured.clear_threshold(BTC)
        assert configured.threshold(BTC) is None

    def test_unknown_instrument(self, alerts):
        with pytest.raises(UnknownInstrument):
            alerts.set_threshold("DOGE_USD_FEED", upper_bound=1)


class TestEvaluate:
    """Test bound crossing."""

    def test_price_above_upper(self, configured, point):
        event = configured.evaluate(BTC, point(BTC, "150"))
        assert event.bound_kind is BoundKind.UPPER
        assert event.triggering_price == to_fixed("150")
        assert event.bound == to_fixed("100")

    def test_price_below_lower(self, configured, point):
        event = configured.evaluate(BTC, point(BTC, "40"))
        assert event.bound_kind is BoundKind.LOWER
        assert event.bound == to_fixed("50")

    def test_price_within_bounds(self, configured, point):
        assert configured.evaluate(BTC, point(BTC, "75")) is None
        assert configured.recent_alerts() == []

    def test_bounds_are_inclusive(self, configured, point):
        assert configured.evaluate(BTC, point(BTC, "100")).bound_kind is BoundKind.UPPER
        assert configured.evaluate(BTC, point(BTC, "50")).bound_kind is BoundKind.LOWER

    def test_no_threshold(self, alerts, point):
        assert alerts.evaluate(ETH, point(ETH, "1000000")) is None

    def test_fired_at_is_observation_time(self, configured, point):
        p = point(BTC, "150", seconds=42)
        assert configured.evaluate(BTC, p).fired_at == p.observed_at

    def test_upper_takes_priority(self, registry, point):
        # Bounds cannot overlap through set_threshold; exercise the rule directly
        threshold = AlertThreshold(BTC, upper_bound=to_fixed("50"), lower_bound=to_fixed("100"))
        assert threshold.breached_by(to_fixed("75")) is BoundKind.UPPER

    def test_unknown_instrument(self, alerts, point):
        with pytest.raises(UnknownInstrument):
            alerts.evaluate("DOGE_USD_FEED", point("DOGE_USD_FEED", "1"))

    def test_point_for_other_instrument(self, alerts, point):
        alerts.set_threshold(BTC, upper_bound=to_fixed("1"))
        with pytest.raises(ValueError):
            alerts.evaluate(BTC, point(ETH, "1500"))
        assert alerts.recent_alerts() == []


class TestAlertLog:
    """Test the bounded log."""

    def test_log_keeps_last_five_in_order(self, configured, point):
        prices = ["101", "102", "103", "104", "105", "106"]
        for i, price in enumerate(prices):
            configured.evaluate(BTC, point(BTC, price, seconds=i))

        log = configured.recent_alerts()
        assert len(log) == 5
        assert [e.triggering_price for e in log] == [to_fixed(p) for p in prices[1:]]

    def test_log_is_a_copy(self, configured, point):
        configured.evaluate(BTC, point(BTC, "150"))
        configured.recent_alerts().clear()
        assert len(configured.recent_alerts()) == 1

    def test_custom_log_size(self, registry, point):
        engine = AlertEngine(registry, log_size=2)
        engine.set_threshold(BTC, upper_bound=to_fixed("1"))
        for i in range(4):
            engine.evaluate(BTC, point(BTC, str(10 + i), seconds=i))
        assert [e.triggering_price for e in engine.recent_alerts()] == [
            to_fixed("12"), to_fixed("13")
        ]


class TestCallbacks:
    """Test alert listeners."""

    def test_callback_receives_event(self, configured, point):
        callback = Mock()
        configured.register_callback(callback)

        event = configured.evaluate(BTC, point(BTC, "150"))
        callback.assert_called_once_with(event)

    def test_callback_registered_once(self, configured, point):
        callback = Mock()
        configured.register_callback(callback)
        configured.register_callback(callback)
        configured.evaluate(BTC, point(BTC, "150"))
        assert callback.call_count == 1

    def test_unregister(self, configured, point):
        callback = Mock()
        configured.register_callback(callback)
        configured.unregister_callback(callback)
        configured.evaluate(BTC, point(BTC, "150"))
        callback.assert_not_called()

    def test_failing_callback_is_isolated(self, configured, point):
        failing = Mock(side_effect=RuntimeError("boom"))
        healthy = Mock()
        configured.register_callback(failing)
        configured.register_callback(healthy)

        event = configured.evaluate(BTC, point(BTC, "150"))

        assert event is not None
        healthy.assert_called_once_with(event)
        assert len(configured.recent_alerts()) == 1
