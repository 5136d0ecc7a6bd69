"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from oracle_app.alerts.engine import AlertEngine
from oracle_app.config.defaults import DEFAULT_INSTRUMENTS
from oracle_app.data.history import HistoryStore
from oracle_app.data.models import PricePoint
from oracle_app.data.registry import FeedRegistry
from oracle_app.feeds.memory import ScriptedPriceSource
from oracle_app.utils.fixed_point import to_fixed

BTC = "BTC_USD_FEED"
ETH = "ETH_USD_FEED"
EUR = "EUR_USD_FEED"

START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class SteppingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


def make_point(instrument_id: str, value: str, seconds: int = 0) -> PricePoint:
    """PricePoint in whole units, `seconds` after START."""
    return PricePoint(instrument_id, to_fixed(value), START + timedelta(seconds=seconds))


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def registry() -> FeedRegistry:
    """Registry with the default BTC/ETH/EUR feeds."""
    return FeedRegistry(DEFAULT_INSTRUMENTS)


@pytest.fixture
def history(registry) -> HistoryStore:
    return HistoryStore(registry, window_size=10)


@pytest.fixture
def alerts(registry) -> AlertEngine:
    return AlertEngine(registry, log_size=5)


@pytest.fixture
def source() -> ScriptedPriceSource:
    """Source quoting BTC 20000, ETH 1500, EUR 1.08."""
    return ScriptedPriceSource({
        BTC: to_fixed("20000"),
        ETH: to_fixed("1500"),
        EUR: to_fixed("1.08"),
    })


@pytest.fixture
def point():
    """Factory for PricePoints: point(instrument_id, "123.45", seconds=0)."""
    return make_point
