"""In-memory price source for demos, simulations and tests."""

import asyncio
from collections.abc import Mapping
from typing import Optional

from .base import PriceSource


class ScriptedPriceSource(PriceSource):
    """
    Price source backed by a mutable dict.

    Prices and per-instrument failures can be changed between ticks to
    script a scenario. An optional delay makes every fetch suspend.
    """

    def __init__(self, prices: Optional[Mapping[str, int]] = None, delay: float = 0.0):
        self.prices: dict[str, int] = dict(prices or {})
        self.failures: dict[str, Exception] = {}
        self.batch_failure: Optional[Exception] = None
        self.delay = delay
        self.fetch_count = 0

    def set_price(self, instrument_id: str, value: int) -> None:
        """Set the price returned for an instrument."""
        self.prices[instrument_id] = value
        self.failures.pop(instrument_id, None)

    def fail(self, instrument_id: str, error: Optional[Exception] = None) -> None:
        """Make fetches for an instrument raise until its price is set again."""
        self.failures[instrument_id] = error or ConnectionError("feed unavailable")

    async def fetch_price(self, instrument_id: str) -> int:
        self.fetch_count += 1
        if self.delay:
            await asyncio.sleep(self.delay)

        if instrument_id in self.failures:
            raise self.failures[instrument_id]
        if instrument_id not in self.prices:
            raise LookupError(f"no price scripted for {instrument_id}")
        return self.prices[instrument_id]

    async def fetch_all_prices(self) -> Mapping[str, int]:
        self.fetch_count += 1
        if self.delay:
            await asyncio.sleep(self.delay)

        if self.batch_failure is not None:
            raise self.batch_failure
        return {
            instrument_id: value
            for instrument_id, value in self.prices.items()
            if instrument_id not in self.failures
        }
