"""
Poll scheduler.

Runs on a single asyncio event loop. The only suspension points inside a tick
are the price fetches; history append, alert evaluation and snapshot updates
run synchronously, so trades and threshold changes that interleave with a
tick always see a consistent state.
"""

import asyncio
import contextlib
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable, Optional

from ..alerts.engine import AlertEngine
from ..data.history import HistoryStore
from ..data.models import AlertEvent, PricePoint, TickResult
from ..data.registry import FeedRegistry
from ..errors import FetchFailure
from ..feeds.base import PriceSource
from ..logging.config import get_poller_logger
from ..utils.fixed_point import format_fixed
from ..utils.time import get_market_time

logger = get_poller_logger(__name__)

TickListener = Callable[[TickResult], None]


class _TickState:
    """Mutable accumulator for one tick, frozen into a TickResult at the end."""

    def __init__(self, tick: int, started_at: datetime, generation: int):
        self.tick = tick
        self.started_at = started_at
        self.generation = generation
        self.updated: list[str] = []
        self.skipped: list[str] = []
        self.failures: dict[str, str] = {}
        self.alerts: list[AlertEvent] = []
        self.discarded = False

    def freeze(self) -> TickResult:
        return TickResult(
            tick=self.tick,
            started_at=self.started_at,
            updated=tuple(self.updated),
            skipped=tuple(self.skipped),
            failures=dict(self.failures),
            alerts=tuple(self.alerts),
            discarded=self.discarded,
        )


class PollScheduler:
    """
    Drives periodic refresh of a PriceSource.

    The first tick runs as soon as `start()` is called, then one every
    `interval_seconds`. A fetch failure only skips that instrument for that
    tick. After `stop()` returns no further ticks run and results of fetches
    that were still in flight are discarded.
    """

    def __init__(
        self,
        registry: FeedRegistry,
        source: PriceSource,
        history: HistoryStore,
        alerts: AlertEngine,
        interval_seconds: float = 30.0,
        fetch_timeout_seconds: float = 10.0,
        batch_fetch: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._registry = registry
        self._source = source
        self._history = history
        self._alerts = alerts
        self.interval_seconds = interval_seconds
        self.fetch_timeout_seconds = fetch_timeout_seconds
        self.batch_fetch = batch_fetch
        self._clock = clock or get_market_time

        self._task: Optional[asyncio.Task] = None
        # Bumped by start/stop; a tick only applies results for its own generation
        self._generation = 0
        self._tick_count = 0
        self._last: dict[str, PricePoint] = {}
        self._listeners: list[TickListener] = []
        self.last_result: Optional[TickResult] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def tick_count(self) -> int:
        return self._tick_count

    async def start(self) -> None:
        """Begin the recurring cycle. No-op if already running."""
        if self.is_running:
            logger.debug("Poll scheduler already running")
            return

        self._generation += 1
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._generation), name="poll-scheduler"
        )
        logger.info(
            "Poll scheduler started",
            interval_seconds=self.interval_seconds,
            instruments=len(self._registry),
            batch_fetch=self.batch_fetch
        )

    async def stop(self) -> None:
        """Cancel the cycle and wait for it to wind down."""
        task, self._task = self._task, None
        self._generation += 1

        if task is None:
            return

        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Poll scheduler stopped", ticks=self._tick_count)

    async def __aenter__(self) -> "PollScheduler":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    def last_snapshot(self, instrument_id: str) -> Optional[PricePoint]:
        """Most recent successfully fetched point for the instrument."""
        self._registry.resolve(instrument_id)
        return self._last.get(instrument_id)

    def add_listener(self, listener: TickListener) -> None:
        """Register a callback invoked with every applied TickResult."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: TickListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def tick(self) -> TickResult:
        """Run one poll cycle immediately, independent of the timer."""
        return await self._tick(self._generation)

    async def _run(self, generation: int) -> None:
        while True:
            await self._tick(generation)
            await asyncio.sleep(self.interval_seconds)

    async def _tick(self, generation: int) -> TickResult:
        self._tick_count += 1
        state = _TickState(self._tick_count, self._clock(), generation)
        instrument_ids = self._registry.ids()

        if self.batch_fetch:
            await self._poll_batch(instrument_ids, state)
        else:
            await asyncio.gather(
                *(self._poll_instrument(instrument_id, state) for instrument_id in instrument_ids)
            )

        if state.generation != self._generation:
            state.discarded = True
        result = state.freeze()

        if result.discarded:
            logger.info("Discarded tick results after stop", tick=result.tick)
            return result

        self.last_result = result
        logger.debug(
            "Tick completed",
            tick=result.tick,
            updated=len(result.updated),
            failed=len(result.failures),
            alerts=len(result.alerts)
        )
        self._notify(result)
        return result

    async def _poll_instrument(self, instrument_id: str, state: _TickState) -> None:
        try:
            raw = await self._with_timeout(self._source.fetch_price(instrument_id))
            value = self._coerce_price(instrument_id, raw)
        except FetchFailure as failure:
            self._record_failure(state, instrument_id, failure)
            return
        except Exception as e:
            self._record_failure(state, instrument_id, self._wrap(instrument_id, e))
            return

        self._apply(instrument_id, value, state)

    async def _poll_batch(self, instrument_ids: list[str], state: _TickState) -> None:
        try:
            prices = await self._with_timeout(self._source.fetch_all_prices())
            if not isinstance(prices, Mapping):
                raise FetchFailure(None, f"batch returned {type(prices).__name__}, expected mapping")
        except Exception as e:
            failure = e if isinstance(e, FetchFailure) else self._wrap(None, e)
            logger.warning("Batch fetch failed", tick=state.tick, reason=failure.reason)
            for instrument_id in instrument_ids:
                state.failures[instrument_id] = failure.reason
            return

        for instrument_id in instrument_ids:
            if instrument_id not in prices:
                self._record_failure(
                    state, instrument_id, FetchFailure(instrument_id, "missing from batch")
                )
                continue
            try:
                value = self._coerce_price(instrument_id, prices[instrument_id])
            except FetchFailure as failure:
                self._record_failure(state, instrument_id, failure)
                continue
            self._apply(instrument_id, value, state)

    def _apply(self, instrument_id: str, value: int, state: _TickState) -> None:
        """Fan a fetched price out to history and alerts. Never suspends."""
        if state.generation != self._generation:
            state.discarded = True
            return

        if value <= 0:
            logger.debug("Feed returned no data", instrument_id=instrument_id, value=value)
            state.skipped.append(instrument_id)
            return

        point = PricePoint(instrument_id, value, self._clock())
        self._last[instrument_id] = point
        self._history.append(instrument_id, point)
        state.updated.append(instrument_id)

        event = self._alerts.evaluate(instrument_id, point)
        if event is not None:
            state.alerts.append(event)

        logger.debug("Price updated", instrument_id=instrument_id, price=format_fixed(value))

    async def _with_timeout(self, awaitable):
        if self.fetch_timeout_seconds:
            return await asyncio.wait_for(awaitable, timeout=self.fetch_timeout_seconds)
        return await awaitable

    @staticmethod
    def _coerce_price(instrument_id: str, raw: Any) -> int:
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise FetchFailure(instrument_id, f"malformed price {raw!r}")
        return raw

    @staticmethod
    def _wrap(instrument_id: Optional[str], error: Exception) -> FetchFailure:
        if isinstance(error, asyncio.TimeoutError):
            reason = "timed out"
        else:
            reason = str(error) or type(error).__name__
        return FetchFailure(instrument_id, reason, cause=error)

    def _record_failure(self, state: _TickState, instrument_id: str,
                        failure: FetchFailure) -> None:
        state.failures[instrument_id] = failure.reason
        logger.warning("Price fetch failed", instrument_id=instrument_id,
                       tick=state.tick, reason=failure.reason)

    def _notify(self, result: TickResult) -> None:
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception as e:
                logger.error("Error in tick listener", error=str(e), tick=result.tick)
