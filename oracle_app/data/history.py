"""Bounded per-instrument price history."""

from collections import deque
from typing import Optional

import structlog

from .models import PricePoint
from .registry import FeedRegistry

logger = structlog.get_logger(__name__)


class HistoryStore:
    """
    Rolling window of the most recent prices for each instrument.

    Buffers hold at most `window_size` points, oldest evicted first, ordered
    by observation time. Non-positive values mean "no data" and are dropped.
    """

    def __init__(self, registry: FeedRegistry, window_size: int = 10):
        if window_size <= 0:
            raise ValueError("window_size must be positive")
        self._registry = registry
        self.window_size = window_size
        self._buffers: dict[str, deque] = {}  # deque[PricePoint], maxlen=window_size

    def _buffer(self, instrument_id: str) -> deque:
        """Get or create the buffer for an instrument."""
        if instrument_id not in self._buffers:
            self._buffers[instrument_id] = deque(maxlen=self.window_size)
        return self._buffers[instrument_id]

    def append(self, instrument_id: str, point: PricePoint) -> bool:
        """
        Append a price point, evicting the oldest entry when full.

        Args:
            instrument_id: Registered instrument identifier
            point: Observed price for that instrument

        Returns:
            True if the point was stored, False if it was dropped

        Raises:
            UnknownInstrument: If the identifier is not registered
            ValueError: If the point belongs to a different instrument
        """
        self._registry.resolve(instrument_id)

        if point.instrument_id != instrument_id:
            raise ValueError(
                f"Point for {point.instrument_id} appended to {instrument_id} history"
            )

        if point.value <= 0:
            logger.debug("Dropping non-positive price", instrument_id=instrument_id,
                         value=point.value)
            return False

        buffer = self._buffer(instrument_id)
        if buffer and point.observed_at < buffer[-1].observed_at:
            logger.warning(
                "Dropping out-of-order price",
                instrument_id=instrument_id,
                observed_at=point.observed_at.isoformat(),
                newest=buffer[-1].observed_at.isoformat()
            )
            return False

        buffer.append(point)
        return True

    def snapshot(self, instrument_id: str) -> list[PricePoint]:
        """Copy of the buffer, oldest first; empty if nothing observed yet."""
        self._registry.resolve(instrument_id)
        return list(self._buffers.get(instrument_id, ()))

    def values(self, instrument_id: str) -> list[int]:
        """Snapshot values only, oldest first."""
        return [point.value for point in self.snapshot(instrument_id)]

    def latest(self, instrument_id: str) -> Optional[PricePoint]:
        """Most recent stored point, None if the buffer is empty."""
        snapshot = self.snapshot(instrument_id)
        return snapshot[-1] if snapshot else None

    def clear(self, instrument_id: Optional[str] = None) -> None:
        """Drop stored history for one instrument or for all of them."""
        if instrument_id is None:
            self._buffers.clear()
            return
        self._registry.resolve(instrument_id)
        self._buffers.pop(instrument_id, None)
