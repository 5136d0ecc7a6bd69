"""
Threshold evaluation for incoming prices.

The engine is purely reactive: the poll scheduler feeds each new price point
through `evaluate`, which compares it against the instrument's configured
bounds and appends any fired event to a bounded log.
"""

from collections import deque
from typing import Callable, Optional

import structlog

from ..data.models import AlertEvent, AlertThreshold, PricePoint
from ..data.registry import FeedRegistry
from ..errors import InvalidThreshold
from ..logging.config import get_alert_logger, log_alert_event
from ..utils.fixed_point import format_fixed

logger = structlog.get_logger(__name__)
alert_logger = get_alert_logger(__name__)

AlertCallback = Callable[[AlertEvent], None]


class AlertEngine:
    """Per-instrument upper/lower price alerts."""

    def __init__(self, registry: FeedRegistry, log_size: int = 5):
        if log_size <= 0:
            raise ValueError("log_size must be positive")
        self._registry = registry
        self._thresholds: dict[str, AlertThreshold] = {}
        self._log: deque = deque(maxlen=log_size)  # deque[AlertEvent]
        self._callbacks: list[AlertCallback] = []

    def set_threshold(
        self,
        instrument_id: str,
        upper_bound: Optional[int] = None,
        lower_bound: Optional[int] = None
    ) -> Optional[AlertThreshold]:
        """
        Replace the alert bounds for an instrument.

        Passing neither bound clears the threshold.

        Args:
            instrument_id: Registered instrument identifier
            upper_bound: Fire when price >= this value
            lower_bound: Fire when price <= this value

        Returns:
            The active threshold, or None when cleared

        Raises:
            UnknownInstrument: If the identifier is not registered
            InvalidThreshold: If a bound is negative or upper <= lower
        """
        self._registry.resolve(instrument_id)

        for name, bound in (("upper", upper_bound), ("lower", lower_bound)):
            if bound is not None and (
                not isinstance(bound, int) or isinstance(bound, bool) or bound < 0
            ):
                raise InvalidThreshold(
                    f"{name} bound must be a non-negative fixed-point int, got {bound!r}",
                    upper_bound=upper_bound,
                    lower_bound=lower_bound,
                    context={"instrument_id": instrument_id}
                )

        if upper_bound is not None and lower_bound is not None and upper_bound <= lower_bound:
            raise InvalidThreshold(
                "upper bound must exceed lower bound",
                upper_bound=upper_bound,
                lower_bound=lower_bound,
                context={"instrument_id": instrument_id}
            )

        if upper_bound is None and lower_bound is None:
            self.clear_threshold(instrument_id)
            return None

        threshold = AlertThreshold(instrument_id, upper_bound, lower_bound)
        self._thresholds[instrument_id] = threshold

        logger.info(
            "Alert threshold set",
            instrument_id=instrument_id,
            upper_bound=format_fixed(upper_bound) if upper_bound is not None else None,
            lower_bound=format_fixed(lower_bound) if lower_bound is not None else None
        )
        return threshold

    def clear_threshold(self, instrument_id: str) -> None:
        """Remove any threshold configured for the instrument."""
        self._registry.resolve(instrument_id)
        if self._thresholds.pop(instrument_id, None) is not None:
            logger.info("Alert threshold cleared", instrument_id=instrument_id)

    def threshold(self, instrument_id: str) -> Optional[AlertThreshold]:
        """Active threshold for the instrument, if any."""
        self._registry.resolve(instrument_id)
        return self._thresholds.get(instrument_id)

    def evaluate(self, instrument_id: str, point: PricePoint) -> Optional[AlertEvent]:
        """
        Check a new price against the instrument's threshold.

        Upper is checked first, so overlapping bounds report `upper`.

        Returns:
            The fired event (already appended to the log), or None

        Raises:
            UnknownInstrument: If the identifier is not registered
            ValueError: If the point belongs to a different instrument
        """
        self._registry.resolve(instrument_id)

        if point.instrument_id != instrument_id:
            raise ValueError(
                f"Point for {point.instrument_id} evaluated against {instrument_id} threshold"
            )

        threshold = self._thresholds.get(instrument_id)
        if threshold is None:
            return None

        kind = threshold.breached_by(point.value)
        if kind is None:
            return None

        bound = threshold.bound_for(kind)
        event = AlertEvent(
            instrument_id=instrument_id,
            triggering_price=point.value,
            bound_kind=kind,
            bound=bound,
            fired_at=point.observed_at,
        )
        self._log.append(event)

        log_alert_event(
            alert_logger,
            instrument_id=instrument_id,
            bound_kind=kind.value,
            price=format_fixed(point.value),
            bound=format_fixed(bound),
        )
        self._notify(event)
        return event

    def recent_alerts(self) -> list[AlertEvent]:
        """Retained events, oldest first."""
        return list(self._log)

    def register_callback(self, callback: AlertCallback) -> None:
        """Register a listener called synchronously for every fired event."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: AlertCallback) -> None:
        """Unregister alert callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify(self, event: AlertEvent) -> None:
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception as e:
                logger.error("Error in alert callback", error=str(e),
                             instrument_id=event.instrument_id)
