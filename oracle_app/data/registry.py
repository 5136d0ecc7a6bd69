"""Static registry of price feeds keyed by instrument identifier."""

from typing import Any, Iterable, Iterator, Optional

import structlog

from ..config.defaults import InstrumentParams
from ..errors import ConfigurationError, UnknownInstrument
from .models import FeedDescriptor, Instrument

logger = structlog.get_logger(__name__)


class FeedRegistry:
    """
    Maps logical instrument identifiers to feed descriptors.

    Built once from the static instrument table and never mutated afterwards.
    Every other component validates identifiers through `resolve`.
    """

    def __init__(self, instruments: Iterable[InstrumentParams]):
        self._feeds: dict[str, FeedDescriptor] = {}

        for params in instruments:
            if params.instrument_id in self._feeds:
                raise ConfigurationError(
                    f"Duplicate instrument identifier: {params.instrument_id}",
                    context={"instrument_id": params.instrument_id}
                )
            instrument = Instrument(
                instrument_id=params.instrument_id,
                label=params.label or params.instrument_id,
                bucket=params.bucket,
            )
            self._feeds[params.instrument_id] = FeedDescriptor(
                instrument=instrument,
                address=params.address,
            )

        logger.info("Feed registry initialized", instruments=list(self._feeds))

    def resolve(self, instrument_id: Any) -> FeedDescriptor:
        """
        Look up the feed descriptor for an instrument.

        Raises:
            UnknownInstrument: If the identifier was never registered
        """
        if not isinstance(instrument_id, str) or instrument_id not in self._feeds:
            raise UnknownInstrument(instrument_id)
        return self._feeds[instrument_id]

    def ids(self) -> list[str]:
        """Registered identifiers in registration order."""
        return list(self._feeds)

    def instruments(self, bucket: Optional[str] = None) -> list[Instrument]:
        """Registered instruments, optionally filtered by display bucket."""
        return [
            feed.instrument for feed in self._feeds.values()
            if bucket is None or feed.instrument.bucket == bucket
        ]

    def __contains__(self, instrument_id: object) -> bool:
        return isinstance(instrument_id, str) and instrument_id in self._feeds

    def __iter__(self) -> Iterator[FeedDescriptor]:
        return iter(self._feeds.values())

    def __len__(self) -> int:
        return len(self._feeds)
