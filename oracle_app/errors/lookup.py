"""Lookup errors raised when an identifier cannot be resolved."""

from typing import Any, Dict, Optional


class LookupFailure(Exception):
    """Base class for failed identifier lookups."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class UnknownInstrument(LookupFailure):
    """Instrument identifier is not present in the feed registry."""

    def __init__(self, instrument_id: Any, **kwargs):
        super().__init__(f"Unknown instrument: {instrument_id!r}", **kwargs)
        self.instrument_id = instrument_id
