"""
Price feed errors.

Fetch failures are transient and isolated per instrument and per tick. The
poll scheduler records them and moves on; they never reach ledger or alert
consumers as exceptions.
"""

from typing import Optional


class RecoverableError(Exception):
    """Mixin for errors that can be recovered from automatically."""

    def __init__(self, message: str, retry_count: int = 0,
                 max_retries: int = 3, **kwargs):
        super().__init__(message)
        self.retry_count = retry_count
        self.max_retries = max_retries
        self.recoverable = True


class FetchFailure(RecoverableError):
    """A price source could not deliver a price for one instrument."""

    def __init__(self, instrument_id: Optional[str], reason: str,
                 cause: Optional[BaseException] = None, **kwargs):
        target = instrument_id if instrument_id is not None else "<batch>"
        super().__init__(f"Fetch failed for {target}: {reason}", **kwargs)
        self.instrument_id = instrument_id
        self.reason = reason
        self.cause = cause
