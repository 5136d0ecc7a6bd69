"""
Trade rejection errors for the simulated portfolio ledger.

A rejected trade never leaves a partial mutation behind.
"""

from typing import Any, Dict, Optional


class TradeRejected(Exception):
    """Base class for trades that failed validation against the ledger."""

    def __init__(self, message: str, instrument_id: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.instrument_id = instrument_id
        self.context = context or {}
        self.recoverable = True


class NoPriceAvailable(TradeRejected):
    """No successful fetch has produced a price for the instrument yet."""

    def __init__(self, instrument_id: str, **kwargs):
        super().__init__(f"No price available for {instrument_id}",
                         instrument_id=instrument_id, **kwargs)


class InsufficientFunds(TradeRejected):
    """Trade cost exceeds available cash."""

    def __init__(self, instrument_id: str, required: int, available: int, **kwargs):
        super().__init__(
            f"Insufficient funds for {instrument_id}: required {required}, available {available}",
            instrument_id=instrument_id, **kwargs
        )
        self.required = required
        self.available = available


class InsufficientHoldings(TradeRejected):
    """Sell quantity exceeds the current holding."""

    def __init__(self, instrument_id: str, requested: int, held: int, **kwargs):
        super().__init__(
            f"Insufficient holdings for {instrument_id}: requested {requested}, held {held}",
            instrument_id=instrument_id, **kwargs
        )
        self.requested = requested
        self.held = held
