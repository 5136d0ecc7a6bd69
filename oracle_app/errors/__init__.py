"""
Error classification for the price feed engine.

Every error raised by this package is recoverable: callers may retry with
corrected input, and none of them stop the poll scheduler.
"""

from .feed import FetchFailure, RecoverableError
from .lookup import LookupFailure, UnknownInstrument
from .trading import (
    InsufficientFunds,
    InsufficientHoldings,
    NoPriceAvailable,
    TradeRejected,
)
from .validation import (
    ConfigurationError,
    InvalidThreshold,
    InvalidTradeQuantity,
    ValidationFailure,
)

__all__ = [
    # Lookup
    "LookupFailure",
    "UnknownInstrument",
    # Validation
    "ValidationFailure",
    "InvalidThreshold",
    "InvalidTradeQuantity",
    "ConfigurationError",
    # Trading
    "TradeRejected",
    "NoPriceAvailable",
    "InsufficientFunds",
    "InsufficientHoldings",
    # Feed
    "RecoverableError",
    "FetchFailure",
]
