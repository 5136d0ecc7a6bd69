"""
Validation errors for user supplied configuration and trade input.

Raised synchronously to the caller before any state is touched.
"""

from typing import Any, Dict, Optional


class ValidationFailure(Exception):
    """Base class for rejected input."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class InvalidThreshold(ValidationFailure):
    """Alert bounds are malformed (negative, or upper not above lower)."""

    def __init__(self, message: str, upper_bound: Optional[int] = None,
                 lower_bound: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.upper_bound = upper_bound
        self.lower_bound = lower_bound


class InvalidTradeQuantity(ValidationFailure):
    """Trade quantity is not strictly positive."""

    def __init__(self, quantity: int, **kwargs):
        super().__init__(f"Trade quantity must be positive, got {quantity}", **kwargs)
        self.quantity = quantity


class ConfigurationError(ValidationFailure):
    """Engine configuration failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
