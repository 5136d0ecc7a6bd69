"""
Price source contract.

The engine only depends on the abstract PriceSource. How prices are
physically obtained (RPC, HTTP, WebSocket) lives outside this package.
"""

from .base import PriceSource
from .memory import ScriptedPriceSource

__all__ = ["PriceSource", "ScriptedPriceSource"]
