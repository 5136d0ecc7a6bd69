"""
Simulated multi-asset portfolio priced off the live feed.
"""

from .portfolio import PortfolioLedger

__all__ = ["PortfolioLedger"]
