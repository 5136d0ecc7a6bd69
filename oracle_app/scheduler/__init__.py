"""
Recurring poll cycle that drives the engine.

Each tick fetches every registered instrument from the price source and fans
successful prices out to the history store and the alert engine.
"""

from .poller import PollScheduler

__all__ = ["PollScheduler"]
