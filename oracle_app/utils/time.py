"""
Time helpers for price observations.

Observation timestamps are taken when a fetch completes and are always
timezone-aware UTC.
"""

from datetime import datetime, timezone
from typing import Optional


def get_market_time(market_ts: Optional[datetime] = None) -> datetime:
    """
    Get the observation time, preferring a source supplied timestamp.

    Args:
        market_ts: Optional timestamp reported by the price source

    Returns:
        UTC datetime, falling back to wall-clock time if unavailable
    """
    if market_ts is not None:
        return market_ts

    return datetime.now(timezone.utc)


def format_market_time(market_ts: datetime) -> str:
    """Format a timestamp as ISO8601 for read models and logging."""
    return market_ts.isoformat()


def time_elapsed_seconds(start_time: datetime, end_time: Optional[datetime] = None) -> float:
    """
    Calculate elapsed time in seconds between two timestamps.

    Args:
        start_time: Start timestamp
        end_time: End timestamp, defaults to now

    Returns:
        Elapsed time in seconds
    """
    if end_time is None:
        end_time = datetime.now(timezone.utc)

    return (end_time - start_time).total_seconds()
