"""
Timezone-aware datetime utilities.
"""

import math
from datetime import datetime, timezone

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Returns:
        datetime: Current UTC time with tzinfo set to UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def elapsed_seconds(start: datetime, end: datetime) -> int:
    """
    Whole seconds between two instants, floored and never negative.

    Example:
        >>> elapsed_seconds(t0, t0 + timedelta(milliseconds=2999))
        2
    """
    delta = ensure_utc(end) - ensure_utc(start)
    return max(0, math.floor(delta.total_seconds()))
