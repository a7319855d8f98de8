"""
Shared model helpers.

All timestamps handled by the engine are timezone-aware UTC. Naive values
coming from callers are assumed to already be UTC.
"""

from datetime import datetime, timezone

SECONDS_PER_DAY = 86400.0


def utcnow() -> datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_between(earlier: datetime, later: datetime) -> float:
    """Elapsed days from ``earlier`` to ``later``, never negative."""
    delta = ensure_utc(later) - ensure_utc(earlier)
    return max(0.0, delta.total_seconds() / SECONDS_PER_DAY)


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return min(upper, max(lower, value))
