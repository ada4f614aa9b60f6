"""Timestamp utilities for run bookkeeping and report output."""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Get current UTC time as a timezone-aware datetime.

    Example:
        >>> utc_now().tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC; aware ones are converted.

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Timezone-aware datetime in UTC, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def format_timestamp(dt: Optional[datetime], include_microseconds: bool = False) -> str:
    """Format a datetime as an ISO 8601 string in UTC with a 'Z' suffix.

    Example:
        >>> format_timestamp(datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc))
        '2026-01-05T09:30:00Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return ""

    if include_microseconds:
        return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%SZ")


def elapsed_seconds(started_at: datetime, finished_at: datetime) -> float:
    """Seconds between two timestamps, never negative."""
    return max((finished_at - started_at).total_seconds(), 0.0)
