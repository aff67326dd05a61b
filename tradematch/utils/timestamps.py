"""Timestamp utilities for UTC handling.

All timestamps inside the engine are timezone-aware UTC datetimes. Storage
keeps them as ISO 8601 strings with an explicit ``Z`` suffix.
"""

from datetime import datetime, timezone
from typing import Optional

STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC; aware datetimes are converted.

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Timezone-aware datetime in UTC, or None if input is None

    Example:
        >>> naive = datetime(2025, 11, 4, 12, 0, 0)
        >>> ensure_utc(naive).tzinfo == timezone.utc
        True
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def epoch_seconds(dt: Optional[datetime]) -> float:
    """Seconds since the Unix epoch, with a missing datetime counted as epoch 0.

    Used as a sort key, so a posting without a timestamp orders as the
    oldest possible posting.

    Example:
        >>> epoch_seconds(None)
        0.0
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return 0.0
    return dt_utc.timestamp()


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime for database storage.

    Args:
        dt: Datetime to format (naive values are treated as UTC)

    Returns:
        ISO 8601 string with microseconds and 'Z' suffix, or None
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return None
    return dt_utc.strftime(STORAGE_FORMAT)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ISO 8601 string back into a UTC datetime.

    Accepts values with or without microseconds and with or without the
    trailing 'Z'. Empty values return None.

    Example:
        >>> parse_timestamp("2025-11-04T12:00:00Z").hour
        12
    """
    if not value:
        return None

    stripped = value.strip().rstrip("Z")
    try:
        parsed = datetime.strptime(stripped, "%Y-%m-%dT%H:%M:%S.%f")
    except ValueError:
        parsed = datetime.fromisoformat(stripped)

    return ensure_utc(parsed)
