"""Timestamp utilities for UTC handling and storage formatting.

Timestamps are stored as fixed-width ISO 8601 strings with microseconds and a
``Z`` suffix, so lexical ordering in the store equals chronological ordering.
"""

from datetime import datetime, timezone
from typing import Optional

STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

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


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime for storage.

    Example:
        >>> format_timestamp(datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc))
        '2025-11-04T12:00:00.000000Z'
    """
    if dt is None:
        return None
    return ensure_utc(dt).strftime(STORAGE_FORMAT)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp back into an aware UTC datetime.

    Accepts the storage format and the other ISO 8601 forms an external
    writer may leave behind:
    - 2025-11-04T12:00:00.000000Z
    - 2025-11-04T12:00:00+00:00
    - 2025-11-04 12:00:00+00 (PostgreSQL timestamptz text)
    - 2025-11-04T12:00:00 (treated as UTC)
    - 2025-11-04

    Returns:
        Timezone-aware datetime in UTC, or None if the value is blank or
        cannot be parsed
    """
    if not isinstance(value, str) or not value.strip():
        return None

    cleaned = value.strip()
    if cleaned.endswith(("Z", "z")):
        cleaned = cleaned[:-1] + "+00:00"
    # fromisoformat before 3.11 rejects a bare "+HH" offset
    if len(cleaned) > 3 and cleaned[-3] in "+-" and cleaned[-2:].isdigit() and ":" in cleaned:
        cleaned = cleaned + ":00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        return None
