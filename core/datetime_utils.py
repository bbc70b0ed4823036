"""
UTC-first datetime utilities for Clinic Service API.

This module provides consistent datetime handling across the application:
- All datetimes are stored and processed in UTC
- Stored timestamps are truncated to milliseconds (BSON date precision)
- ISO 8601 format used for string serialization

Usage:
    from core.datetime_utils import utc_now, to_utc, format_iso

    now = utc_now()
    iso_str = format_iso(now)  # "2024-01-15T05:00:00.123Z"
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Get current datetime in UTC with timezone info, at millisecond precision.

    MongoDB stores dates with millisecond resolution, so truncating here
    keeps a freshly written timestamp equal to the one read back.

    Returns:
        datetime: Current time as timezone-aware datetime in UTC.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    - If datetime is naive (no timezone), assumes it's already UTC
    - If datetime has timezone, converts to UTC

    Args:
        dt: Datetime to convert.

    Returns:
        datetime: Timezone-aware datetime in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_iso(dt: datetime) -> str:
    """
    Format datetime as ISO 8601 string with 'Z' suffix and milliseconds.

    Example:
        >>> format_iso(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        '2024-01-15T10:30:00.000Z'
    """
    utc_dt = to_utc(dt)
    return utc_dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_dt.microsecond // 1000:03d}Z"
