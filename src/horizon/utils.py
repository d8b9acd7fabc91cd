"""Shared utilities for Horizon.

Date and rounding helpers used by the session, statistics and storage
modules. All datetimes handled here are timezone-aware UTC.
"""

import math
from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp into an aware UTC datetime.

    Accepts a trailing 'Z'. Naive timestamps are taken to be UTC.

    Raises:
        ValueError: If the value is not a valid ISO 8601 timestamp
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid timestamp: {value!r}")
    text = value.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as canonical UTC ISO 8601 with milliseconds.

    Example:
        2024-01-15T10:00:00.000Z
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime('%Y-%m-%dT%H:%M:%S.') + f"{dt.microsecond // 1000:03d}Z"


def local_date_str(dt: datetime, timezone_offset: int = 0) -> str:
    """Return the YYYY-MM-DD date of dt shifted by an offset in minutes.

    Args:
        dt: Aware UTC datetime
        timezone_offset: Minutes east of UTC (e.g. -480 for PST, 600 for AEST)
    """
    local = dt.astimezone(timezone.utc) + timedelta(minutes=timezone_offset)
    return local.date().isoformat()


def get_monday(dt: datetime) -> datetime:
    """Return 00:00:00 UTC of the Monday on or before dt's UTC date."""
    dt = dt.astimezone(timezone.utc) if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
    monday = dt - timedelta(days=dt.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, unlike Python's round-half-even.

    Example:
        round_half_up(0.25, 1) -> 0.3
        round_half_up(2.5) -> 3
    """
    factor = 10 ** digits
    result = math.floor(value * factor + 0.5) / factor
    return int(result) if digits == 0 else result


def minutes_to_hours(minutes: float) -> float:
    """Convert minutes to hours rounded to one decimal place."""
    return round_half_up(minutes / 60, 1)


def minutes_between(start: datetime, end: datetime) -> float:
    """Elapsed minutes from start to end (negative if end precedes start)."""
    return (end - start).total_seconds() / 60
