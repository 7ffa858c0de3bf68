"""
Timestamp parsing and formatting utilities.

Provides utilities for normalizing data point timestamps (datetimes, ISO8601
strings, Unix seconds and milliseconds) to aware UTC datetimes, and for
formatting the short labels drawn on the chart axis.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Union

logger = logging.getLogger(__name__)

TimestampInput = Union[datetime, str, int, float]


def parse_timestamp(value: Optional[TimestampInput]) -> Optional[datetime]:
    """
    Parse a timestamp from various formats into an aware UTC datetime.

    Supports:
    - ``datetime`` objects (naive values are assumed to be UTC)
    - ISO8601 strings (with or without 'Z' suffix)
    - Unix timestamps in seconds (< 10000000000)
    - Unix timestamps in milliseconds (≥ 10000000000)

    Parameters
    ----------
    value : datetime, str, int, float, or None
        The timestamp to parse

    Returns
    -------
    datetime or None
        Parsed datetime in UTC, or None if parsing fails

    Examples
    --------
    >>> parse_timestamp("2025-10-15T12:00:00Z")
    datetime.datetime(2025, 10, 15, 12, 0, tzinfo=datetime.timezone.utc)
    >>> parse_timestamp(1697385600)  # Unix seconds
    datetime.datetime(2023, 10, 15, 16, 0, tzinfo=datetime.timezone.utc)
    >>> parse_timestamp(1697385600000)  # Unix milliseconds
    datetime.datetime(2023, 10, 15, 16, 0, tzinfo=datetime.timezone.utc)
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return ensure_utc(value)

    if isinstance(value, str):
        return _parse_iso8601(value)

    # bool is an int subclass but never a timestamp
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _parse_unix_timestamp(value)

    return None


def ensure_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime (naive input is taken as UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _parse_iso8601(value: str) -> Optional[datetime]:
    """
    Parse an ISO8601 timestamp string.

    Handles trailing 'Z' by converting to '+00:00'.
    """
    if not value:
        return None

    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return ensure_utc(datetime.fromisoformat(value))
    except (ValueError, TypeError):
        logger.warning(
            "timestamps.parse_iso8601_failed",
            extra={"value": value, "error": "invalid format"},
        )
        return None


def _parse_unix_timestamp(value: Union[int, float]) -> Optional[datetime]:
    """
    Parse a Unix timestamp (seconds or milliseconds since epoch).

    Values ≥ 10000000000 are treated as milliseconds.
    """
    try:
        if value >= 10000000000:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (ValueError, TypeError, OverflowError, OSError):
        logger.warning(
            "timestamps.parse_unix_failed",
            extra={"value": value, "error": "invalid timestamp"},
        )
        return None


def format_clock_label(dt: datetime) -> str:
    """
    Format the UTC wall-clock hour and minute of ``dt`` as ``HH:MM``.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> format_clock_label(datetime(2025, 10, 15, 7, 5, tzinfo=timezone.utc))
    '07:05'
    """
    return ensure_utc(dt).strftime("%H:%M")


def format_short_datetime(dt: datetime) -> str:
    """
    Format ``dt`` in UTC as ``M/D HH:MM`` (month and day without padding).

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> format_short_datetime(datetime(2025, 3, 9, 7, 5, tzinfo=timezone.utc))
    '3/9 07:05'
    """
    utc = ensure_utc(dt)
    return f"{utc.month}/{utc.day} {utc:%H:%M}"


def to_iso8601(dt: datetime) -> str:
    """
    Convert datetime to ISO8601 string with 'Z' suffix for UTC.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> to_iso8601(datetime(2025, 10, 15, 12, 0, 0, tzinfo=timezone.utc))
    '2025-10-15T12:00:00Z'
    """
    iso_str = ensure_utc(dt).isoformat()
    if iso_str.endswith("+00:00"):
        iso_str = iso_str[:-6] + "Z"
    return iso_str
