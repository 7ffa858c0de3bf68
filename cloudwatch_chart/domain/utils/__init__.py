"""
Domain utilities for timestamp handling.
"""

from .timestamps import (
    ensure_utc,
    format_clock_label,
    format_short_datetime,
    parse_timestamp,
    to_iso8601,
)

__all__ = [
    "ensure_utc",
    "format_clock_label",
    "format_short_datetime",
    "parse_timestamp",
    "to_iso8601",
]
