"""Utility functions for time handling."""

from .timestamps import (
    STORAGE_FORMAT,
    ensure_utc,
    format_timestamp,
    parse_timestamp,
    utc_now,
)

__all__ = [
    "STORAGE_FORMAT",
    "utc_now",
    "ensure_utc",
    "format_timestamp",
    "parse_timestamp",
]
