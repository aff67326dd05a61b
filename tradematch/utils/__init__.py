"""Utility functions for UTC time handling."""

from .timestamps import (
    ensure_utc,
    epoch_seconds,
    format_timestamp,
    parse_timestamp,
    utc_now,
)

__all__ = [
    "utc_now",
    "ensure_utc",
    "epoch_seconds",
    "format_timestamp",
    "parse_timestamp",
]
