"""Utility helpers for reusable functionality."""

from .datetime import (
    from_storage_datetime,
    get_app_timezone,
    parse_iso_datetime,
    to_storage_datetime,
    utc_now,
)

__all__ = [
    "from_storage_datetime",
    "get_app_timezone",
    "parse_iso_datetime",
    "to_storage_datetime",
    "utc_now",
]
