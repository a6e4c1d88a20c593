#!/usr/bin/env python3
"""
Utility functions for shaping API responses.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from core.utils import ensure_utc


def safe_float(value: Optional[Any], default: Optional[float] = 0.0) -> Optional[float]:
    """Convert Decimal/int/str to float, falling back to ``default``."""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return float(value)
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def safe_id(value: Optional[Any]) -> Optional[str]:
    """UUIDs and other ids as strings; None stays None."""
    if value is None:
        return None
    return str(value)


def safe_datetime_iso(dt: Optional[datetime]) -> Optional[str]:
    """
    ISO-8601 string in UTC.

    SQLite hands back naive datetimes; they are stored as UTC so the
    offset is attached before formatting.
    """
    if dt is None:
        return None
    return ensure_utc(dt).isoformat()


def safe_date_iso(value: Optional[Any]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
