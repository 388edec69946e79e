"""Utility functions for time handling.

All timestamps should be UTC and timezone-aware. The SQLite store writes its
own UTC timestamps; parsing helpers here accept either ISO-8601 strings or
SQLite's ``YYYY-MM-DD HH:MM:SS`` form.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def iso_now(*, timespec: str | None = None) -> str:
    """Return current UTC time as an ISO8601 string (timezone-aware)."""
    now = utc_now()
    if timespec:
        return now.isoformat(timespec=timespec)
    return now.isoformat()


def coerce_datetime(value: Any) -> datetime | None:
    """
    Coerce value to datetime, returning None on failure.

    Args:
        value: String or datetime to coerce

    Returns:
        Datetime in timezone.utc or None if invalid
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.endswith("Z"):
            raw = raw.replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    else:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed


def split_minutes_seconds(total_seconds: float) -> tuple[int, int]:
    """Round *total_seconds* up to whole seconds and split into ``(minutes, seconds)``."""
    whole = max(0, math.ceil(total_seconds))
    return whole // 60, whole % 60
