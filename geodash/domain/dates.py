"""Calendar helpers shared by page controllers and chart gestures.

Dates travel through the dashboard as ISO ``YYYY-MM-DD`` strings because that
is what the data API echoes back and what the browser date inputs hold.
"""

from __future__ import annotations

import datetime as _dt
from typing import Callable, Optional

Today = Callable[[], str]


def parse_date(text: str) -> Optional[_dt.date]:
    """Parse the ``YYYY-MM-DD`` prefix of ``text``; return ``None`` when invalid."""
    token = str(text or "").strip()[:10]
    if len(token) != 10:
        return None
    try:
        return _dt.date.fromisoformat(token)
    except ValueError:
        return None


def add_days(date_str: str, days: int) -> str:
    """Shift an ISO date string by ``days`` calendar days."""
    parsed = parse_date(date_str)
    if parsed is None:
        raise ValueError(f"Invalid date: {date_str!r}")
    return (parsed + _dt.timedelta(days=days)).isoformat()


def date_only(label: str) -> str:
    """Truncate a bucket label (``2024-01-02 13:00``) to its date part."""
    return str(label or "")[:10]


def today_iso() -> str:
    """Return the local calendar date as ``YYYY-MM-DD``."""
    return _dt.date.today().isoformat()


__all__ = ["Today", "add_days", "date_only", "parse_date", "today_iso"]
