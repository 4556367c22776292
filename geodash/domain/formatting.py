"""Pure formatting helpers for tables, stat cards and pills."""

from __future__ import annotations

import datetime as _dt
import html
from typing import Dict, Optional

GATEWAY_NAMES: Dict[str, str] = {
    "8813BF342F64": "3-Ton",
    "8813BF34217C": "4-Ton",
}


def gateway_name(gateway_id: str) -> str:
    """Return the friendly unit name for a gateway id, or the id itself."""
    return GATEWAY_NAMES.get(gateway_id, gateway_id)


def escape_html(value: Optional[str]) -> str:
    """Escape text for embedding in HTML; ``None`` and empty yield ``""``."""
    if not value:
        return ""
    return html.escape(str(value), quote=True).replace("&#x27;", "&#039;")


def format_power(kwh: Optional[float]) -> str:
    """Format an energy value in kWh with two decimals; ``None`` -> ``-``."""
    if kwh is None:
        return "-"
    return f"{float(kwh):.2f}"


def format_runtime(hours: Optional[float]) -> str:
    """Format a runtime in hours with one decimal; ``None`` -> ``-``."""
    if hours is None:
        return "-"
    return f"{float(hours):.1f}"


def format_timestamp(unix_ms: int, *, tz: Optional[_dt.tzinfo] = None) -> str:
    """Render a Unix-millisecond timestamp like ``Mar 15, 2024, 09:45 AM``."""
    moment = _dt.datetime.fromtimestamp(int(unix_ms) / 1000.0, tz=tz)
    return f"{moment:%b} {moment.day}, {moment:%Y}, {moment:%I:%M %p}"


def format_count(value: int) -> str:
    """Group thousands: ``12345`` -> ``12,345``."""
    return f"{int(value):,}"


def gateway_badge(gateway_id: str) -> str:
    """Return the badge markup used in table unit columns."""
    safe_id = escape_html(gateway_id)
    return f'<span class="gateway-badge" title="{safe_id}">{escape_html(gateway_name(gateway_id))}</span>'


__all__ = [
    "GATEWAY_NAMES",
    "escape_html",
    "format_count",
    "format_power",
    "format_runtime",
    "format_timestamp",
    "gateway_badge",
    "gateway_name",
]
