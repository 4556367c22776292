from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Protocol

from .entities import DailyResponse, OverviewResponse, ReadingsResponse
from .geometry import ChartArea, DragZoomState

if TYPE_CHECKING:  # pragma: no cover
    from geodash.app.chart_model import LineChart

KeyListener = Callable[[str, str], None]
"""Keyboard callback receiving ``(key, target_tag)``, e.g. ``("ArrowLeft", "BODY")``."""


# ---- Ports (Hexagonal boundaries) ----
class DashboardApiPort(Protocol):
    """Read-only aggregation endpoints of the data API.

    Implementations abort the previous in-flight request when a new one is
    issued; the superseded awaiter raises ``RequestAborted``.
    """

    async def fetch_overview(
        self, *, date_from: str = "", date_to: str = "", resolution: str = ""
    ) -> OverviewResponse: ...

    async def fetch_daily(self, *, date: str = "") -> DailyResponse: ...

    async def fetch_readings(
        self,
        *,
        page: int = 1,
        gateway_id: str = "",
        date_from: str = "",
        date_to: str = "",
        sort: str = "",
        order: str = "",
    ) -> ReadingsResponse: ...


class HistoryPort(Protocol):
    """Browser session history (pushState / replaceState / location.href)."""

    def push(self, href: str) -> None: ...
    def replace(self, href: str) -> None: ...
    def current(self) -> str: ...


class ChartSurface(Protocol):
    """Drawing target owned by one chart instance (the canvas)."""

    def chart_area(self) -> ChartArea: ...
    def render(self, chart: "LineChart", *, duration_ms: int, easing: str) -> None: ...
    def draw_overlay(self, state: DragZoomState, area: ChartArea) -> None: ...
    def set_cursor(self, cursor: str) -> None: ...
    def dispose(self) -> None: ...
    def attach(self, gestures: "GestureSink") -> None: ...


class KeyboardPort(Protocol):
    """Document-level keydown registration."""

    def add_listener(self, listener: KeyListener) -> None: ...


class TableViewport(Protocol):
    """Scrollable container around a data table."""

    def scroll_row_to_center(self, row_index: int) -> None: ...


class GestureSink(Protocol):
    """Pointer events forwarded from a chart surface, in surface pixels."""

    def pointer_down(self, x: float) -> None: ...
    def pointer_move(self, x: float) -> None: ...
    def pointer_up(self) -> None: ...
    def pointer_leave(self) -> None: ...
    def wheel(self, delta_y: float) -> bool: ...
    def double_click(self, x: float) -> None: ...
