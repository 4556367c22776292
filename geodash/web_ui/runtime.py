"""NiceGUI runtime bridges for the dashboard core.

This module adapts browser-side concerns to the ports the core depends on:
an ECharts element becomes a ``ChartSurface``, ``history.pushState`` becomes a
``HistoryPort``, a scrollable div becomes a ``TableViewport``. ``WebSession``
composes them with one ``Dashboard`` per connected browser tab.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Callable, Dict, List, Optional

from nicegui import ui

from geodash.adapters.dashboard_rest import DashboardRestAdapter
from geodash.adapters.history_memory import MemoryHistory
from geodash.adapters.keyboard_bus import KeyboardBus
from geodash.app.chart_model import LineChart
from geodash.app.dashboard import Dashboard
from geodash.app.settings import DashboardSettings
from geodash.domain.geometry import ChartArea, DragZoomState
from geodash.domain.ports import ChartSurface, GestureSink, TableViewport
from geodash.viewmodels.document import Document

LOGGER = logging.getLogger(__name__)

CHART_HEIGHT_PX = 320
GRID_PADDING = {"left": 56, "top": 32, "right": 24, "bottom": 28}
ECHARTS_EASING = {"easeInOutQuart": "quarticInOut", "linear": "linear"}
OVERLAY_FILL = "rgba(59, 130, 246, 0.12)"
OVERLAY_STROKE = "#3b82f6"
CLAMP_COLOR = "#f59e0b"


def _event_args(args: Any) -> List[Any]:
    if isinstance(args, list):
        return args
    if args is None:
        return []
    return [args]


class EChartSurface(ChartSurface):
    """``ui.echart`` element driven by a ``LineChart``."""

    def __init__(self, element: ui.echart, width: float = 800.0) -> None:
        self.element = element
        self.width = float(width)
        self.gestures: Optional[GestureSink] = None
        self._events_bound = False
        self._disposed = False

    @staticmethod
    def initial_options() -> Dict[str, Any]:
        return {
            "animation": True,
            "grid": {**GRID_PADDING, "containLabel": False},
            "tooltip": {"trigger": "axis"},
            "legend": {"top": 0},
            "xAxis": {"type": "category", "boundaryGap": False, "data": []},
            "yAxis": {"type": "value", "name": "kWh"},
            "series": [],
            "graphic": [],
        }

    def chart_area(self) -> ChartArea:
        return ChartArea(
            left=GRID_PADDING["left"],
            top=GRID_PADDING["top"],
            right=max(GRID_PADDING["left"], self.width - GRID_PADDING["right"]),
            bottom=CHART_HEIGHT_PX - GRID_PADDING["bottom"],
        )

    def render(self, chart: LineChart, *, duration_ms: int, easing: str) -> None:
        if self._disposed:
            return
        ticks = chart.options.ticks
        count = len(chart.labels)
        interval: Any = "auto"
        if ticks.max_ticks:
            interval = max(0, math.ceil(count / ticks.max_ticks) - 1)

        options = self.element.options
        options["animationDurationUpdate"] = duration_ms
        options["animationEasingUpdate"] = ECHARTS_EASING.get(easing, "cubicInOut")
        options["xAxis"] = {
            "type": "category",
            "boundaryGap": False,
            "data": [chart.tick_label(i) for i in range(count)],
            "axisLabel": {"interval": interval},
        }
        options["yAxis"] = {"type": "value", "name": chart.options.y_title}
        options["legend"] = {
            "top": 0,
            "selected": {ds.label: not ds.hidden for ds in chart.datasets},
        }
        options["series"] = [
            {
                "id": ds.series_key,
                "name": ds.label,
                "type": "line",
                "smooth": 0.3,
                "data": list(ds.points),
                "showSymbol": ds.point_radius > 0,
                "symbolSize": ds.point_radius * 2,
                "lineStyle": {"width": ds.border_width, "color": ds.color},
                "itemStyle": {"color": ds.color},
                "areaStyle": {"color": ds.background} if not ds.is_total else None,
            }
            for ds in chart.datasets
        ]
        self.element.update()

    def draw_overlay(self, state: DragZoomState, area: ChartArea) -> None:
        if self._disposed:
            return
        graphics: List[Dict[str, Any]] = []
        span = state.span(area)
        if span is not None:
            x, width = span
            graphics.append(
                {
                    "type": "rect",
                    "shape": {"x": x, "y": area.top, "width": width, "height": area.height},
                    "style": {"fill": OVERLAY_FILL, "stroke": OVERLAY_STROKE},
                    "silent": True,
                }
            )
            if state.clamp_left:
                graphics.append(self._clamp_marker(area.left, area))
            if state.clamp_right:
                graphics.append(self._clamp_marker(area.right - 3, area))
        self.element.options["graphic"] = graphics
        self.element.update()

    @staticmethod
    def _clamp_marker(x: float, area: ChartArea) -> Dict[str, Any]:
        return {
            "type": "rect",
            "shape": {"x": x, "y": area.top, "width": 3, "height": area.height},
            "style": {"fill": CLAMP_COLOR},
            "silent": True,
        }

    def set_cursor(self, cursor: str) -> None:
        if not self._disposed:
            self.element.style(f"cursor: {cursor}")

    def dispose(self) -> None:
        self._disposed = True
        self.gestures = None

    def attach(self, gestures: GestureSink) -> None:
        self.gestures = gestures
        if self._events_bound:
            return
        self._events_bound = True
        position = "(e) => emit(e.offsetX, e.currentTarget.clientWidth)"
        self.element.on("mousedown", lambda e: self._pointer("pointer_down", e.args), js_handler=position)
        self.element.on(
            "mousemove",
            lambda e: self._pointer("pointer_move", e.args),
            js_handler=position,
            throttle=0.03,
        )
        self.element.on("mouseup", lambda _: self._call("pointer_up"))
        self.element.on("mouseleave", lambda _: self._call("pointer_leave"))
        self.element.on("dblclick", lambda e: self._pointer("double_click", e.args), js_handler=position)
        self.element.on(
            "wheel",
            lambda e: self._wheel(e.args),
            js_handler="(e) => { e.preventDefault(); emit(e.deltaY); }",
        )

    # ------------------------------------------------------------------
    # Event forwarding
    # ------------------------------------------------------------------
    def _pointer(self, method: str, args: Any) -> None:
        values = _event_args(args)
        if not values:
            return
        if len(values) > 1 and values[1]:
            self.width = float(values[1])
        self._call(method, float(values[0]))

    def _wheel(self, args: Any) -> None:
        values = _event_args(args)
        if values:
            self._call("wheel", float(values[0]))

    def _call(self, method: str, *args: float) -> None:
        sink = self.gestures
        if sink is None:
            return
        getattr(sink, method)(*args)


class ScrollViewport(TableViewport):
    """Scroll the n-th body row of the table inside ``element`` into the center."""

    def __init__(self, element: ui.element) -> None:
        self.element = element

    def scroll_row_to_center(self, row_index: int) -> None:
        selector = f"#c{self.element.id} tbody tr:nth-child({int(row_index) + 1})"
        ui.run_javascript(
            f"document.querySelector({json.dumps(selector)})"
            "?.scrollIntoView({block: 'center', behavior: 'smooth'});"
        )


class BrowserHistory(MemoryHistory):
    """Session history mirrored into the browser's address bar."""

    def __init__(self, initial: str = "/") -> None:
        super().__init__(initial)
        self.client: Any = None

    def push(self, href: str) -> None:
        super().push(href)
        self._run(f"history.pushState(null, '', {json.dumps(href)});")

    def replace(self, href: str) -> None:
        super().replace(href)
        self._run(f"history.replaceState(null, '', {json.dumps(href)});")

    def _run(self, code: str) -> None:
        if self.client is not None:
            self.client.run_javascript(code)


POPSTATE_EVENT = "geodash_popstate"
POPSTATE_SCRIPT = (
    "<script>window.addEventListener('popstate', () => "
    f"emitEvent('{POPSTATE_EVENT}', window.location.pathname + window.location.search));</script>"
)


class WebSession:
    """One dashboard per browser tab plus the NiceGUI region bindings."""

    def __init__(
        self,
        settings: DashboardSettings,
        initial_url: str,
        *,
        render_page: Callable[["WebSession"], Dict[str, Callable[[], None]]],
    ) -> None:
        self.settings = settings
        self.history = BrowserHistory(initial_url)
        self.keyboard = KeyboardBus()
        self.document = Document()
        self.api = DashboardRestAdapter(settings.api_url, request_timeout_s=settings.request_timeout_s)
        self.dashboard = Dashboard(
            self.api,
            self.history,
            document=self.document,
            keyboard=self.keyboard,
            on_error=self.notify_error,
        )
        self.container: Optional[ui.element] = None
        self._render_page = render_page
        self._regions: Dict[str, Callable[[], None]] = {}
        self.document.subscribe(self._on_mutation)

    def attach(self, container: ui.element, client: Any) -> None:
        self.container = container
        self.history.client = client

    def start(self) -> None:
        self.dashboard.start()

    async def close(self) -> None:
        LOGGER.debug("Closing session at %s", self.history.current())
        await self.dashboard.aclose()

    # ------------------------------------------------------------------
    # Browser -> core
    # ------------------------------------------------------------------
    def follow(self, href: str) -> None:
        self.dashboard.router.handle_link_click(href, True)

    def on_popstate(self, href: Any) -> None:
        self.history.sync(str(href or "/"))
        self.dashboard.router.on_popstate()

    def on_key(self, key: str) -> None:
        self.keyboard.press(key, "BODY")

    # ------------------------------------------------------------------
    # Core -> browser
    # ------------------------------------------------------------------
    def _on_mutation(self, region: str) -> None:
        if self.container is None:
            return
        if region == "root":
            self.container.clear()
            with self.container:
                self._regions = self._render_page(self)
            return
        refresh = self._regions.get(region)
        if refresh is not None:
            refresh()

    def notify_error(self, exc: BaseException) -> None:
        if self.container is None:
            return
        with self.container:
            ui.notify(str(exc), color="negative", close_button="OK")


__all__ = [
    "BrowserHistory",
    "EChartSurface",
    "POPSTATE_EVENT",
    "POPSTATE_SCRIPT",
    "ScrollViewport",
    "WebSession",
]
