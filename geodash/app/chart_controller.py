"""Chart controllers for the overview and daily charts.

Each controller is a two-state machine, ``absent`` or ``live``:

* ``absent -> live`` on the first ``create_or_update`` call, which builds the
  ``LineChart`` and attaches this controller to the surface as its gesture
  sink, exactly once.
* ``live -> live`` on later calls: datasets are reconciled by series key and
  mutated in place, then an animated update runs.
* ``live -> absent`` on ``destroy``, issued by the page controllers when the
  router switches to a different page kind.

Gesture handlers are plain methods reading the controller's *current* labels,
zoom callback and hover target, so they never act on data from an earlier
render.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from geodash.domain.dates import Today, add_days, date_only, today_iso
from geodash.domain.geometry import DragZoomState, round_half_up
from geodash.domain.ports import ChartSurface, GestureSink, TableViewport
from geodash.domain.series import TOTAL_SERIES_ID, ChartData, Dataset, visible_total

from .chart_model import EASING, TRANSITION_MS, AxisTicks, ChartOptions, LineChart
from .filter_store import FilterState
from .timers import TimerRegistry

LOGGER = logging.getLogger(__name__)

POINT_RADIUS = {"daily": 2, "hourly": 1, "15min": 0}
MAX_TICKS = 24
WHEEL_THROTTLE_MS = 50
WHEEL_PREVIEW_MS = 600

ZoomCallback = Callable[[str, str], None]
RangeSource = Callable[[], Tuple[str, str]]
Navigate = Callable[[str], object]


class HoverTarget(Protocol):
    """Table that can highlight every row sharing a bucket key."""

    def highlight_bucket(self, key: str) -> Optional[int]: ...
    def clear_highlight(self) -> None: ...


def _options_for(resolution: str) -> ChartOptions:
    ticks = AxisTicks() if resolution == "daily" else AxisTicks(max_ticks=MAX_TICKS, truncate_year=True)
    return ChartOptions(point_radius=POINT_RADIUS.get(resolution, 2), ticks=ticks)


class ChartController(GestureSink):
    """Create-or-update owner of one chart kind, with hover cross-highlighting."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.chart: Optional[LineChart] = None
        self._labels: List[str] = []
        self._keys: List[str] = []
        self._hover_target: Optional[HoverTarget] = None
        self._viewport: Optional[TableViewport] = None

    @property
    def state(self) -> str:
        return "live" if self.chart is not None else "absent"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def create_or_update(
        self,
        surface: ChartSurface,
        data: ChartData,
        *,
        hover_target: Optional[HoverTarget] = None,
        viewport: Optional[TableViewport] = None,
    ) -> LineChart:
        self._labels = list(data.labels)
        self._keys = list(data.bucket_keys) if data.bucket_keys is not None else list(data.labels)
        self._hover_target = hover_target
        self._viewport = viewport

        options = _options_for(data.resolution)
        if self.chart is not None:
            self._reconcile(self.chart, data, options)
            self.chart.update(duration_ms=TRANSITION_MS, easing=EASING)
            return self.chart

        for ds in data.datasets:
            ds.point_radius = options.point_radius
        self.chart = LineChart(
            surface,
            labels=list(data.labels),
            datasets=list(data.datasets),
            options=options,
            overlay=self._overlay(),
        )
        LOGGER.debug("%s chart created with %d series", self.kind, len(data.datasets))
        surface.attach(self)
        self._on_created(self.chart)
        self.chart.update(duration_ms=0, easing=EASING)
        return self.chart

    def destroy(self) -> None:
        if self.chart is None:
            return
        LOGGER.debug("%s chart destroyed", self.kind)
        self.chart.destroy()
        self.chart = None
        self._labels = []
        self._keys = []
        self._hover_target = None
        self._viewport = None

    def _overlay(self) -> Optional[DragZoomState]:
        return None

    def _on_created(self, chart: LineChart) -> None:
        """Hook for subclasses that need one-time surface setup."""

    @staticmethod
    def _reconcile(chart: LineChart, data: ChartData, options: ChartOptions) -> None:
        chart.labels[:] = data.labels
        chart.options = options
        incoming: Dict[str, Dataset] = {ds.series_key: ds for ds in data.datasets}

        kept: List[Dataset] = []
        for ds in chart.datasets:
            src = incoming.get(ds.series_key)
            if src is None:
                continue
            ds.points[:] = src.points
            ds.label = src.label
            ds.point_radius = options.point_radius
            kept.append(ds)

        existing = {ds.series_key for ds in kept}
        for src in data.datasets:
            if src.series_key not in existing:
                src.point_radius = options.point_radius
                kept.append(src)
        chart.datasets[:] = kept

    # ------------------------------------------------------------------
    # Filter visibility
    # ------------------------------------------------------------------
    def update_visibility(self, state: FilterState) -> None:
        """Hide filtered gateways and rebuild the total from the visible ones."""
        chart = self.chart
        if chart is None:
            return
        for ds in chart.datasets:
            if not ds.is_total:
                ds.hidden = not state.is_visible(ds.series_key)

        total = chart.dataset(TOTAL_SERIES_ID)
        if total is not None:
            total.points[:] = visible_total(chart.datasets, len(chart.labels))
            total.hidden = len(state.selected_gateways) == 1
        chart.update()

    # ------------------------------------------------------------------
    # Gestures shared by both charts
    # ------------------------------------------------------------------
    def pointer_move(self, x: float) -> None:
        self._hover(x)

    def pointer_leave(self) -> None:
        if self._hover_target is not None:
            self._hover_target.clear_highlight()

    def pointer_down(self, x: float) -> None:
        return None

    def pointer_up(self) -> None:
        return None

    def wheel(self, delta_y: float) -> bool:
        return False

    def double_click(self, x: float) -> None:
        return None

    def _hover(self, x: float) -> None:
        chart = self.chart
        target = self._hover_target
        if chart is None or target is None:
            return
        index = chart.x_scale().nearest_index(x) if chart.chart_area.contains_x(x) else None
        if index is None or index >= len(self._keys):
            target.clear_highlight()
            return
        first_visible = target.highlight_bucket(self._keys[index])
        if first_visible is not None and self._viewport is not None:
            self._viewport.scroll_row_to_center(first_visible)


class OverviewChartController(ChartController):
    """Overview chart with drag-to-zoom, scroll-to-zoom and double-click drill-down."""

    def __init__(
        self,
        navigate: Navigate,
        timers: TimerRegistry,
        *,
        clock_ms: Optional[Callable[[], float]] = None,
        today: Today = today_iso,
        wheel_throttle_ms: int = WHEEL_THROTTLE_MS,
        preview_ms: int = WHEEL_PREVIEW_MS,
    ) -> None:
        super().__init__("overview")
        self._navigate = navigate
        self._timers = timers
        self._clock_ms = clock_ms or (lambda: time.monotonic() * 1000.0)
        self._today = today
        self._wheel_throttle_ms = wheel_throttle_ms
        self._preview_ms = preview_ms
        self._last_wheel_ms: Optional[float] = None
        self._on_zoom: Optional[ZoomCallback] = None
        self._current_range: Optional[RangeSource] = None
        self.drag = DragZoomState()

    @property
    def preview_timer_key(self) -> str:
        return f"{self.kind}.wheel-preview"

    def create_or_update(
        self,
        surface: ChartSurface,
        data: ChartData,
        on_zoom: Optional[ZoomCallback] = None,
        *,
        current_range: Optional[RangeSource] = None,
        hover_target: Optional[HoverTarget] = None,
        viewport: Optional[TableViewport] = None,
    ) -> LineChart:
        self._on_zoom = on_zoom
        self._current_range = current_range
        return super().create_or_update(surface, data, hover_target=hover_target, viewport=viewport)

    def destroy(self) -> None:
        self._timers.cancel(self.preview_timer_key)
        self.drag.reset()
        self._on_zoom = None
        self._current_range = None
        super().destroy()

    def _overlay(self) -> Optional[DragZoomState]:
        return self.drag

    def _on_created(self, chart: LineChart) -> None:
        chart.surface.set_cursor("crosshair")

    # ------------------------------------------------------------------
    # Drag-to-zoom
    # ------------------------------------------------------------------
    def pointer_down(self, x: float) -> None:
        chart = self.chart
        if chart is None or not chart.chart_area.contains_x(x):
            return
        self.drag.active = True
        self.drag.start_px = x
        self.drag.end_px = x

    def pointer_move(self, x: float) -> None:
        super().pointer_move(x)
        if self.chart is None or not self.drag.active:
            return
        self.drag.end_px = x
        self.chart.draw()

    def pointer_up(self) -> None:
        chart = self.chart
        if chart is None or not self.drag.active:
            return
        start_px, end_px = self.drag.start_px, self.drag.end_px
        self.drag.reset()
        chart.draw()
        if start_px is None or end_px is None or not self._labels:
            return

        scale = chart.x_scale()
        start_idx = max(0, round_half_up(scale.value_for_pixel(min(start_px, end_px))))
        end_idx = min(len(self._labels) - 1, round_half_up(scale.value_for_pixel(max(start_px, end_px))))
        if start_idx >= end_idx:
            return
        if self._on_zoom is not None:
            self._on_zoom(date_only(self._labels[start_idx]), date_only(self._labels[end_idx]))

    def pointer_leave(self) -> None:
        super().pointer_leave()
        if self.chart is None or not self.drag.active:
            return
        self.drag.reset()
        self.chart.draw()

    # ------------------------------------------------------------------
    # Scroll-to-zoom
    # ------------------------------------------------------------------
    def wheel(self, delta_y: float) -> bool:
        """Widen (``delta_y > 0``) or narrow the date range by one day per edge.

        Returns whether the step was accepted and the zoom callback fired.
        """
        chart = self.chart
        if chart is None or delta_y == 0:
            return False
        now = self._clock_ms()
        if self._last_wheel_ms is not None and now - self._last_wheel_ms < self._wheel_throttle_ms:
            return False
        self._last_wheel_ms = now

        cur_from, cur_to = self._current_range() if self._current_range else ("", "")
        if self._labels:
            cur_from = cur_from or date_only(self._labels[0])
            cur_to = cur_to or date_only(self._labels[-1])
        if not cur_from or not cur_to:
            return False

        if delta_y > 0:
            new_from = add_days(cur_from, -1)
            new_to = cur_to if cur_to >= self._today() else add_days(cur_to, 1)
        else:
            new_from = add_days(cur_from, 1)
            new_to = add_days(cur_to, -1)
            if new_from >= new_to:
                return False

        self._show_preview(chart, new_from, new_to)
        if self._on_zoom is not None:
            self._on_zoom(new_from, new_to)
        return True

    def _show_preview(self, chart: LineChart, new_from: str, new_to: str) -> None:
        scale = chart.x_scale()
        area = chart.chart_area
        from_idx = self._labels.index(new_from) if new_from in self._labels else -1
        to_idx = self._labels.index(new_to) if new_to in self._labels else -1

        self.drag.active = True
        self.drag.start_px = scale.pixel_for_value(from_idx) if from_idx >= 0 else area.left
        self.drag.end_px = scale.pixel_for_value(to_idx) if to_idx >= 0 else area.right
        self.drag.clamp_left = from_idx < 0
        self.drag.clamp_right = to_idx < 0
        chart.draw()
        chart.surface.set_cursor("ew-resize")
        self._timers.schedule(self.preview_timer_key, self._preview_ms, self._clear_preview)

    def _clear_preview(self) -> None:
        self.drag.reset()
        if self.chart is None:
            return
        self.chart.draw()
        self.chart.surface.set_cursor("crosshair")

    # ------------------------------------------------------------------
    # Drill-down
    # ------------------------------------------------------------------
    def double_click(self, x: float) -> None:
        chart = self.chart
        if chart is None:
            return
        index = chart.x_scale().nearest_index(x)
        if index is None:
            return
        label = self._labels[index]
        if label:
            self._navigate("/daily?date=" + date_only(label))


class ChartHub:
    """Holds the two process-wide chart controllers, one per page kind."""

    def __init__(self, overview: OverviewChartController, daily: Optional[ChartController] = None) -> None:
        self.overview = overview
        self.daily = daily or ChartController("daily")

    def get(self, kind: str) -> ChartController:
        if kind == "overview":
            return self.overview
        if kind == "daily":
            return self.daily
        raise KeyError(kind)

    def destroy(self, kind: str) -> None:
        self.get(kind).destroy()

    def destroy_all(self) -> None:
        self.overview.destroy()
        self.daily.destroy()


__all__ = [
    "ChartController",
    "ChartHub",
    "HoverTarget",
    "OverviewChartController",
    "RangeSource",
    "ZoomCallback",
]
