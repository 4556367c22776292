"""Long-lived line chart instance bound to a drawing surface.

``LineChart`` plays the role a canvas chart object plays in a browser: it
owns the label sequence, the dataset objects (mutated in place so the renderer
can interpolate between states), the axis options and a reference to the
drag/zoom overlay state drawn on top of the plot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from geodash.domain.geometry import CategoryScale, ChartArea, DragZoomState
from geodash.domain.ports import ChartSurface, GestureSink
from geodash.domain.series import Dataset

TRANSITION_MS = 400
EASING = "easeInOutQuart"


@dataclass
class AxisTicks:
    """X-axis tick policy: ``None`` means render every label as-is."""

    max_ticks: Optional[int] = None
    truncate_year: bool = False


@dataclass
class ChartOptions:
    y_title: str = "kWh"
    point_radius: int = 2
    ticks: AxisTicks = field(default_factory=AxisTicks)


class LineChart:
    """Chart state plus the surface it renders to."""

    def __init__(
        self,
        surface: ChartSurface,
        labels: List[str],
        datasets: List[Dataset],
        options: Optional[ChartOptions] = None,
        overlay: Optional[DragZoomState] = None,
    ) -> None:
        self.surface = surface
        self.labels = labels
        self.datasets = datasets
        self.options = options or ChartOptions()
        self.overlay = overlay
        self.destroyed = False

    @property
    def chart_area(self) -> ChartArea:
        return self.surface.chart_area()

    def x_scale(self) -> CategoryScale:
        return CategoryScale(area=self.chart_area, count=len(self.labels))

    def dataset(self, series_key: str) -> Optional[Dataset]:
        for ds in self.datasets:
            if ds.series_key == series_key:
                return ds
        return None

    def tick_label(self, index: int) -> str:
        """Axis label for ``index``; finer resolutions drop the ``YYYY-`` prefix."""
        if not 0 <= index < len(self.labels):
            return ""
        label = self.labels[index]
        if self.options.ticks.truncate_year and len(label) > 10:
            return label[5:]
        return label

    def update(self, duration_ms: int = TRANSITION_MS, easing: str = EASING) -> None:
        if self.destroyed:
            return
        self.surface.render(self, duration_ms=duration_ms, easing=easing)

    def draw(self) -> None:
        """Redraw the overlay without touching the data."""
        if self.destroyed or self.overlay is None:
            return
        self.surface.draw_overlay(self.overlay, self.chart_area)

    def destroy(self) -> None:
        if self.destroyed:
            return
        self.destroyed = True
        self.surface.dispose()


class HeadlessSurface(ChartSurface):
    """Surface that records what would be drawn; used headless and in tests."""

    def __init__(
        self,
        width: float = 800.0,
        height: float = 320.0,
        padding: Tuple[float, float, float, float] = (56.0, 32.0, 24.0, 28.0),
    ) -> None:
        left, top, right, bottom = padding
        self._area = ChartArea(left=left, top=top, right=width - right, bottom=height - bottom)
        self.renders: List[Dict[str, object]] = []
        self.overlays: List[Optional[Tuple[float, float]]] = []
        self.clamps: List[Tuple[bool, bool]] = []
        self.cursor = "default"
        self.dispose_count = 0
        self.gestures: Optional[GestureSink] = None
        self.attach_count = 0

    def chart_area(self) -> ChartArea:
        return self._area

    def render(self, chart: LineChart, *, duration_ms: int, easing: str) -> None:
        self.renders.append(
            {
                "labels": list(chart.labels),
                "series": {
                    ds.series_key: (list(ds.points), ds.hidden) for ds in chart.datasets
                },
                "point_radius": chart.options.point_radius,
                "duration_ms": duration_ms,
                "easing": easing,
            }
        )

    def draw_overlay(self, state: DragZoomState, area: ChartArea) -> None:
        self.overlays.append(state.span(area))
        self.clamps.append((state.clamp_left, state.clamp_right))

    def set_cursor(self, cursor: str) -> None:
        self.cursor = cursor

    def dispose(self) -> None:
        self.dispose_count += 1
        self.gestures = None

    def attach(self, gestures: GestureSink) -> None:
        self.gestures = gestures
        self.attach_count += 1

    @property
    def last_render(self) -> Optional[Dict[str, object]]:
        return self.renders[-1] if self.renders else None


__all__ = ["AxisTicks", "ChartOptions", "EASING", "HeadlessSurface", "LineChart", "TRANSITION_MS"]
