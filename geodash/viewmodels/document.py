"""In-memory page tree patched by the page controllers.

``Document`` is the single mutable view surface of the dashboard: it holds the
mounted page VM, the chart surfaces and table viewports registered for that
page, and fans out region-level mutation notices. The NiceGUI runtime
subscribes to re-render; tests subscribe to count mutations.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from geodash.app.chart_model import HeadlessSurface
from geodash.domain.ports import ChartSurface, TableViewport

from .pages import PageVM

LOGGER = logging.getLogger(__name__)

MutationListener = Callable[[str], None]
SurfaceFactory = Callable[[str], ChartSurface]


class RecordingViewport(TableViewport):
    """Viewport that remembers which rows were scrolled into view."""

    def __init__(self) -> None:
        self.scrolled: List[int] = []

    def scroll_row_to_center(self, row_index: int) -> None:
        self.scrolled.append(row_index)


class Document:
    def __init__(self, surface_factory: Optional[SurfaceFactory] = None) -> None:
        self.page: Optional[PageVM] = None
        self.mutations: List[str] = []
        self._listeners: List[MutationListener] = []
        self._surface_factory = surface_factory or (lambda _canvas_id: HeadlessSurface())
        self._surfaces: Dict[str, ChartSurface] = {}
        self._viewports: Dict[str, TableViewport] = {}

    def subscribe(self, listener: MutationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    @property
    def mutation_count(self) -> int:
        return len(self.mutations)

    def has_root(self, root_id: str) -> bool:
        return self.page is not None and self.page.root_id == root_id

    def mount(self, page: PageVM) -> None:
        """Replace the whole page with ``page``'s skeleton."""
        LOGGER.debug("Mount %s", page.root_id)
        self._surfaces.clear()
        self._viewports.clear()
        self.page = page
        page.bind(self.mutated)
        self.mutated("root")

    def mutated(self, region: str) -> None:
        self.mutations.append(region)
        for listener in list(self._listeners):
            listener(region)

    # ------------------------------------------------------------------
    # Surfaces and viewports for the mounted page
    # ------------------------------------------------------------------
    def register_canvas(self, canvas_id: str, surface: ChartSurface) -> None:
        self._surfaces[canvas_id] = surface

    def canvas(self, canvas_id: str) -> ChartSurface:
        surface = self._surfaces.get(canvas_id)
        if surface is None:
            surface = self._surface_factory(canvas_id)
            self._surfaces[canvas_id] = surface
        return surface

    def register_viewport(self, viewport_id: str, viewport: TableViewport) -> None:
        self._viewports[viewport_id] = viewport

    def viewport(self, viewport_id: str) -> TableViewport:
        viewport = self._viewports.get(viewport_id)
        if viewport is None:
            viewport = RecordingViewport()
            self._viewports[viewport_id] = viewport
        return viewport


__all__ = ["Document", "MutationListener", "RecordingViewport", "SurfaceFactory"]
