from __future__ import annotations

import logging
from typing import Optional

from geodash.app.chart_controller import ChartHub
from geodash.app.filter_store import FilterStore
from geodash.app.router import Location, Router
from geodash.domain.ports import DashboardApiPort
from geodash.viewmodels.document import Document

LOGGER = logging.getLogger(__name__)


class PageController:
    """Shared collaborators and the stale-load guard for route handlers."""

    route = ""

    def __init__(
        self,
        *,
        api: DashboardApiPort,
        router: Router,
        document: Document,
        filters: FilterStore,
        charts: ChartHub,
    ) -> None:
        self.api = api
        self.router = router
        self.document = document
        self.filters = filters
        self.charts = charts

    async def __call__(self, location: Location) -> None:
        await self.render(location)

    async def render(self, location: Location) -> None:
        raise NotImplementedError

    def is_current(self) -> bool:
        """Whether this route is still the router's current page."""
        current = self.router.current_page
        if current != self.route:
            LOGGER.debug("Dropping %s result, current page is %s", self.route, current)
            return False
        return True

    def _toggle_pill(self, gateway_id: str) -> None:
        self.filters.toggle(gateway_id)
        self._refresh_pills()

    def _clear_filters(self) -> None:
        self.filters.clear()
        self._refresh_pills()

    def _refresh_pills(self) -> None:
        page = self.document.page
        if page is None:
            return
        page.set_pills(self.filters.pills(self._gateways()), self.filters.has_active)

    def _gateways(self) -> list:
        return []


def parse_page(value: Optional[str]) -> int:
    try:
        return max(1, int(str(value or "1")))
    except ValueError:
        return 1


__all__ = ["PageController", "parse_page"]
