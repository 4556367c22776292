"""Composition root for one dashboard session.

Wires the router, the three page controllers, the chart hub, the filter store
and the timer registry around an API port, a history port and a keyboard
port. One ``Dashboard`` exists per browser tab in the web runtime; tests
build one with in-memory adapters.
"""

from __future__ import annotations

import inspect
import logging
from typing import Callable, Optional

from geodash.adapters.keyboard_bus import KeyboardBus
from geodash.domain.dates import Today, today_iso
from geodash.domain.ports import DashboardApiPort, HistoryPort, KeyboardPort
from geodash.viewmodels.document import Document

from .chart_controller import ChartHub, OverviewChartController
from .filter_store import FilterStore
from .pages.daily import DailyPage
from .pages.overview import OverviewPage
from .pages.readings import ReadingsPage
from .router import ErrorHook, Router
from .timers import TimerRegistry, asyncio_timers

LOGGER = logging.getLogger(__name__)


class Dashboard:
    """Own every per-session collaborator and register the routes."""

    def __init__(
        self,
        api: DashboardApiPort,
        history: HistoryPort,
        *,
        document: Optional[Document] = None,
        keyboard: Optional[KeyboardPort] = None,
        timers: Optional[TimerRegistry] = None,
        today: Today = today_iso,
        clock_ms: Optional[Callable[[], float]] = None,
        on_error: Optional[ErrorHook] = None,
    ) -> None:
        self.api = api
        self.document = document or Document()
        self.keyboard = keyboard or KeyboardBus()
        self.timers = timers or asyncio_timers()
        self.router = Router(history, on_error=on_error)
        self.filters = FilterStore()
        self.charts = ChartHub(
            OverviewChartController(
                self.router.navigate,
                self.timers,
                clock_ms=clock_ms,
                today=today,
            )
        )

        common = dict(api=api, router=self.router, document=self.document, filters=self.filters, charts=self.charts)
        self.overview = OverviewPage(timers=self.timers, **common)
        self.daily = DailyPage(keyboard=self.keyboard, **common)
        self.readings = ReadingsPage(**common)

        self.router.register(OverviewPage.route, self.overview)
        self.router.register(DailyPage.route, self.daily)
        self.router.register(ReadingsPage.route, self.readings)

    def start(self):
        """Dispatch the URL currently in the history."""
        LOGGER.info("Dashboard start at %s", self.router.history.current())
        return self.router.start()

    async def aclose(self) -> None:
        self.timers.cancel_all()
        self.charts.destroy_all()
        close = getattr(self.api, "aclose", None)
        if close is not None:
            result = close()
            if inspect.isawaitable(result):
                await result


__all__ = ["Dashboard"]
