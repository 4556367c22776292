"""Overview route (``/``): stat cards, bucket table and the zoomable chart."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from geodash.app.chart_controller import ChartHub
from geodash.app.filter_store import FilterState, FilterStore
from geodash.app.router import Location, Router, build_url
from geodash.app.timers import TimerRegistry
from geodash.domain.entities import BucketTotal, GatewayId, OverviewResponse
from geodash.domain.formatting import format_power, format_runtime, gateway_badge
from geodash.domain.ports import DashboardApiPort
from geodash.domain.series import overview_series
from geodash.viewmodels.document import Document
from geodash.viewmodels.pages import OverviewPageVM
from geodash.viewmodels.table_vm import HeaderCell, TableRow, row_values

from .base import PageController

LOGGER = logging.getLogger(__name__)

DATES_TIMER = "overview.dates"
DATES_DEBOUNCE_MS = 500
STAT_FIELDS = ("energy", "heating", "cooling", "runtime")
_ROW_FIELDS = {
    "energy": "total_energy",
    "heating": "total_heating",
    "cooling": "total_cooling",
    "runtime": "total_runtime",
}


def overview_headers(resolution: str) -> List[HeaderCell]:
    return [
        HeaderCell("Date" if resolution == "daily" else "Date/Time"),
        HeaderCell("Unit", kind="badge"),
        HeaderCell("Energy (kWh)", align="right"),
        HeaderCell("Heating (kWh)", align="right"),
        HeaderCell("Cooling (kWh)", align="right"),
        HeaderCell("Runtime (hrs)", align="right"),
    ]


def overview_row(row: BucketTotal) -> TableRow:
    return TableRow(
        gateway_id=row.gateway_id,
        bucket_key=row.date,
        cells=[
            row.date,
            gateway_badge(row.gateway_id),
            format_power(row.total_energy),
            format_power(row.total_heating),
            format_power(row.total_cooling),
            format_runtime(row.total_runtime),
        ],
        values=row_values(row, _ROW_FIELDS),
    )


class OverviewPage(PageController):
    route = "/"

    def __init__(
        self,
        *,
        api: DashboardApiPort,
        router: Router,
        document: Document,
        filters: FilterStore,
        charts: ChartHub,
        timers: TimerRegistry,
        debounce_ms: int = DATES_DEBOUNCE_MS,
    ) -> None:
        super().__init__(api=api, router=router, document=document, filters=filters, charts=charts)
        self.timers = timers
        self.debounce_ms = debounce_ms
        self.vm: Optional[OverviewPageVM] = None
        self.latest: Optional[OverviewResponse] = None

    async def render(self, location: Location) -> None:
        self.charts.destroy("daily")

        date_from = location.get("date_from")
        date_to = location.get("date_to")
        resolution = location.get("resolution", "daily")

        if self.vm is None or not self.document.has_root(OverviewPageVM.ROOT_ID):
            self._render_skeleton()
        vm = self.vm
        assert vm is not None

        vm.table.set_busy(True)
        data = await self.api.fetch_overview(date_from=date_from, date_to=date_to, resolution=resolution)
        if not self.is_current():
            return
        vm.table.set_busy(False)
        self.latest = data

        filters = data.filters
        vm.set_inputs(filters.date_from, filters.date_to, filters.resolution)
        self._refresh_pills()
        vm.set_stats(
            {
                "energy": data.stats.total_energy,
                "heating": data.stats.total_heating,
                "cooling": data.stats.total_cooling,
                "runtime": data.stats.total_runtime,
            }
        )

        vm.table.set_headers(overview_headers(filters.resolution))
        vm.table.set_rows([overview_row(row) for row in data.totals])

        chart_data = overview_series(data.totals, data.gateways, filters.resolution)
        self.charts.overview.create_or_update(
            self.document.canvas(vm.CANVAS_ID),
            chart_data,
            self._on_zoom,
            current_range=self._current_range,
            hover_target=vm.table,
            viewport=self.document.viewport(vm.VIEWPORT_ID),
        )

        state = self.filters.get_state()
        vm.table.apply_filter(state.is_visible)
        self.charts.overview.update_visibility(state)
        self._render_stats(state)

    # ------------------------------------------------------------------
    # Skeleton
    # ------------------------------------------------------------------
    def _render_skeleton(self) -> None:
        self.filters.reset()
        vm = OverviewPageVM()
        vm.on_input_change = self._schedule_navigate
        vm.on_pill = self._toggle_pill
        vm.on_clear_filters = self._clear_filters
        self.vm = vm
        self.latest = None
        self.document.mount(vm)

        self.filters.subscribe(lambda state: vm.table.apply_filter(state.is_visible))
        self.filters.subscribe(self.charts.overview.update_visibility)
        self.filters.subscribe(self._render_stats)

    def _render_stats(self, state: FilterState) -> None:
        vm = self.vm
        if vm is None:
            return
        vm.set_stats(vm.table.visible_sums(state.is_visible, STAT_FIELDS))

    def _gateways(self) -> List[GatewayId]:
        return list(self.latest.gateways) if self.latest is not None else []

    # ------------------------------------------------------------------
    # Date range edits
    # ------------------------------------------------------------------
    def _current_range(self) -> tuple:
        vm = self.vm
        if vm is None:
            return "", ""
        return vm.date_from, vm.date_to

    def _on_zoom(self, date_from: str, date_to: str) -> None:
        vm = self.vm
        if vm is None:
            return
        vm.set_inputs(date_from, date_to)
        self._schedule_navigate()

    def _schedule_navigate(self) -> None:
        self.timers.schedule(DATES_TIMER, self.debounce_ms, self._navigate_with_dates)

    def _navigate_with_dates(self) -> None:
        vm = self.vm
        if vm is None or not vm.date_from or not vm.date_to:
            return
        self.router.navigate(
            build_url("/", date_from=vm.date_from, date_to=vm.date_to, resolution=vm.resolution)
        )

    def stat_texts(self) -> Dict[str, str]:
        vm = self.vm
        if vm is None:
            return {}
        return {key: card.text for key, card in vm.stats.items()}


__all__ = ["DATES_TIMER", "OverviewPage", "overview_headers", "overview_row"]
