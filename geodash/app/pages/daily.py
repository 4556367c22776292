"""Daily route (``/daily``): hourly breakdown for one date with day stepping."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from geodash.app.chart_controller import ChartHub
from geodash.app.filter_store import FilterState, FilterStore
from geodash.app.router import Location, Router
from geodash.domain.dates import add_days
from geodash.domain.entities import DailyResponse, GatewayId, HourlyRow
from geodash.domain.formatting import format_power, gateway_badge
from geodash.domain.ports import DashboardApiPort, KeyboardPort
from geodash.domain.series import daily_series
from geodash.viewmodels.document import Document
from geodash.viewmodels.pages import DailyPageVM
from geodash.viewmodels.table_vm import HeaderCell, TableRow, row_values

from .base import PageController

LOGGER = logging.getLogger(__name__)

SUMMARY_FIELDS = ("energy", "heating", "cooling")
FORM_TAGS = frozenset({"INPUT", "SELECT", "TEXTAREA"})
PREV_KEYS = frozenset({"ArrowLeft", "h"})
NEXT_KEYS = frozenset({"ArrowRight", "l"})
_ROW_FIELDS = {"energy": "total_energy", "heating": "total_heating", "cooling": "total_cooling"}

DAILY_HEADERS = [
    HeaderCell("Hour"),
    HeaderCell("Unit", kind="badge"),
    HeaderCell("Total (kWh)", align="right"),
    HeaderCell("Heat 1", align="right"),
    HeaderCell("Heat 2", align="right"),
    HeaderCell("Cool 1", align="right"),
    HeaderCell("Cool 2", align="right"),
]


def daily_row(row: HourlyRow) -> TableRow:
    return TableRow(
        gateway_id=row.gateway_id,
        bucket_key=row.hour,
        cells=[
            f"{row.hour}:00",
            gateway_badge(row.gateway_id),
            format_power(row.total_energy),
            format_power(row.heat_1),
            format_power(row.heat_2),
            format_power(row.cool_1),
            format_power(row.cool_2),
        ],
        values=row_values(row, _ROW_FIELDS),
    )


class DailyPage(PageController):
    route = "/daily"

    def __init__(
        self,
        *,
        api: DashboardApiPort,
        router: Router,
        document: Document,
        filters: FilterStore,
        charts: ChartHub,
        keyboard: KeyboardPort,
    ) -> None:
        super().__init__(api=api, router=router, document=document, filters=filters, charts=charts)
        self.keyboard = keyboard
        self.vm: Optional[DailyPageVM] = None
        self.latest: Optional[DailyResponse] = None
        self.key_targets: Optional[Tuple[str, str]] = None
        self._key_nav_bound = False

    async def render(self, location: Location) -> None:
        self.charts.destroy("overview")

        date = location.get("date")
        if self.vm is None or not self.document.has_root(DailyPageVM.ROOT_ID):
            self._render_skeleton()
        vm = self.vm
        assert vm is not None

        vm.table.set_busy(True)
        data = await self.api.fetch_daily(date=date)
        if not self.is_current():
            return
        vm.table.set_busy(False)
        self.latest = data

        prev_date = add_days(data.date, -1)
        next_date = add_days(data.date, 1)
        self.key_targets = (prev_date, next_date)
        self._ensure_key_nav()

        vm.set_date(data.date, prev_date, next_date)
        self._refresh_pills()
        vm.set_summary(
            {
                "energy": data.summary.total_energy,
                "heating": data.summary.total_heating,
                "cooling": data.summary.total_cooling,
            }
        )

        vm.table.set_headers(DAILY_HEADERS)
        vm.table.set_rows([daily_row(row) for row in data.hourly])

        self.charts.daily.create_or_update(
            self.document.canvas(vm.CANVAS_ID),
            daily_series(data.hourly, data.gateways),
            hover_target=vm.table,
            viewport=self.document.viewport(vm.VIEWPORT_ID),
        )

        state = self.filters.get_state()
        vm.table.apply_filter(state.is_visible)
        self.charts.daily.update_visibility(state)
        self._render_summary(state)

    def _render_skeleton(self) -> None:
        self.filters.reset()
        vm = DailyPageVM()
        vm.on_date_change = self._on_date_change
        vm.on_pill = self._toggle_pill
        vm.on_clear_filters = self._clear_filters
        self.vm = vm
        self.latest = None
        self.document.mount(vm)

        self.filters.subscribe(lambda state: vm.table.apply_filter(state.is_visible))
        self.filters.subscribe(self.charts.daily.update_visibility)
        self.filters.subscribe(self._render_summary)

    def _render_summary(self, state: FilterState) -> None:
        vm = self.vm
        if vm is None:
            return
        vm.set_summary(vm.table.visible_sums(state.is_visible, SUMMARY_FIELDS))

    def _gateways(self) -> List[GatewayId]:
        return list(self.latest.gateways) if self.latest is not None else []

    def _on_date_change(self, value: str) -> None:
        if value:
            self.router.navigate("/daily?date=" + value)

    # ------------------------------------------------------------------
    # Keyboard day stepping
    # ------------------------------------------------------------------
    def _ensure_key_nav(self) -> None:
        if self._key_nav_bound:
            return
        self._key_nav_bound = True
        self.keyboard.add_listener(self._on_key)

    def _on_key(self, key: str, target_tag: str) -> None:
        if self.key_targets is None or self.router.current_page != self.route:
            return
        if target_tag.upper() in FORM_TAGS:
            return
        prev_date, next_date = self.key_targets
        if key in PREV_KEYS:
            self.router.navigate("/daily?date=" + prev_date)
        elif key in NEXT_KEYS:
            self.router.navigate("/daily?date=" + next_date)


__all__ = ["DAILY_HEADERS", "DailyPage", "daily_row"]
