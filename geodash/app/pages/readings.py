"""Readings route (``/readings``): paged, sortable raw interval readings."""

from __future__ import annotations

import logging
from typing import List, Optional

from geodash.app.router import Location, build_url
from geodash.domain.entities import Reading, ReadingsFilters, ReadingsResponse
from geodash.domain.formatting import format_count, format_power, format_timestamp, gateway_badge, gateway_name
from geodash.viewmodels.pages import GatewayOption, Link, Pagination, ReadingsPageVM
from geodash.viewmodels.table_vm import HeaderCell, TableRow

from .base import PageController, parse_page

LOGGER = logging.getLogger(__name__)

ROUTE = "/readings"


def readings_url(filters: ReadingsFilters, **params: object) -> str:
    """Link back to this page carrying the active filters plus ``params``."""
    return build_url(
        ROUTE,
        gateway_id=filters.gateway_id,
        date_from=filters.date_from,
        date_to=filters.date_to,
        **params,
    )


def sort_header(filters: ReadingsFilters, column: str, label: str, align: str = "left", kind: str = "text") -> HeaderCell:
    active = filters.sort == column
    new_order = "asc" if active and filters.order == "desc" else "desc"
    arrow = (" ↓" if filters.order == "desc" else " ↑") if active else ""
    return HeaderCell(
        label,
        align=align,
        kind=kind,
        href=readings_url(filters, sort=column, order=new_order, page=1),
        active=active,
        arrow=arrow,
    )


def readings_headers(filters: ReadingsFilters) -> List[HeaderCell]:
    return [
        sort_header(filters, "timestamp", "Timestamp"),
        sort_header(filters, "gateway_id", "Unit", kind="badge"),
        HeaderCell("Heat 1", align="right"),
        HeaderCell("Heat 2", align="right"),
        HeaderCell("Cool 1", align="right"),
        HeaderCell("Cool 2", align="right"),
        HeaderCell("Elec Heat", align="right"),
        HeaderCell("Fan", align="right"),
        sort_header(filters, "total_power", "Total", align="right"),
    ]


def reading_row(row: Reading) -> TableRow:
    return TableRow(
        gateway_id=row.gateway_id,
        bucket_key=str(row.timestamp),
        cells=[
            format_timestamp(row.timestamp),
            gateway_badge(row.gateway_id),
            format_power(row.total_heat_1),
            format_power(row.total_heat_2),
            format_power(row.total_cool_1),
            format_power(row.total_cool_2),
            format_power(row.total_electric_heat),
            format_power(row.total_fan_only),
            format_power(row.total_power),
        ],
        values={"total_power": float(row.total_power or 0.0)},
    )


def pagination_for(data: ReadingsResponse) -> Pagination:
    total_pages = data.total_pages
    if total_pages <= 1:
        return Pagination()
    filters = data.filters
    page = data.page
    prev_link: Optional[Link] = None
    next_link: Optional[Link] = None
    if page > 1:
        prev_link = Link(readings_url(filters, page=page - 1, sort=filters.sort, order=filters.order), "← Previous")
    if page < total_pages:
        next_link = Link(readings_url(filters, page=page + 1, sort=filters.sort, order=filters.order), "Next →")
    return Pagination(label=f"Page {page} of {total_pages}", prev=prev_link, next=next_link)


class ReadingsPage(PageController):
    route = ROUTE

    vm: Optional[ReadingsPageVM] = None
    latest: Optional[ReadingsResponse] = None

    async def render(self, location: Location) -> None:
        self.charts.destroy("overview")
        self.charts.destroy("daily")
        self.filters.reset()

        vm = ReadingsPageVM()
        vm.on_filter_change = self._apply_filters
        self.vm = vm
        self.latest = None
        self.document.mount(vm)

        data = await self.api.fetch_readings(
            page=parse_page(location.get("page")),
            gateway_id=location.get("gateway_id"),
            date_from=location.get("date_from"),
            date_to=location.get("date_to"),
            sort=location.get("sort", "timestamp"),
            order=location.get("order", "desc"),
        )
        if not self.is_current():
            return
        vm.set_busy(False)
        self.latest = data

        filters = data.filters
        vm.set_filters(
            [GatewayOption(gw, gateway_name(gw)) for gw in data.gateways],
            filters.gateway_id,
            filters.date_from,
            filters.date_to,
        )
        vm.set_count(
            f"Showing {len(data.readings)} of {format_count(data.total)} readings (15-minute intervals)"
        )
        vm.table.set_headers(readings_headers(filters))
        vm.table.set_rows([reading_row(row) for row in data.readings])
        vm.set_pagination(pagination_for(data))

    def _apply_filters(self) -> None:
        vm = self.vm
        if vm is None:
            return
        filters = self.latest.filters if self.latest is not None else ReadingsFilters()
        self.router.navigate(
            build_url(
                ROUTE,
                gateway_id=vm.gateway_id,
                date_from=vm.date_from,
                date_to=vm.date_to,
                sort=filters.sort,
                order=filters.order,
            )
        )


__all__ = ["ReadingsPage", "pagination_for", "reading_row", "readings_headers", "readings_url"]
