"""NiceGUI rendering of the mounted page VM.

``render_page`` builds the skeleton for whatever page the session's document
holds and returns the refresh callables for its data-bearing regions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict

from nicegui import ui

from geodash.viewmodels.pages import DailyPageVM, Link, OverviewPageVM, PageVM, ReadingsPageVM, StatCard
from geodash.viewmodels.table_vm import DataTableVM

from .runtime import EChartSurface, ScrollViewport

if TYPE_CHECKING:  # pragma: no cover
    from .runtime import WebSession

Regions = Dict[str, Callable[[], None]]


def render_page(session: "WebSession") -> Regions:
    page = session.document.page
    if isinstance(page, OverviewPageVM):
        return _overview(page, session)
    if isinstance(page, DailyPageVM):
        return _daily(page, session)
    if isinstance(page, ReadingsPageVM):
        return _readings(page, session)
    return {}


# ----------------------------------------------------------------------
# Shared widgets
# ----------------------------------------------------------------------
def _link(link: Link, session: "WebSession") -> None:
    if link.marked:
        ui.button(link.label, on_click=lambda _, href=link.href: session.follow(href)).props(
            "flat dense no-caps"
        )
    else:
        ui.link(link.label, link.href)


def _pill_bar(page: PageVM) -> None:
    with ui.column().classes("gap-1"):
        ui.label("Filters").classes("text-caption")
        with ui.row().classes("items-center gap-1"):
            for pill in page.pills:
                button = ui.button(
                    pill.label,
                    on_click=lambda _, gw=pill.gateway_id: page.click_pill(gw),
                ).props("rounded dense no-caps")
                if not pill.active:
                    button.props("outline")
            if page.show_clear_filters:
                ui.button("×", on_click=lambda _: page.click_clear_filters()).props(
                    "flat round dense"
                ).tooltip("Clear all filters")


def _stat_cards(cards: Dict[str, StatCard]) -> None:
    with ui.row().classes("w-full gap-3"):
        for card in cards.values():
            with ui.card().classes("geodash-card q-pa-sm"):
                ui.label(card.title).classes("text-caption")
                ui.label(card.text).classes("text-h5 geodash-mono")
                ui.label(card.unit).classes("text-caption")


def _table(table: DataTableVM, session: "WebSession") -> None:
    with ui.element("table").classes("geodash-table"):
        with ui.element("thead"):
            with ui.element("tr"):
                for header in table.headers:
                    with ui.element("th").classes(f"text-{header.align}"):
                        if header.href:
                            button = ui.button(
                                header.text,
                                on_click=lambda _, href=header.href: session.follow(href),
                            ).props("flat dense no-caps")
                            if header.active:
                                button.classes("text-primary text-weight-bold")
                        else:
                            ui.label(header.text)
        with ui.element("tbody").props(f'aria-busy={"true" if table.busy else "false"}'):
            if table.is_empty and table.headers and not table.busy:
                with ui.element("tr"):
                    with ui.element("td").props(f"colspan={len(table.headers)}").classes("muted"):
                        ui.label(table.empty_message)
            for row in table.rows:
                classes = []
                if row.hidden:
                    classes.append("hidden")
                if row.highlighted:
                    classes.append("highlight")
                with ui.element("tr").classes(" ".join(classes)):
                    for header, cell in zip(table.headers, row.cells):
                        with ui.element("td").classes(f"text-{header.align}"):
                            if header.kind == "badge":
                                ui.html(cell)
                            else:
                                ui.label(cell)


def _chart(session: "WebSession", canvas_id: str) -> None:
    element = ui.echart(EChartSurface.initial_options()).classes("w-full h-80")
    session.document.register_canvas(canvas_id, EChartSurface(element))


def _scroll_table(session: "WebSession", table: DataTableVM, viewport_id: str) -> Callable[[], None]:
    @ui.refreshable
    def render_table() -> None:
        _table(table, session)

    with ui.element("div").classes("geodash-table-scroll w-full") as wrapper:
        render_table()
    session.document.register_viewport(viewport_id, ScrollViewport(wrapper))
    return render_table.refresh


# ----------------------------------------------------------------------
# Pages
# ----------------------------------------------------------------------
def _overview(vm: OverviewPageVM, session: "WebSession") -> Regions:
    @ui.refreshable
    def render_inputs() -> None:
        with ui.row().classes("items-end gap-3"):
            ui.input(
                "From",
                value=vm.date_from,
                on_change=lambda e: vm.edit_input("date_from", e.value),
            ).props("type=date dense")
            ui.input(
                "To",
                value=vm.date_to,
                on_change=lambda e: vm.edit_input("date_to", e.value),
            ).props("type=date dense")
            ui.select(
                dict(vm.RESOLUTION_OPTIONS),
                value=vm.resolution,
                label="Resolution",
                on_change=lambda e: vm.edit_input("resolution", str(e.value)),
            ).props("dense")
            _link(vm.reset_link, session)

    @ui.refreshable
    def render_pills() -> None:
        _pill_bar(vm)

    @ui.refreshable
    def render_stats() -> None:
        _stat_cards(vm.stats)

    with ui.column().classes("w-full geodash-page"):
        ui.label(vm.TITLE).classes("text-h4")
        with ui.row().classes("items-end gap-6"):
            render_inputs()
            render_pills()
        render_stats()
        _chart(session, vm.CANVAS_ID)
        refresh_table = _scroll_table(session, vm.table, vm.VIEWPORT_ID)

    return {
        "inputs": render_inputs.refresh,
        "pills": render_pills.refresh,
        "stats": render_stats.refresh,
        "table": refresh_table,
    }


def _daily(vm: DailyPageVM, session: "WebSession") -> Regions:
    @ui.refreshable
    def render_inputs() -> None:
        with ui.row().classes("items-end gap-1"):
            _link(vm.prev_link, session)
            ui.input("Date", value=vm.date, on_change=lambda e: vm.edit_date(e.value)).props(
                "type=date dense"
            )
            _link(vm.next_link, session)

    @ui.refreshable
    def render_pills() -> None:
        _pill_bar(vm)

    @ui.refreshable
    def render_summary() -> None:
        with ui.row().classes("geodash-card q-pa-sm items-center gap-2"):
            ui.label("Daily Summary:").classes("text-weight-bold")
            parts = [f"{card.title}: {card.text} {card.unit}" for card in vm.summary.values()]
            ui.label(" | ".join(parts)).classes("geodash-mono")

    with ui.column().classes("w-full geodash-page"):
        ui.label(vm.TITLE).classes("text-h4")
        with ui.row().classes("items-end gap-6"):
            render_inputs()
            render_pills()
        render_summary()
        _chart(session, vm.CANVAS_ID)
        refresh_table = _scroll_table(session, vm.table, vm.VIEWPORT_ID)

    return {
        "inputs": render_inputs.refresh,
        "pills": render_pills.refresh,
        "summary": render_summary.refresh,
        "table": refresh_table,
    }


def _readings(vm: ReadingsPageVM, session: "WebSession") -> Regions:
    @ui.refreshable
    def render_busy() -> None:
        if vm.busy:
            ui.spinner(size="lg")

    @ui.refreshable
    def render_inputs() -> None:
        with ui.row().classes("items-end gap-3"):
            ui.select(
                {option.value: option.label for option in vm.gateway_options},
                value=vm.gateway_id,
                label="Heat Pump",
                on_change=lambda e: vm.edit_filter("gateway_id", str(e.value or "")),
            ).props("dense").classes("min-w-[10rem]")
            ui.input(
                "From",
                value=vm.date_from,
                on_change=lambda e: vm.edit_filter("date_from", e.value),
            ).props("type=date dense")
            ui.input(
                "To",
                value=vm.date_to,
                on_change=lambda e: vm.edit_filter("date_to", e.value),
            ).props("type=date dense")
            _link(vm.clear_link, session)

    @ui.refreshable
    def render_count() -> None:
        ui.label(vm.count_text).classes("muted")

    @ui.refreshable
    def render_table() -> None:
        _table(vm.table, session)

    @ui.refreshable
    def render_pagination() -> None:
        pagination = vm.pagination
        if not pagination.label:
            return
        with ui.row().classes("items-center gap-2 geodash-pagination"):
            if pagination.prev is not None:
                _link(pagination.prev, session)
            ui.label(pagination.label)
            if pagination.next is not None:
                _link(pagination.next, session)

    with ui.column().classes("w-full geodash-page"):
        with ui.row().classes("items-center gap-3"):
            ui.label(vm.TITLE).classes("text-h4")
            render_busy()
        render_inputs()
        render_count()
        render_table()
        render_pagination()

    return {
        "busy": render_busy.refresh,
        "inputs": render_inputs.refresh,
        "count": render_count.refresh,
        "table": render_table.refresh,
        "pagination": render_pagination.refresh,
    }


__all__ = ["render_page"]
