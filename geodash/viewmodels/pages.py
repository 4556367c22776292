"""Page-level viewmodels: one per route, mounted into the ``Document``.

Each page VM holds the state of its skeleton (inputs, pills, stat cards,
links, table) and reports every mutation as a named region so the web
runtime can refresh just that part of the page.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from geodash.app.filter_store import FilterPill
from geodash.domain.formatting import format_power, format_runtime

from .table_vm import DataTableVM, Notify

Handler = Optional[Callable[..., None]]


@dataclass(frozen=True)
class Link:
    """Anchor; ``marked`` links are routed client-side."""

    href: str
    label: str
    marked: bool = True


@dataclass
class StatCard:
    title: str
    unit: str
    value: Optional[float] = None
    runtime: bool = False

    @property
    def text(self) -> str:
        if self.value is None:
            return "-"
        return format_runtime(self.value) if self.runtime else format_power(self.value)


class PageVM:
    """Base for page VMs: root id plus region change notification."""

    ROOT_ID = ""
    TITLE = ""

    def __init__(self) -> None:
        self.notify: Optional[Notify] = None
        self.pills: List[FilterPill] = []
        self.show_clear_filters = False
        self.on_pill: Handler = None
        self.on_clear_filters: Handler = None

    @property
    def root_id(self) -> str:
        return self.ROOT_ID

    def bind(self, notify: Notify) -> None:
        self.notify = notify
        for table in self.tables():
            table.notify = notify

    def tables(self) -> Sequence[DataTableVM]:
        return ()

    def changed(self, region: str) -> None:
        if self.notify is not None:
            self.notify(region)

    def set_pills(self, pills: Sequence[FilterPill], show_clear: bool) -> None:
        self.pills = list(pills)
        self.show_clear_filters = show_clear
        self.changed("pills")

    def click_pill(self, gateway_id: str) -> None:
        if self.on_pill:
            self.on_pill(gateway_id)

    def click_clear_filters(self) -> None:
        if self.on_clear_filters:
            self.on_clear_filters()


class OverviewPageVM(PageVM):
    ROOT_ID = "overview-page"
    TITLE = "Energy Overview"
    CANVAS_ID = "overview-chart"
    VIEWPORT_ID = "overview-table-wrapper"
    RESOLUTION_OPTIONS: Tuple[Tuple[str, str], ...] = (
        ("daily", "Daily"),
        ("hourly", "Hourly"),
        ("15min", "15-min"),
    )

    def __init__(self) -> None:
        super().__init__()
        self.date_from = ""
        self.date_to = ""
        self.resolution = "daily"
        self.reset_link = Link("/", "Reset")
        self.stats: Dict[str, StatCard] = {
            "energy": StatCard("Total Energy", "kWh"),
            "heating": StatCard("Heating", "kWh"),
            "cooling": StatCard("Cooling", "kWh"),
            "runtime": StatCard("Runtime", "hours", runtime=True),
        }
        self.table = DataTableVM(region="table", empty_message="No data for selected range")
        self.on_input_change: Handler = None

    def tables(self) -> Sequence[DataTableVM]:
        return (self.table,)

    def set_inputs(self, date_from: str, date_to: str, resolution: Optional[str] = None) -> None:
        self.date_from = date_from
        self.date_to = date_to
        if resolution is not None:
            self.resolution = resolution
        self.changed("inputs")

    def edit_input(self, name: str, value: str) -> None:
        """User edit of ``date_from``, ``date_to`` or ``resolution``."""
        if name not in ("date_from", "date_to", "resolution"):
            raise ValueError(f"Unknown overview input: {name}")
        setattr(self, name, str(value or ""))
        if self.on_input_change:
            self.on_input_change()

    def set_stats(self, values: Dict[str, float]) -> None:
        for key, card in self.stats.items():
            card.value = values.get(key)
        self.changed("stats")


class DailyPageVM(PageVM):
    ROOT_ID = "daily-page"
    TITLE = "Daily Details"
    CANVAS_ID = "energy-chart"
    VIEWPORT_ID = "daily-table-wrapper"

    def __init__(self) -> None:
        super().__init__()
        self.date = ""
        self.prev_link = Link("/daily", "‹")
        self.next_link = Link("/daily", "›")
        self.summary: Dict[str, StatCard] = {
            "energy": StatCard("Total Energy", "kWh"),
            "heating": StatCard("Heating", "kWh"),
            "cooling": StatCard("Cooling", "kWh"),
        }
        self.table = DataTableVM(region="table", empty_message="No data for selected date")
        self.on_date_change: Handler = None

    def tables(self) -> Sequence[DataTableVM]:
        return (self.table,)

    def set_date(self, date: str, prev_date: str, next_date: str) -> None:
        self.date = date
        self.prev_link = Link(f"/daily?date={prev_date}", "‹")
        self.next_link = Link(f"/daily?date={next_date}", "›")
        self.changed("inputs")

    def edit_date(self, value: str) -> None:
        self.date = str(value or "")
        if self.on_date_change:
            self.on_date_change(self.date)

    def set_summary(self, values: Dict[str, float]) -> None:
        for key, card in self.summary.items():
            card.value = values.get(key)
        self.changed("summary")


@dataclass(frozen=True)
class GatewayOption:
    value: str
    label: str


@dataclass
class Pagination:
    label: str = ""
    prev: Optional[Link] = None
    next: Optional[Link] = None


class ReadingsPageVM(PageVM):
    ROOT_ID = "readings-page"
    TITLE = "Raw Readings"

    def __init__(self) -> None:
        super().__init__()
        self.busy = True
        self.gateway_options: List[GatewayOption] = [GatewayOption("", "All Units")]
        self.gateway_id = ""
        self.date_from = ""
        self.date_to = ""
        self.count_text = ""
        self.clear_link = Link("/readings", "Clear")
        self.pagination = Pagination()
        self.table = DataTableVM(region="table", empty_message="No readings found")
        self.on_filter_change: Handler = None

    def tables(self) -> Sequence[DataTableVM]:
        return (self.table,)

    def set_busy(self, busy: bool) -> None:
        self.busy = busy
        self.changed("busy")

    def set_filters(
        self, options: Sequence[GatewayOption], gateway_id: str, date_from: str, date_to: str
    ) -> None:
        self.gateway_options = [GatewayOption("", "All Units"), *options]
        self.gateway_id = gateway_id
        self.date_from = date_from
        self.date_to = date_to
        self.changed("inputs")

    def edit_filter(self, name: str, value: str) -> None:
        if name not in ("gateway_id", "date_from", "date_to"):
            raise ValueError(f"Unknown readings filter: {name}")
        setattr(self, name, str(value or ""))
        if self.on_filter_change:
            self.on_filter_change()

    def set_count(self, text: str) -> None:
        self.count_text = text
        self.changed("count")

    def set_pagination(self, pagination: Pagination) -> None:
        self.pagination = pagination
        self.changed("pagination")


__all__ = [
    "DailyPageVM",
    "GatewayOption",
    "Link",
    "OverviewPageVM",
    "PageVM",
    "Pagination",
    "ReadingsPageVM",
    "StatCard",
]
