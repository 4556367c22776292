import pytest

from geodash.app.chart_controller import ChartController
from geodash.app.chart_model import HeadlessSurface
from geodash.domain.series import HOURS, daily_series
from geodash.viewmodels.document import Document
from geodash.viewmodels.pages import OverviewPageVM, ReadingsPageVM, StatCard
from geodash.viewmodels.table_vm import DataTableVM, TableRow


def _table():
    notices = []
    table = DataTableVM(region="table", notify=notices.append)
    table.set_rows(
        [
            TableRow("A", "2024-01-01", ["a1"], {"energy": 1.0}),
            TableRow("B", "2024-01-01", ["b1"], {"energy": 2.0}),
            TableRow("A", "2024-01-02", ["a2"], {"energy": 3.0}),
        ]
    )
    notices.clear()
    return table, notices


def test_highlight_returns_first_visible_row_of_bucket():
    table, notices = _table()
    table.apply_filter(lambda gw: gw == "B")

    assert table.highlight_bucket("2024-01-01") == 1
    assert table.highlighted_keys() == ["2024-01-01"]
    assert table.highlight_bucket("2024-01-02") is None
    assert notices == ["table", "table", "table"]


def test_clear_highlight_only_notifies_when_something_changed():
    table, notices = _table()

    table.clear_highlight()
    assert notices == []

    table.highlight_bucket("2024-01-02")
    table.clear_highlight()
    assert notices == ["table", "table"]
    assert table.highlighted_keys() == []


def test_repeated_highlight_of_same_bucket_does_not_notify():
    table, notices = _table()

    for _ in range(20):
        assert table.highlight_bucket("2024-01-01") == 0
    assert notices == ["table"]

    table.highlight_bucket("2024-01-09")
    table.highlight_bucket("2024-01-09")
    assert notices == ["table", "table"]
    assert table.highlighted_keys() == []


def test_hovering_one_bucket_refreshes_table_once():
    table, notices = _table()
    table.set_rows([TableRow("A", hour, [hour], {}) for hour in HOURS])
    notices.clear()
    controller = ChartController("daily")
    chart = controller.create_or_update(HeadlessSurface(), daily_series([], ["A"]), hover_target=table)
    x = chart.x_scale().pixel_for_value(3)

    for _ in range(20):
        controller.pointer_move(x)

    assert notices == ["table"]
    assert table.highlighted_keys() == ["03"]


def test_visible_sums_and_busy_flag():
    table, notices = _table()

    assert table.visible_sums(lambda gw: gw == "A", ("energy",)) == {"energy": 4.0}
    assert table.visible_sums(lambda gw: True, ("energy", "missing")) == {"energy": 6.0, "missing": 0.0}

    table.set_busy(False)
    table.set_busy(True)
    table.set_busy(True)
    assert notices == ["table"]


def test_stat_card_text_formats_by_kind():
    assert StatCard("Energy", "kWh").text == "-"
    assert StatCard("Energy", "kWh", 3.14159).text == "3.14"
    assert StatCard("Runtime", "hours", 2.25, runtime=True).text in {"2.2", "2.3"}


def test_document_mount_binds_page_and_resets_surfaces():
    document = Document()
    regions = []
    document.subscribe(regions.append)
    first = OverviewPageVM()
    document.mount(first)
    surface = document.canvas(first.CANVAS_ID)

    assert document.canvas(first.CANVAS_ID) is surface
    first.set_inputs("2024-01-01", "2024-01-02")
    first.table.set_busy(True)
    assert regions == ["root", "inputs", "table"]
    assert document.has_root("overview-page")

    document.mount(ReadingsPageVM())

    assert not document.has_root("overview-page")
    assert document.canvas(first.CANVAS_ID) is not surface
    assert document.mutation_count == 4


def test_page_inputs_reject_unknown_names():
    vm = ReadingsPageVM()
    edits = []
    vm.on_filter_change = lambda: edits.append((vm.gateway_id, vm.date_from))

    vm.edit_filter("date_from", "2024-03-01")

    assert edits == [("", "2024-03-01")]
    with pytest.raises(ValueError):
        vm.edit_filter("sort", "x")
