import asyncio

from geodash.domain.series import TOTAL_SERIES_ID
from geodash.tests.unit.helpers import (
    GW_A,
    GW_B,
    FakeApi,
    make_dashboard,
    overview_response,
    settle,
    spin,
    ten_day_rows,
)
from geodash.viewmodels.pages import OverviewPageVM

LEFT = 56.0
STEP = 80.0


def _px(index):
    return LEFT + STEP * index


def _loaded_overview(rows=None, **kwargs):
    api = FakeApi(overview=overview_response(ten_day_rows() if rows is None else rows, **kwargs))
    dashboard, scheduler, clock = make_dashboard(api)
    return api, dashboard, scheduler, clock


def test_overview_renders_table_chart_and_visible_stats():
    api, dashboard, _, _ = _loaded_overview()

    async def scenario():
        dashboard.start()
        await settle(dashboard)

    asyncio.run(scenario())

    vm = dashboard.document.page
    assert isinstance(vm, OverviewPageVM)
    assert api.calls == [("overview", {"date_from": "", "date_to": "", "resolution": "daily"})]
    assert (vm.date_from, vm.date_to, vm.resolution) == ("2024-01-01", "2024-01-10", "daily")
    assert len(vm.table.rows) == 20
    assert vm.table.headers[0].label == "Date"
    assert not vm.table.busy
    assert dashboard.overview.stat_texts() == {
        "energy": "75.00",
        "heating": "37.50",
        "cooling": "18.75",
        "runtime": "30.0",
    }
    assert [p.label for p in vm.pills] == ["3-Ton", "4-Ton"]
    assert not vm.show_clear_filters

    chart = dashboard.charts.overview.chart
    assert chart.labels[0] == "2024-01-01"
    assert chart.dataset(TOTAL_SERIES_ID).points[0] == 3.0


def test_pill_toggle_filters_table_chart_and_stats_together():
    _, dashboard, _, _ = _loaded_overview()

    async def scenario():
        dashboard.start()
        await settle(dashboard)

    asyncio.run(scenario())
    vm = dashboard.document.page
    assert dashboard.filters.listener_count == 3

    vm.click_pill(GW_A)

    chart = dashboard.charts.overview.chart
    assert all(row.hidden == (row.gateway_id == GW_B) for row in vm.table.rows)
    assert chart.dataset(GW_B).hidden
    assert chart.dataset(TOTAL_SERIES_ID).points[0] == 1.0
    assert chart.dataset(TOTAL_SERIES_ID).hidden
    assert dashboard.overview.stat_texts()["energy"] == "55.00"
    assert vm.show_clear_filters
    assert [p.active for p in vm.pills] == [True, False]

    vm.click_clear_filters()

    assert not any(row.hidden for row in vm.table.rows)
    assert dashboard.overview.stat_texts()["energy"] == "75.00"
    assert not vm.show_clear_filters


def test_drag_zoom_updates_inputs_then_navigates_after_debounce():
    api, dashboard, scheduler, _ = _loaded_overview()

    async def scenario():
        dashboard.start()
        await settle(dashboard)
        vm = dashboard.document.page
        surface = dashboard.document.canvas(OverviewPageVM.CANVAS_ID)

        surface.gestures.pointer_down(_px(2))
        surface.gestures.pointer_move(_px(5))
        surface.gestures.pointer_up()

        assert (vm.date_from, vm.date_to) == ("2024-01-03", "2024-01-06")
        assert len(api.calls) == 1

        scheduler.advance(499)
        assert len(api.calls) == 1
        scheduler.advance(1)
        await settle(dashboard)
        return surface

    surface = asyncio.run(scenario())

    assert api.calls[-1] == (
        "overview",
        {"date_from": "2024-01-03", "date_to": "2024-01-06", "resolution": "daily"},
    )
    assert dashboard.router.history.current() == "/?date_from=2024-01-03&date_to=2024-01-06&resolution=daily"
    assert dashboard.document.mutations.count("root") == 1
    assert surface.attach_count == 1
    assert surface.last_render["duration_ms"] == 400


def test_date_edits_are_debounced_into_one_navigation():
    api, dashboard, scheduler, _ = _loaded_overview()

    async def scenario():
        dashboard.start()
        await settle(dashboard)
        vm = dashboard.document.page

        vm.edit_input("date_from", "2024-01-02")
        scheduler.advance(300)
        vm.edit_input("date_to", "2024-01-05")
        scheduler.advance(300)
        assert len(api.calls) == 1
        scheduler.advance(200)
        await settle(dashboard)

    asyncio.run(scenario())

    assert len(api.calls) == 2
    assert api.calls[-1][1]["date_from"] == "2024-01-02"
    assert api.calls[-1][1]["date_to"] == "2024-01-05"


def test_incomplete_range_does_not_navigate():
    api, dashboard, scheduler, _ = _loaded_overview()

    async def scenario():
        dashboard.start()
        await settle(dashboard)
        dashboard.document.page.edit_input("date_from", "")
        scheduler.advance(500)
        await settle(dashboard)

    asyncio.run(scenario())

    assert len(api.calls) == 1


def test_wheel_zoom_goes_through_the_same_debounce():
    api, dashboard, scheduler, _ = _loaded_overview()

    async def scenario():
        dashboard.start()
        await settle(dashboard)
        surface = dashboard.document.canvas(OverviewPageVM.CANVAS_ID)
        assert surface.gestures.wheel(100) is True
        scheduler.advance(500)
        await settle(dashboard)

    asyncio.run(scenario())

    assert api.calls[-1][1]["date_from"] == "2023-12-31"
    assert api.calls[-1][1]["date_to"] == "2024-01-11"


def test_double_click_drills_down_to_daily_view():
    api, dashboard, _, _ = _loaded_overview()

    async def scenario():
        dashboard.start()
        await settle(dashboard)
        surface = dashboard.document.canvas(OverviewPageVM.CANVAS_ID)
        api.hold = True
        surface.gestures.double_click(_px(3))
        await spin()
        return surface

    surface = asyncio.run(scenario())

    assert dashboard.router.current_page == "/daily"
    assert dashboard.router.history.current() == "/daily?date=2024-01-04"
    assert surface.dispose_count == 1


def test_empty_range_shows_placeholder():
    _, dashboard, _, _ = _loaded_overview(rows=[], gateways=[])

    async def scenario():
        dashboard.start()
        await settle(dashboard)

    asyncio.run(scenario())

    vm = dashboard.document.page
    assert vm.table.is_empty
    assert vm.table.empty_message == "No data for selected range"
    assert dashboard.charts.overview.chart.labels == []
    assert dashboard.overview.stat_texts()["energy"] == "0.00"


def test_hover_highlights_every_row_of_the_bucket():
    _, dashboard, _, _ = _loaded_overview()

    async def scenario():
        dashboard.start()
        await settle(dashboard)

    asyncio.run(scenario())
    vm = dashboard.document.page
    surface = dashboard.document.canvas(OverviewPageVM.CANVAS_ID)
    viewport = dashboard.document.viewport(OverviewPageVM.VIEWPORT_ID)

    surface.gestures.pointer_move(_px(1))

    assert vm.table.highlighted_keys() == ["2024-01-02"]
    assert viewport.scrolled == [2]

    surface.gestures.pointer_leave()
    assert vm.table.highlighted_keys() == []
