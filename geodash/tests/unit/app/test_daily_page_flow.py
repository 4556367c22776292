import asyncio

from geodash.domain.series import TOTAL_SERIES_ID
from geodash.tests.unit.helpers import (
    GW_A,
    GW_B,
    FakeApi,
    daily_response,
    make_dashboard,
    overview_response,
    settle,
    ten_day_rows,
)
from geodash.viewmodels.pages import DailyPageVM

HOURLY = [("09", GW_A, 4.0), ("09", GW_B, 0.0), ("10", GW_B, 2.0)]


def _daily_dashboard(initial="/daily?date=2024-03-15"):
    api = FakeApi(
        daily=daily_response("2024-03-15", HOURLY),
        overview=overview_response(ten_day_rows()),
    )
    dashboard, scheduler, _ = make_dashboard(api, initial)
    return api, dashboard


def _run(dashboard, *steps):
    async def scenario():
        dashboard.start()
        await settle(dashboard)
        for step in steps:
            step()
            await settle(dashboard)

    asyncio.run(scenario())


def test_daily_view_renders_hourly_chart_table_and_summary():
    api, dashboard = _daily_dashboard()
    _run(dashboard)

    vm = dashboard.document.page
    assert isinstance(vm, DailyPageVM)
    assert api.calls == [("daily", {"date": "2024-03-15"})]
    assert vm.date == "2024-03-15"
    assert vm.prev_link.href == "/daily?date=2024-03-14"
    assert vm.next_link.href == "/daily?date=2024-03-16"

    chart = dashboard.charts.daily.chart
    assert len(chart.labels) == 24
    assert chart.dataset(TOTAL_SERIES_ID).points[9] == 4.0
    assert chart.dataset(TOTAL_SERIES_ID).points[10] == 2.0
    assert vm.summary["energy"].value == 6.0
    assert vm.summary["energy"].text == "6.00"
    assert [row.cells[0] for row in vm.table.rows] == ["09:00", "09:00", "10:00"]
    assert vm.table.headers[2].label == "Total (kWh)"


def test_daily_filter_hides_series_and_recomputes_summary():
    _, dashboard = _daily_dashboard()
    _run(dashboard)
    vm = dashboard.document.page

    vm.click_pill(GW_B)

    chart = dashboard.charts.daily.chart
    total = chart.dataset(TOTAL_SERIES_ID)
    assert chart.dataset(GW_A).hidden
    assert total.points[9] == 0.0
    assert total.points[10] == 2.0
    assert total.hidden
    assert vm.summary["energy"].value == 2.0
    assert [row.hidden for row in vm.table.rows] == [True, False, False]


def test_keyboard_steps_days_and_ignores_form_fields():
    api, dashboard = _daily_dashboard()
    keyboard = dashboard.keyboard
    _run(
        dashboard,
        lambda: keyboard.press("ArrowLeft"),
        lambda: keyboard.press("l"),
        lambda: keyboard.press("ArrowRight", "input"),
        lambda: keyboard.press("x"),
    )

    assert [call[1]["date"] for call in api.calls] == ["2024-03-15", "2024-03-14", "2024-03-16"]
    assert keyboard.listener_count == 1
    assert dashboard.document.mutations.count("root") == 1


def test_keyboard_is_inert_on_other_pages():
    api, dashboard = _daily_dashboard()
    keyboard = dashboard.keyboard
    _run(
        dashboard,
        lambda: dashboard.router.navigate("/"),
        lambda: keyboard.press("h"),
    )

    assert [call[0] for call in api.calls] == ["daily", "overview"]
    assert dashboard.charts.daily.state == "absent"


def test_date_input_navigates():
    api, dashboard = _daily_dashboard()
    _run(dashboard, lambda: dashboard.document.page.edit_date("2024-02-01"))

    assert api.calls[-1] == ("daily", {"date": "2024-02-01"})
    assert dashboard.router.history.current() == "/daily?date=2024-02-01"


def test_empty_day_shows_placeholder():
    api = FakeApi(daily=daily_response("2024-03-15", [], gateways=[]))
    dashboard, _, _ = make_dashboard(api, "/daily")
    _run(dashboard)

    vm = dashboard.document.page
    assert api.calls == [("daily", {"date": ""})]
    assert vm.table.is_empty
    assert vm.table.empty_message == "No data for selected date"
    assert dashboard.charts.daily.chart.dataset(TOTAL_SERIES_ID).points == [0.0] * 24
