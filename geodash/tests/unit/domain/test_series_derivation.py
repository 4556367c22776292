from geodash.domain.entities import BucketTotal, HourlyRow, OverviewResponse
from geodash.domain.series import (
    COLORS,
    HOURS,
    TOTAL_SERIES_ID,
    daily_series,
    overview_series,
    visible_total,
)


def test_overview_series_aligns_gateways_on_sorted_dates_and_fills_gaps():
    totals = [
        BucketTotal(date="2024-01-03", gateway_id="A", total_energy=3.0),
        BucketTotal(date="2024-01-01", gateway_id="A", total_energy=1.0),
        BucketTotal(date="2024-01-01", gateway_id="B", total_energy=5.0),
    ]

    chart = overview_series(totals, ["A", "B"])

    assert chart.labels == ["2024-01-01", "2024-01-03"]
    assert [ds.series_key for ds in chart.datasets] == ["A", "B", TOTAL_SERIES_ID]
    assert chart.datasets[0].points == [1.0, 3.0]
    assert chart.datasets[1].points == [5.0, 0.0]
    assert chart.datasets[2].points == [6.0, 3.0]
    assert chart.datasets[0].color == COLORS[0]
    assert chart.datasets[2].border_width == 3


def test_overview_series_ignores_rows_of_unlisted_gateways():
    totals = [
        BucketTotal(date="2024-01-01", gateway_id="A", total_energy=1.0),
        BucketTotal(date="2024-01-01", gateway_id="ghost", total_energy=9.0),
    ]

    chart = overview_series(totals, ["A"])

    assert chart.datasets[-1].points == [1.0]


def test_overview_series_empty_input_builds_empty_chart():
    chart = overview_series([], [])

    assert chart.labels == []
    assert len(chart.datasets) == 1
    assert chart.datasets[0].is_total
    assert chart.datasets[0].points == []


def test_daily_series_keys_by_zero_padded_hour():
    hourly = [
        HourlyRow(hour="09", gateway_id="A", total_energy=4.0),
        HourlyRow(hour="23", gateway_id="B", total_energy=1.5),
    ]

    chart = daily_series(hourly, ["A", "B"])

    assert chart.labels[0] == "00:00"
    assert chart.labels[9] == "09:00"
    assert chart.bucket_keys == list(HOURS)
    assert chart.datasets[0].points[9] == 4.0
    assert chart.datasets[1].points[23] == 1.5
    assert chart.datasets[-1].points[9] == 4.0
    assert sum(chart.datasets[-1].points) == 5.5


def test_visible_total_skips_hidden_and_total_series():
    chart = overview_series(
        [
            BucketTotal(date="2024-01-01", gateway_id="A", total_energy=1.0),
            BucketTotal(date="2024-01-01", gateway_id="B", total_energy=2.0),
        ],
        ["A", "B"],
    )
    chart.datasets[1].hidden = True

    assert visible_total(chart.datasets, 1) == [1.0]


def test_hourly_row_payload_pads_hour():
    row = HourlyRow.from_payload({"hour": "7", "gateway_id": "A", "total_energy": "2.5"})

    assert row.hour == "07"
    assert row.total_energy == 2.5


def test_overview_payload_falls_back_to_daily_resolution():
    response = OverviewResponse.from_payload(
        {"stats": None, "totals": "garbage", "gateways": ["A", None], "filters": {"resolution": "weekly"}}
    )

    assert response.filters.resolution == "daily"
    assert response.totals == []
    assert response.gateways == ["A"]
    assert response.stats.total_energy == 0.0
