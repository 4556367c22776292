import datetime

import pytest
from fastapi.testclient import TestClient

from rest_api import app as app_module

GW_A = "8813BF342F64"
GW_B = "8813BF34217C"


def _ms(*parts):
    moment = datetime.datetime(*parts, tzinfo=datetime.timezone.utc)
    return int(moment.timestamp() * 1000)


READINGS = [
    {
        "gateway_id": GW_A,
        "timestamp": _ms(2024, 3, 15, 9, 0),
        "total_power": 1.0,
        "total_heat_1": 0.5,
        "runtime_heat_1": 0.25,
    },
    {"gateway_id": GW_A, "timestamp": _ms(2024, 3, 15, 9, 15), "total_power": 2.0, "total_heat_2": 1.0},
    {"gateway_id": GW_B, "timestamp": _ms(2024, 3, 15, 10, 30), "total_power": 4.0, "total_cool_2": 3.0},
    {"gateway_id": GW_B, "timestamp": _ms(2024, 3, 16, 0, 0), "total_power": 8.0},
    {"gateway_id": GW_A, "timestamp": _ms(2024, 3, 14, 23, 45), "total_power": 16.0},
]


@pytest.fixture
def client(monkeypatch, tmp_path):
    monkeypatch.setattr(app_module, "DB_PATH", tmp_path / "geodash.db")
    monkeypatch.setattr(app_module, "TIMEZONE", "UTC")
    monkeypatch.setattr(app_module, "STORE", None)

    with TestClient(app_module.app) as test_client:
        app_module.get_store().insert_readings(READINGS)
        yield test_client


def test_overview_daily_buckets_newest_first(client):
    resp = client.get("/api/overview", params={"date_from": "2024-03-15", "date_to": "2024-03-16"})
    assert resp.status_code == 200
    body = resp.json()

    assert [(t["date"], t["gateway_id"], t["total_energy"]) for t in body["totals"]] == [
        ("2024-03-16", GW_B, 8.0),
        ("2024-03-15", GW_B, 4.0),
        ("2024-03-15", GW_A, 3.0),
    ]
    assert body["stats"] == {
        "total_energy": 15.0,
        "total_heating": 1.5,
        "total_cooling": 3.0,
        "total_runtime": 0.25,
    }
    assert body["gateways"] == sorted([GW_A, GW_B])
    assert body["filters"] == {"date_from": "2024-03-15", "date_to": "2024-03-16", "resolution": "daily"}


def test_overview_finer_resolutions(client):
    hourly = client.get(
        "/api/overview",
        params={"date_from": "2024-03-15", "date_to": "2024-03-15", "resolution": "hourly"},
    ).json()
    assert [t["date"] for t in hourly["totals"]] == ["2024-03-15 10:00", "2024-03-15 09:00"]

    quarter = client.get(
        "/api/overview",
        params={"date_from": "2024-03-15", "date_to": "2024-03-15", "resolution": "15min"},
    ).json()
    assert [t["date"] for t in quarter["totals"]] == [
        "2024-03-15 10:30",
        "2024-03-15 09:15",
        "2024-03-15 09:00",
    ]


def test_overview_unknown_resolution_and_default_range(client):
    body = client.get("/api/overview", params={"resolution": "weekly"}).json()

    filters = body["filters"]
    assert filters["resolution"] == "daily"
    span = datetime.date.fromisoformat(filters["date_to"]) - datetime.date.fromisoformat(filters["date_from"])
    assert span.days == 7


def test_overview_rejects_invalid_dates(client):
    resp = client.get("/api/overview", params={"date_from": "2024-13-40", "date_to": "2024-03-16"})

    assert resp.status_code == 400
    assert "Invalid date" in resp.json()["detail"]


def test_daily_hourly_breakdown(client):
    body = client.get("/api/daily", params={"date": "2024-03-15"}).json()

    assert body["date"] == "2024-03-15"
    assert body["summary"] == {"total_energy": 7.0, "total_heating": 1.5, "total_cooling": 3.0}
    hourly = {(row["hour"], row["gateway_id"]): row for row in body["hourly"]}
    assert set(hourly) == {("09", GW_A), ("10", GW_B)}
    assert hourly[("09", GW_A)]["total_energy"] == 3.0
    assert hourly[("09", GW_A)]["heat_1"] == 0.5
    assert hourly[("09", GW_A)]["heat_2"] == 1.0
    assert hourly[("10", GW_B)]["cool_2"] == 3.0


def test_daily_respects_timezone_offset(client, monkeypatch):
    monkeypatch.setattr(app_module, "TIMEZONE", "America/Los_Angeles")

    body = client.get("/api/daily", params={"date": "2024-03-15"}).json()

    hours = {(row["hour"], row["gateway_id"]): row["total_energy"] for row in body["hourly"]}
    assert hours == {("02", GW_A): 3.0, ("03", GW_B): 4.0, ("17", GW_B): 8.0}
    assert body["summary"]["total_energy"] == 15.0


def test_readings_default_sort_and_pagination(client, monkeypatch):
    monkeypatch.setattr(app_module, "PAGE_SIZE", 2)

    first = client.get("/api/readings").json()
    assert first["total"] == 5
    assert first["page"] == 1
    assert [r["timestamp"] for r in first["readings"]] == [_ms(2024, 3, 16, 0, 0), _ms(2024, 3, 15, 10, 30)]
    assert first["filters"]["sort"] == "timestamp"
    assert first["filters"]["order"] == "desc"

    last = client.get("/api/readings", params={"page": 3}).json()
    assert [r["total_power"] for r in last["readings"]] == [16.0]


def test_readings_filters_and_sort_fallbacks(client):
    by_power = client.get("/api/readings", params={"sort": "total_power", "order": "asc"}).json()
    assert [r["total_power"] for r in by_power["readings"]] == [1.0, 2.0, 4.0, 8.0, 16.0]

    filtered = client.get(
        "/api/readings",
        params={"gateway_id": GW_A, "date_from": "2024-03-15", "date_to": "2024-03-15"},
    ).json()
    assert filtered["total"] == 2
    assert {r["gateway_id"] for r in filtered["readings"]} == {GW_A}

    fallback = client.get("/api/readings", params={"page": "abc", "sort": "id; DROP", "order": "sideways"}).json()
    assert fallback["page"] == 1
    assert fallback["filters"]["sort"] == "timestamp"
    assert fallback["filters"]["order"] == "desc"
    assert fallback["readings"][0]["total_heat_1"] is None


def test_health_reports_gateways(client):
    body = client.get("/health").json()

    assert body == {"ok": True, "gateways": 2, "timezone": "UTC"}


def test_time_helpers_follow_daylight_saving():
    assert app_module.tz_offset_ms("America/Los_Angeles", "2024-01-15") == -8 * 3600 * 1000
    assert app_module.tz_offset_ms("America/Los_Angeles", "2024-07-15") == -7 * 3600 * 1000
    assert app_module.date_to_unix_ms("2024-03-15", "UTC") == _ms(2024, 3, 15)
    assert app_module.date_to_unix_ms("2024-03-15", "UTC", end_of_day=True) == _ms(2024, 3, 16) - 1
