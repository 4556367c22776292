# /opt/geodash/app.py
import argparse
import datetime
import logging
import os
import pathlib
from contextlib import asynccontextmanager
from typing import List, Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import uvicorn
from fastapi import APIRouter, FastAPI, HTTPException
from pydantic import BaseModel, Field

from geodash.utils.logging import configure_root
from rest_api.storage import SORT_COLUMNS, ReadingStore

LOGGER = logging.getLogger("geodash.api")

DB_PATH = pathlib.Path(os.getenv("GEODASH_DB_PATH", "geodash.db"))
TIMEZONE = os.getenv("TIMEZONE", "America/Los_Angeles")
PAGE_SIZE = 50
DEFAULT_WINDOW_DAYS = 7
RESOLUTIONS = ("daily", "hourly", "15min")

STORE: Optional[ReadingStore] = None


# ---------- Models ----------
class OverviewStats(BaseModel):
    total_energy: float = 0.0
    total_heating: float = 0.0
    total_cooling: float = 0.0
    total_runtime: float = 0.0


class BucketTotal(BaseModel):
    date: str
    gateway_id: str
    total_energy: float = 0.0
    total_heating: float = 0.0
    total_cooling: float = 0.0
    total_runtime: float = 0.0


class OverviewFilters(BaseModel):
    date_from: str
    date_to: str
    resolution: Literal["daily", "hourly", "15min"] = "daily"


class OverviewResponse(BaseModel):
    stats: OverviewStats
    totals: List[BucketTotal] = Field(default_factory=list)
    gateways: List[str] = Field(default_factory=list)
    filters: OverviewFilters


class DailySummary(BaseModel):
    total_energy: float = 0.0
    total_heating: float = 0.0
    total_cooling: float = 0.0


class HourlyRow(BaseModel):
    hour: str
    gateway_id: str
    total_energy: float = 0.0
    total_heating: float = 0.0
    total_cooling: float = 0.0
    heat_1: float = 0.0
    heat_2: float = 0.0
    cool_1: float = 0.0
    cool_2: float = 0.0


class DailyResponse(BaseModel):
    date: str
    summary: DailySummary
    hourly: List[HourlyRow] = Field(default_factory=list)
    gateways: List[str] = Field(default_factory=list)


class EnergyReading(BaseModel):
    id: int
    gateway_id: str
    timestamp: int
    total_heat_1: Optional[float] = None
    total_heat_2: Optional[float] = None
    total_cool_1: Optional[float] = None
    total_cool_2: Optional[float] = None
    total_electric_heat: Optional[float] = None
    total_fan_only: Optional[float] = None
    total_loop_pump: Optional[float] = None
    total_dehumidification: Optional[float] = None
    runtime_heat_1: Optional[float] = None
    runtime_heat_2: Optional[float] = None
    runtime_cool_1: Optional[float] = None
    runtime_cool_2: Optional[float] = None
    runtime_electric_heat: Optional[float] = None
    runtime_fan_only: Optional[float] = None
    runtime_dehumidification: Optional[float] = None
    total_power: Optional[float] = None


class ReadingsFilters(BaseModel):
    gateway_id: str = ""
    date_from: str = ""
    date_to: str = ""
    sort: str = "timestamp"
    order: Literal["asc", "desc"] = "desc"


class ReadingsResponse(BaseModel):
    readings: List[EnergyReading] = Field(default_factory=list)
    page: int = 1
    total: int = 0
    gateways: List[str] = Field(default_factory=list)
    filters: ReadingsFilters


# ---------- Time helpers ----------
def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        LOGGER.warning("Unknown TIMEZONE %r, falling back to UTC", name)
        return ZoneInfo("UTC")


def _parse_date(value: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise HTTPException(400, f"Invalid date: {value}")


def tz_offset_ms(timezone_name: str, date_str: str) -> int:
    """UTC offset of ``timezone_name`` at 12:00 UTC on ``date_str``, in ms."""
    day = _parse_date(date_str)
    noon = datetime.datetime(day.year, day.month, day.day, 12, tzinfo=datetime.timezone.utc)
    offset = noon.astimezone(_zone(timezone_name)).utcoffset() or datetime.timedelta(0)
    return int(offset.total_seconds() * 1000)


def date_to_unix_ms(date_str: str, timezone_name: str, end_of_day: bool = False) -> int:
    """Unix ms of local midnight (or 23:59:59.999 when ``end_of_day``)."""
    day = _parse_date(date_str)
    start = datetime.datetime(day.year, day.month, day.day, tzinfo=datetime.timezone.utc)
    utc_ms = int(start.timestamp() * 1000)
    if end_of_day:
        utc_ms += 24 * 3600 * 1000 - 1
    return utc_ms - tz_offset_ms(timezone_name, date_str)


def local_today(timezone_name: str) -> datetime.date:
    return datetime.datetime.now(_zone(timezone_name)).date()


def default_range(timezone_name: str) -> tuple:
    today = local_today(timezone_name)
    return (today - datetime.timedelta(days=DEFAULT_WINDOW_DAYS)).isoformat(), today.isoformat()


# ---------- Startup ----------
def get_store() -> ReadingStore:
    global STORE
    if STORE is None:
        STORE = ReadingStore(DB_PATH)
        STORE.ensure_schema()
        LOGGER.info("Opened reading store at %s", DB_PATH)
    return STORE


@asynccontextmanager
async def lifespan(app: FastAPI):
    global STORE
    get_store()
    try:
        yield
    finally:
        if STORE is not None:
            STORE.close()
            STORE = None


router = APIRouter(prefix="/api")


# ---------- Aggregations ----------
@router.get("/overview", response_model=OverviewResponse)
def overview(date_from: str = "", date_to: str = "", resolution: str = "daily"):
    default_from, default_to = default_range(TIMEZONE)
    date_from = date_from or default_from
    date_to = date_to or default_to
    if resolution not in RESOLUTIONS:
        resolution = "daily"

    offset_ms = tz_offset_ms(TIMEZONE, date_from)
    from_ms = date_to_unix_ms(date_from, TIMEZONE)
    to_ms = date_to_unix_ms(date_to, TIMEZONE, end_of_day=True)

    store = get_store()
    return OverviewResponse(
        stats=OverviewStats(**store.overview_stats(from_ms, to_ms)),
        totals=[BucketTotal(**row) for row in store.bucket_totals(resolution, offset_ms, from_ms, to_ms)],
        gateways=store.gateways(),
        filters=OverviewFilters(date_from=date_from, date_to=date_to, resolution=resolution),
    )


@router.get("/daily", response_model=DailyResponse)
def daily(date: str = ""):
    date = date or local_today(TIMEZONE).isoformat()
    offset_ms = tz_offset_ms(TIMEZONE, date)
    from_ms = date_to_unix_ms(date, TIMEZONE)
    to_ms = date_to_unix_ms(date, TIMEZONE, end_of_day=True)

    store = get_store()
    return DailyResponse(
        date=date,
        summary=DailySummary(**store.daily_summary(from_ms, to_ms)),
        hourly=[HourlyRow(**row) for row in store.hourly_breakdown(offset_ms, from_ms, to_ms)],
        gateways=store.gateways(),
    )


@router.get("/readings", response_model=ReadingsResponse)
def readings(
    page: str = "1",
    gateway_id: str = "",
    date_from: str = "",
    date_to: str = "",
    sort: str = "timestamp",
    order: str = "desc",
):
    try:
        page_num = max(1, int(page))
    except ValueError:
        page_num = 1
    sort_column = sort if sort in SORT_COLUMNS else "timestamp"
    sort_order = "asc" if order == "asc" else "desc"

    store = get_store()
    total, rows = store.readings_page(
        gateway_id=gateway_id,
        from_ms=date_to_unix_ms(date_from, TIMEZONE) if date_from else None,
        to_ms=date_to_unix_ms(date_to, TIMEZONE, end_of_day=True) if date_to else None,
        sort=sort_column,
        descending=sort_order == "desc",
        limit=PAGE_SIZE,
        offset=(page_num - 1) * PAGE_SIZE,
    )
    return ReadingsResponse(
        readings=[EnergyReading(**row) for row in rows],
        page=page_num,
        total=total,
        gateways=store.gateways(),
        filters=ReadingsFilters(
            gateway_id=gateway_id,
            date_from=date_from,
            date_to=date_to,
            sort=sort_column,
            order=sort_order,
        ),
    )


app = FastAPI(title="GeoDash Data API", version="0.1.0", lifespan=lifespan)
app.include_router(router)


@app.get("/health")
def health():
    store = get_store()
    return {"ok": True, "gateways": len(store.gateways()), "timezone": TIMEZONE}


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the GeoDash data API.")
    parser.add_argument("--host", default=os.getenv("GEODASH_API_HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("GEODASH_API_PORT", "8000")))
    args = parser.parse_args()
    configure_root()
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
