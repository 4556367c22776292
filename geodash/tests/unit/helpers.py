from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from geodash.adapters.history_memory import MemoryHistory
from geodash.adapters.keyboard_bus import KeyboardBus
from geodash.app.dashboard import Dashboard
from geodash.app.timers import TimerRegistry
from geodash.domain.entities import DailyResponse, OverviewResponse, ReadingsResponse
from geodash.viewmodels.document import Document

GW_A = "8813BF342F64"
GW_B = "8813BF34217C"


class FakeScheduler:
    """Manual ``after``-style scheduler: nothing fires until the test says so."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._next = 0
        self.pending: Dict[int, Tuple[int, Callable[[], None]]] = {}
        self.cancelled: List[int] = []

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> int:
        self._next += 1
        self.pending[self._next] = (self.now_ms + delay_ms, callback)
        return self._next

    def cancel(self, token: int) -> None:
        self.cancelled.append(token)
        self.pending.pop(token, None)

    def advance(self, ms: int) -> None:
        self.now_ms += ms
        due = sorted(
            (when, token) for token, (when, _) in self.pending.items() if when <= self.now_ms
        )
        for _, token in due:
            entry = self.pending.pop(token, None)
            if entry is not None:
                entry[1]()

    def registry(self) -> TimerRegistry:
        return TimerRegistry(self.schedule, self.cancel)


class FakeClock:
    def __init__(self, start_ms: float = 1_000.0) -> None:
        self.now = start_ms

    def __call__(self) -> float:
        return self.now


class FakeApi:
    """API port double. With ``hold`` set, calls park on futures the test resolves."""

    def __init__(
        self,
        *,
        overview: Optional[OverviewResponse] = None,
        daily: Optional[DailyResponse] = None,
        readings: Optional[ReadingsResponse] = None,
    ) -> None:
        self.overview = overview
        self.daily = daily
        self.readings = readings
        self.hold = False
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.parked: List[Tuple[str, asyncio.Future]] = []

    async def _answer(self, kind: str, kwargs: Dict[str, Any], canned: Any) -> Any:
        self.calls.append((kind, kwargs))
        if self.hold:
            future = asyncio.get_running_loop().create_future()
            self.parked.append((kind, future))
            return await future
        if canned is None:
            raise AssertionError(f"No canned {kind} response")
        return canned

    async def fetch_overview(self, **kwargs: Any) -> OverviewResponse:
        return await self._answer("overview", kwargs, self.overview)

    async def fetch_daily(self, **kwargs: Any) -> DailyResponse:
        return await self._answer("daily", kwargs, self.daily)

    async def fetch_readings(self, **kwargs: Any) -> ReadingsResponse:
        return await self._answer("readings", kwargs, self.readings)


def overview_response(
    rows: Sequence[Tuple[str, str, float]],
    *,
    gateways: Sequence[str] = (GW_A, GW_B),
    date_from: str = "2024-01-01",
    date_to: str = "2024-01-10",
    resolution: str = "daily",
) -> OverviewResponse:
    """Build an overview payload from ``(date, gateway, energy)`` rows."""
    return OverviewResponse.from_payload(
        {
            "stats": {
                "total_energy": sum(energy for _, _, energy in rows),
                "total_heating": 0,
                "total_cooling": 0,
                "total_runtime": 0,
            },
            "totals": [
                {
                    "date": date,
                    "gateway_id": gw,
                    "total_energy": energy,
                    "total_heating": energy / 2,
                    "total_cooling": energy / 4,
                    "total_runtime": 1.5,
                }
                for date, gw, energy in rows
            ],
            "gateways": list(gateways),
            "filters": {"date_from": date_from, "date_to": date_to, "resolution": resolution},
        }
    )


def daily_response(
    date: str,
    rows: Sequence[Tuple[str, str, float]],
    *,
    gateways: Sequence[str] = (GW_A, GW_B),
) -> DailyResponse:
    """Build a daily payload from ``(hour, gateway, energy)`` rows."""
    hourly = [
        {
            "hour": hour,
            "gateway_id": gw,
            "total_energy": energy,
            "total_heating": energy,
            "total_cooling": 0,
            "heat_1": energy,
            "heat_2": 0,
            "cool_1": 0,
            "cool_2": 0,
        }
        for hour, gw, energy in rows
    ]
    return DailyResponse.from_payload(
        {
            "date": date,
            "summary": {
                "total_energy": sum(energy for _, _, energy in rows),
                "total_heating": sum(energy for _, _, energy in rows),
                "total_cooling": 0,
            },
            "hourly": hourly,
            "gateways": list(gateways),
        }
    )


def ten_day_rows(value_a: float = 1.0, value_b: float = 2.0) -> List[Tuple[str, str, float]]:
    rows: List[Tuple[str, str, float]] = []
    for day in range(1, 11):
        date = f"2024-01-{day:02d}"
        rows.append((date, GW_A, value_a * day))
        rows.append((date, GW_B, value_b))
    return rows


def make_dashboard(
    api: FakeApi,
    initial: str = "/",
    *,
    today: str = "2024-06-01",
    errors: Optional[List[BaseException]] = None,
) -> Tuple[Dashboard, FakeScheduler, FakeClock]:
    scheduler = FakeScheduler()
    clock = FakeClock()
    dashboard = Dashboard(
        api,
        MemoryHistory(initial),
        document=Document(),
        keyboard=KeyboardBus(),
        timers=scheduler.registry(),
        today=lambda: today,
        clock_ms=clock,
        on_error=errors.append if errors is not None else None,
    )
    return dashboard, scheduler, clock


async def settle(dashboard: Dashboard) -> None:
    await dashboard.router.settle()


async def spin(rounds: int = 5) -> None:
    """Let pending tasks run without waiting for parked fetches."""
    for _ in range(rounds):
        await asyncio.sleep(0)


__all__ = [
    "FakeApi",
    "FakeClock",
    "FakeScheduler",
    "GW_A",
    "GW_B",
    "daily_response",
    "make_dashboard",
    "overview_response",
    "settle",
    "spin",
    "ten_day_rows",
]
