"""Typed payloads returned by the aggregation API and consumed by page controllers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Literal, Mapping, Optional, Sequence, Tuple

GatewayId = str
Resolution = Literal["daily", "hourly", "15min"]
RESOLUTIONS: Tuple[str, ...] = ("daily", "hourly", "15min")
SORT_COLUMNS: Tuple[str, ...] = ("timestamp", "gateway_id", "total_power")
READINGS_PAGE_SIZE = 50


def _as_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return int(default)


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _gateway_list(raw: Any) -> List[GatewayId]:
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        return []
    return [str(item) for item in raw if item is not None]


def _rows(raw: Any) -> List[Mapping[str, Any]]:
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        return []
    return [item for item in raw if isinstance(item, Mapping)]


def coerce_resolution(value: Any) -> Resolution:
    """Return ``value`` when it is a known resolution, otherwise ``daily``."""
    token = _as_str(value).strip()
    return token if token in RESOLUTIONS else "daily"  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Overview
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class OverviewStats:
    total_energy: float = 0.0
    total_heating: float = 0.0
    total_cooling: float = 0.0
    total_runtime: float = 0.0

    @classmethod
    def from_payload(cls, payload: Any) -> "OverviewStats":
        data = payload if isinstance(payload, Mapping) else {}
        return cls(
            total_energy=_as_float(data.get("total_energy")),
            total_heating=_as_float(data.get("total_heating")),
            total_cooling=_as_float(data.get("total_cooling")),
            total_runtime=_as_float(data.get("total_runtime")),
        )


@dataclass(frozen=True)
class BucketTotal:
    """One ``(bucket, gateway)`` aggregate row of the overview response."""

    date: str
    gateway_id: GatewayId
    total_energy: float = 0.0
    total_heating: float = 0.0
    total_cooling: float = 0.0
    total_runtime: float = 0.0

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "BucketTotal":
        return cls(
            date=_as_str(data.get("date")),
            gateway_id=_as_str(data.get("gateway_id")),
            total_energy=_as_float(data.get("total_energy")),
            total_heating=_as_float(data.get("total_heating")),
            total_cooling=_as_float(data.get("total_cooling")),
            total_runtime=_as_float(data.get("total_runtime")),
        )


@dataclass(frozen=True)
class OverviewFilters:
    date_from: str = ""
    date_to: str = ""
    resolution: Resolution = "daily"


@dataclass(frozen=True)
class OverviewResponse:
    stats: OverviewStats
    totals: List[BucketTotal] = field(default_factory=list)
    gateways: List[GatewayId] = field(default_factory=list)
    filters: OverviewFilters = field(default_factory=OverviewFilters)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "OverviewResponse":
        filters = payload.get("filters") if isinstance(payload.get("filters"), Mapping) else {}
        return cls(
            stats=OverviewStats.from_payload(payload.get("stats")),
            totals=[BucketTotal.from_payload(row) for row in _rows(payload.get("totals"))],
            gateways=_gateway_list(payload.get("gateways")),
            filters=OverviewFilters(
                date_from=_as_str(filters.get("date_from")),
                date_to=_as_str(filters.get("date_to")),
                resolution=coerce_resolution(filters.get("resolution")),
            ),
        )


# ---------------------------------------------------------------------------
# Daily
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class DailySummary:
    total_energy: float = 0.0
    total_heating: float = 0.0
    total_cooling: float = 0.0


@dataclass(frozen=True)
class HourlyRow:
    """Per-hour, per-gateway breakdown with heat/cool stage components."""

    hour: str
    gateway_id: GatewayId
    total_energy: float = 0.0
    total_heating: float = 0.0
    total_cooling: float = 0.0
    heat_1: float = 0.0
    heat_2: float = 0.0
    cool_1: float = 0.0
    cool_2: float = 0.0

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "HourlyRow":
        return cls(
            hour=_as_str(data.get("hour")).zfill(2),
            gateway_id=_as_str(data.get("gateway_id")),
            total_energy=_as_float(data.get("total_energy")),
            total_heating=_as_float(data.get("total_heating")),
            total_cooling=_as_float(data.get("total_cooling")),
            heat_1=_as_float(data.get("heat_1")),
            heat_2=_as_float(data.get("heat_2")),
            cool_1=_as_float(data.get("cool_1")),
            cool_2=_as_float(data.get("cool_2")),
        )


@dataclass(frozen=True)
class DailyResponse:
    date: str
    summary: DailySummary = field(default_factory=DailySummary)
    hourly: List[HourlyRow] = field(default_factory=list)
    gateways: List[GatewayId] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "DailyResponse":
        summary = payload.get("summary") if isinstance(payload.get("summary"), Mapping) else {}
        return cls(
            date=_as_str(payload.get("date")),
            summary=DailySummary(
                total_energy=_as_float(summary.get("total_energy")),
                total_heating=_as_float(summary.get("total_heating")),
                total_cooling=_as_float(summary.get("total_cooling")),
            ),
            hourly=[HourlyRow.from_payload(row) for row in _rows(payload.get("hourly"))],
            gateways=_gateway_list(payload.get("gateways")),
        )


# ---------------------------------------------------------------------------
# Readings
# ---------------------------------------------------------------------------
READING_COUNTERS: Tuple[str, ...] = (
    "total_heat_1",
    "total_heat_2",
    "total_cool_1",
    "total_cool_2",
    "total_electric_heat",
    "total_fan_only",
    "total_loop_pump",
    "total_dehumidification",
    "runtime_heat_1",
    "runtime_heat_2",
    "runtime_cool_1",
    "runtime_cool_2",
    "runtime_electric_heat",
    "runtime_fan_only",
    "runtime_dehumidification",
    "total_power",
)


@dataclass(frozen=True)
class Reading:
    """Raw 15-minute interval reading; counters are ``None`` when not reported."""

    id: int
    gateway_id: GatewayId
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

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "Reading":
        counters = {name: _as_optional_float(data.get(name)) for name in READING_COUNTERS}
        return cls(
            id=_as_int(data.get("id"), 0),
            gateway_id=_as_str(data.get("gateway_id")),
            timestamp=_as_int(data.get("timestamp"), 0),
            **counters,
        )


@dataclass(frozen=True)
class ReadingsFilters:
    gateway_id: str = ""
    date_from: str = ""
    date_to: str = ""
    sort: str = "timestamp"
    order: str = "desc"


@dataclass(frozen=True)
class ReadingsResponse:
    readings: List[Reading] = field(default_factory=list)
    page: int = 1
    total: int = 0
    gateways: List[GatewayId] = field(default_factory=list)
    filters: ReadingsFilters = field(default_factory=ReadingsFilters)

    @property
    def total_pages(self) -> int:
        return -(-max(0, self.total) // READINGS_PAGE_SIZE)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ReadingsResponse":
        filters = payload.get("filters") if isinstance(payload.get("filters"), Mapping) else {}
        return cls(
            readings=[Reading.from_payload(row) for row in _rows(payload.get("readings"))],
            page=max(1, _as_int(payload.get("page"), 1)),
            total=max(0, _as_int(payload.get("total"), 0)),
            gateways=_gateway_list(payload.get("gateways")),
            filters=ReadingsFilters(
                gateway_id=_as_str(filters.get("gateway_id")),
                date_from=_as_str(filters.get("date_from")),
                date_to=_as_str(filters.get("date_to")),
                sort=_as_str(filters.get("sort")) or "timestamp",
                order=_as_str(filters.get("order")) or "desc",
            ),
        )


__all__ = [
    "BucketTotal",
    "DailyResponse",
    "DailySummary",
    "GatewayId",
    "HourlyRow",
    "OverviewFilters",
    "OverviewResponse",
    "OverviewStats",
    "READINGS_PAGE_SIZE",
    "READING_COUNTERS",
    "RESOLUTIONS",
    "Reading",
    "ReadingsFilters",
    "ReadingsResponse",
    "Resolution",
    "SORT_COLUMNS",
    "coerce_resolution",
]
