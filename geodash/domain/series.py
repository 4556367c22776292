"""Derive chart datasets from the flat aggregate rows returned by the API.

Both charts use the same shape: one dataset per gateway plus a derived
``__total`` dataset, all aligned on a shared ordered label sequence. The
overview keys buckets by date (or date+time for finer resolutions); the daily
view keys them by zero-padded hour.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from .entities import BucketTotal, GatewayId, HourlyRow, Resolution
from .formatting import gateway_name

TOTAL_SERIES_ID = "__total"
COLORS = ("#3b82f6", "#f59e0b", "#10b981", "#ef4444")
TOTAL_COLOR = "#111827"
HOURS = tuple(f"{hour:02d}" for hour in range(24))


@dataclass
class Dataset:
    """A single line series. ``series_key`` stays stable across updates."""

    series_key: str
    label: str
    color: str
    points: List[float] = field(default_factory=list)
    hidden: bool = False
    border_width: int = 2
    point_radius: int = 2

    @property
    def is_total(self) -> bool:
        return self.series_key == TOTAL_SERIES_ID

    @property
    def background(self) -> str:
        return f"{self.color}22"


@dataclass
class ChartData:
    """Input to ``ChartController.create_or_update``.

    ``bucket_keys`` parallels ``labels`` and carries the key used to match
    table rows during cross-highlighting (date or zero-padded hour).
    """

    labels: List[str]
    datasets: List[Dataset]
    resolution: Resolution = "daily"
    bucket_keys: Optional[List[str]] = None


def gateway_dataset(gateway_id: GatewayId, index: int, points: Sequence[float]) -> Dataset:
    return Dataset(
        series_key=gateway_id,
        label=gateway_name(gateway_id),
        color=COLORS[index % len(COLORS)],
        points=[float(value) for value in points],
    )


def total_dataset(points: Sequence[float]) -> Dataset:
    return Dataset(
        series_key=TOTAL_SERIES_ID,
        label="Total",
        color=TOTAL_COLOR,
        points=[float(value) for value in points],
        border_width=3,
    )


def sum_points(series: Iterable[Sequence[float]], length: int) -> List[float]:
    """Element-wise sum of ``series`` over ``length`` buckets."""
    total = [0.0] * length
    for points in series:
        for idx, value in enumerate(points[:length]):
            total[idx] += value
    return total


def overview_series(
    totals: Sequence[BucketTotal],
    gateways: Sequence[GatewayId],
    resolution: Resolution = "daily",
) -> ChartData:
    """Build the overview chart: sorted bucket labels, one series per gateway, total."""
    labels = sorted({row.date for row in totals})
    index = {label: pos for pos, label in enumerate(labels)}
    by_gateway: Dict[GatewayId, List[float]] = {gw: [0.0] * len(labels) for gw in gateways}
    for row in totals:
        values = by_gateway.get(row.gateway_id)
        if values is None:
            continue
        values[index[row.date]] = row.total_energy

    datasets = [gateway_dataset(gw, pos, by_gateway[gw]) for pos, gw in enumerate(gateways)]
    datasets.append(total_dataset(sum_points((ds.points for ds in datasets), len(labels))))
    return ChartData(labels=labels, datasets=datasets, resolution=resolution)


def daily_series(hourly: Sequence[HourlyRow], gateways: Sequence[GatewayId]) -> ChartData:
    """Build the 24-bucket daily chart keyed by zero-padded hour."""
    by_gateway: Dict[GatewayId, List[float]] = {gw: [0.0] * 24 for gw in gateways}
    for row in hourly:
        values = by_gateway.get(row.gateway_id)
        if values is None:
            continue
        try:
            hour = int(row.hour)
        except ValueError:
            continue
        if 0 <= hour < 24:
            values[hour] = row.total_energy

    datasets = [gateway_dataset(gw, pos, by_gateway[gw]) for pos, gw in enumerate(gateways)]
    datasets.append(total_dataset(sum_points((ds.points for ds in datasets), 24)))
    return ChartData(
        labels=[f"{hour}:00" for hour in HOURS],
        datasets=datasets,
        resolution="daily",
        bucket_keys=list(HOURS),
    )


def visible_total(datasets: Sequence[Dataset], length: int) -> List[float]:
    """Recompute the total from non-hidden gateway datasets."""
    return sum_points(
        (ds.points for ds in datasets if not ds.is_total and not ds.hidden), length
    )


__all__ = [
    "COLORS",
    "ChartData",
    "Dataset",
    "HOURS",
    "TOTAL_COLOR",
    "TOTAL_SERIES_ID",
    "daily_series",
    "gateway_dataset",
    "overview_series",
    "sum_points",
    "total_dataset",
    "visible_total",
]
