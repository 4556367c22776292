
"""Domain package exports for payloads, series and shared helpers."""

from .entities import (
    BucketTotal,
    DailyResponse,
    GatewayId,
    HourlyRow,
    OverviewResponse,
    Reading,
    ReadingsResponse,
    Resolution,
)
from .errors import RequestAborted
from .series import TOTAL_SERIES_ID, ChartData, Dataset

__all__ = [
    "BucketTotal",
    "ChartData",
    "DailyResponse",
    "Dataset",
    "GatewayId",
    "HourlyRow",
    "OverviewResponse",
    "Reading",
    "ReadingsResponse",
    "RequestAborted",
    "Resolution",
    "TOTAL_SERIES_ID",
]
