"""Pixel geometry for category line charts and the drag/zoom overlay state."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


def round_half_up(value: float) -> int:
    """Round to the nearest integer; ``x.5`` goes up (``2.5 -> 3``, ``-2.5 -> -2``)."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class ChartArea:
    """Plot rectangle inside the chart surface, in surface pixels."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def contains_x(self, x: float) -> bool:
        return self.left <= x <= self.right


@dataclass(frozen=True)
class CategoryScale:
    """Maps bucket indices to x pixels for a line chart without edge offsets.

    Index ``0`` sits on ``area.left`` and index ``count - 1`` on ``area.right``.
    """

    area: ChartArea
    count: int

    def _step(self) -> float:
        if self.count <= 1:
            return 0.0
        return self.area.width / (self.count - 1)

    def pixel_for_value(self, index: float) -> float:
        return self.area.left + index * self._step()

    def value_for_pixel(self, x: float) -> float:
        step = self._step()
        if step == 0:
            return 0.0
        return (x - self.area.left) / step

    def nearest_index(self, x: float) -> Optional[int]:
        """Return the bucket index closest to ``x``, clamped to the data range."""
        if self.count <= 0:
            return None
        idx = round_half_up(self.value_for_pixel(x))
        return max(0, min(self.count - 1, idx))


@dataclass
class DragZoomState:
    """Transient overlay state for a drag selection or a scroll-zoom preview."""

    active: bool = False
    start_px: Optional[float] = None
    end_px: Optional[float] = None
    clamp_left: bool = False
    clamp_right: bool = False

    def reset(self) -> None:
        self.active = False
        self.start_px = None
        self.end_px = None
        self.clamp_left = False
        self.clamp_right = False

    def span(self, area: ChartArea) -> Optional[tuple[float, float]]:
        """Return the overlay ``(x, width)`` clipped to ``area`` or ``None`` when idle."""
        if not self.active or self.start_px is None or self.end_px is None:
            return None
        left = max(min(self.start_px, self.end_px), area.left)
        right = min(max(self.start_px, self.end_px), area.right)
        return left, right - left


__all__ = ["CategoryScale", "ChartArea", "DragZoomState", "round_half_up"]
