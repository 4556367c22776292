"""Gateway filter state shared by the chart, table and summary renderers.

Selection is exclusive: picking a gateway replaces the current selection,
picking the active gateway again returns to the unrestricted state. An empty
selection means every gateway is visible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Sequence, Set

from geodash.domain.entities import GatewayId
from geodash.domain.formatting import gateway_name

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterState:
    """Read-only snapshot of the selected gateway set."""

    selected_gateways: FrozenSet[GatewayId] = frozenset()

    def is_visible(self, gateway_id: GatewayId) -> bool:
        return not self.selected_gateways or gateway_id in self.selected_gateways


@dataclass(frozen=True)
class FilterPill:
    gateway_id: GatewayId
    label: str
    active: bool


FilterListener = Callable[[FilterState], None]


class FilterStore:
    """Single source of truth for gateway visibility with a change fan-out."""

    def __init__(self) -> None:
        self._selected: Set[GatewayId] = set()
        self._listeners: List[FilterListener] = []

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def subscribe(self, listener: FilterListener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # ------------------------------------------------------------------
    # Mutations (each notifies exactly once)
    # ------------------------------------------------------------------
    def toggle(self, gateway_id: GatewayId) -> None:
        if gateway_id in self._selected:
            self._selected.discard(gateway_id)
        else:
            self._selected.clear()
            self._selected.add(gateway_id)
        LOGGER.debug("Gateway filter -> %s", sorted(self._selected))
        self._notify()

    def clear(self) -> None:
        self._selected.clear()
        self._notify()

    def reset(self) -> None:
        """Start a fresh page skeleton: drop old renderers and empty the selection."""
        self._listeners.clear()
        self._selected.clear()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def is_visible(self, gateway_id: GatewayId) -> bool:
        return not self._selected or gateway_id in self._selected

    def get_state(self) -> FilterState:
        return FilterState(selected_gateways=frozenset(self._selected))

    def pills(self, gateways: Sequence[GatewayId]) -> List[FilterPill]:
        return [
            FilterPill(gateway_id=gw, label=gateway_name(gw), active=gw in self._selected)
            for gw in gateways
        ]

    @property
    def has_active(self) -> bool:
        """Whether the clear-filters button should be shown."""
        return bool(self._selected)

    def _notify(self) -> None:
        state = self.get_state()
        for listener in list(self._listeners):
            listener(state)


__all__ = ["FilterListener", "FilterPill", "FilterState", "FilterStore"]
