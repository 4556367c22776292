from __future__ import annotations

import logging
from typing import List

from geodash.domain.ports import KeyboardPort, KeyListener

LOGGER = logging.getLogger(__name__)


class KeyboardBus(KeyboardPort):
    """Document-level keydown fan-out fed by the browser bridge or by tests."""

    def __init__(self) -> None:
        self._listeners: List[KeyListener] = []

    def add_listener(self, listener: KeyListener) -> None:
        self._listeners.append(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def press(self, key: str, target_tag: str = "BODY") -> None:
        tag = str(target_tag or "BODY").upper()
        LOGGER.debug("keydown %s on %s", key, tag)
        for listener in list(self._listeners):
            listener(key, tag)


__all__ = ["KeyboardBus"]
