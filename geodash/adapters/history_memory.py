"""In-process session history used headless and by the NiceGUI bridge."""

from __future__ import annotations

from typing import List

from geodash.domain.ports import HistoryPort


class MemoryHistory(HistoryPort):
    """Linear history stack with ``pushState``/``replaceState`` semantics."""

    def __init__(self, initial: str = "/") -> None:
        self._entries: List[str] = [initial]
        self._index = 0

    def push(self, href: str) -> None:
        del self._entries[self._index + 1 :]
        self._entries.append(href)
        self._index = len(self._entries) - 1

    def replace(self, href: str) -> None:
        self._entries[self._index] = href

    def current(self) -> str:
        return self._entries[self._index]

    def sync(self, href: str) -> None:
        """Adopt a URL reported by the browser after a back/forward move."""
        for candidate in (self._index - 1, self._index + 1, self._index):
            if 0 <= candidate < len(self._entries) and self._entries[candidate] == href:
                self._index = candidate
                return
        if href in self._entries:
            self._index = self._entries.index(href)
        else:
            self.push(href)

    @property
    def entries(self) -> List[str]:
        return list(self._entries)


__all__ = ["MemoryHistory"]
