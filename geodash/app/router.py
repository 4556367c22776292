"""Client-side router mapping URL paths onto async page handlers.

The router owns the *current page* identifier. ``dispatch`` sets it before the
handler starts so a handler awaiting a slow fetch can compare it afterwards
and drop its result when the user has navigated elsewhere.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit

from geodash.domain.errors import RequestAborted
from geodash.domain.ports import HistoryPort

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Location:
    """Parsed same-origin URL: path plus decoded query parameters."""

    path: str
    params: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, url: str) -> "Location":
        parts = urlsplit(str(url or "/"))
        path = parts.path or "/"
        params: Dict[str, str] = {}
        for key, value in parse_qsl(parts.query, keep_blank_values=True):
            params.setdefault(key, value)
        return cls(path=path, params=params)

    def get(self, key: str, default: str = "") -> str:
        return self.params.get(key) or default

    @property
    def href(self) -> str:
        if not self.params:
            return self.path
        return f"{self.path}?{urlencode(self.params)}"


def build_url(path: str, **params: object) -> str:
    """Build ``path?query`` keeping only non-empty parameters, in call order."""
    query = {key: str(value) for key, value in params.items() if value not in (None, "")}
    return f"{path}?{urlencode(query)}" if query else path


RouteHandler = Callable[[Location], Awaitable[None]]
ErrorHook = Callable[[BaseException], None]


class Router:
    """Exact-path router over an injected history port."""

    def __init__(self, history: HistoryPort, *, on_error: Optional[ErrorHook] = None) -> None:
        self.history = history
        self.on_error = on_error
        self._routes: Dict[str, RouteHandler] = {}
        self._current_page: Optional[str] = None
        self._tasks: List[asyncio.Task] = []

    @property
    def current_page(self) -> Optional[str]:
        return self._current_page

    @property
    def paths(self) -> List[str]:
        return list(self._routes.keys())

    def register(self, path: str, handler: RouteHandler) -> None:
        self._routes[path] = handler

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def navigate(self, url: str, replace: bool = False) -> Optional[asyncio.Task]:
        href = Location.parse(url).href
        if replace:
            self.history.replace(href)
        else:
            self.history.push(href)
        return self.dispatch(href)

    def dispatch(self, url: str) -> Optional[asyncio.Task]:
        """Run the handler registered for ``url``'s path, if any.

        The current page is updated synchronously; the handler itself runs as a
        task on the event loop. Returns that task, or ``None`` when no route
        matches (in which case nothing changes).
        """
        location = Location.parse(url)
        handler = self._routes.get(location.path)
        if handler is None:
            LOGGER.debug("No route for %s", location.path)
            return None
        self._current_page = location.path
        LOGGER.debug("Dispatch %s", location.href)
        task = asyncio.ensure_future(self._run(handler, location))
        self._tasks = [t for t in self._tasks if not t.done()]
        self._tasks.append(task)
        return task

    def handle_link_click(self, href: str, marked: bool) -> bool:
        """Intercept a click on ``href``; only marked links are routed client-side.

        Returns ``True`` when the default browser action should be prevented.
        """
        if not marked or not href:
            return False
        self.navigate(href)
        return True

    def on_popstate(self) -> Optional[asyncio.Task]:
        return self.dispatch(self.history.current())

    def start(self) -> Optional[asyncio.Task]:
        return self.dispatch(self.history.current())

    async def settle(self) -> None:
        """Wait until every handler task started so far has finished."""
        while True:
            pending = [t for t in self._tasks if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _run(self, handler: RouteHandler, location: Location) -> None:
        try:
            await handler(location)
        except RequestAborted:
            LOGGER.debug("Superseded load for %s dropped", location.href)
        except Exception as exc:
            LOGGER.exception("Page handler for %s failed", location.path)
            if self.on_error is not None:
                self.on_error(exc)


__all__ = ["ErrorHook", "Location", "RouteHandler", "Router", "build_url"]
