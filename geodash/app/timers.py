"""Timer registry for debounce, throttle and auto-clear callbacks.

Controllers never hold raw timer handles. They schedule by *purpose* key
(for example ``overview.dates`` or ``overview.wheel-preview``); scheduling a
key again cancels the pending callback first, so each purpose has at most
one live timer.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


ScheduleFn = Callable[[int, Callable[[], None]], Any]
CancelFn = Callable[[Any], None]


@dataclass
class TimerHandle:
    """Timer token associated with a single purpose key.

    Attributes:
        key: Purpose key (``overview.dates``, ``overview.wheel-preview``...).
        token: Scheduler token returned by the scheduler implementation.
    """
    key: str
    token: Any


class TimerRegistry:
    """Manage per-purpose timers on top of an ``after``-style scheduler."""

    def __init__(self, schedule: ScheduleFn, cancel: CancelFn) -> None:
        """Store schedule/cancel functions and initialize handle registry.

        Args:
            schedule: Function compatible with ``after(delay_ms, callback)``.
            cancel: Function cancelling a token returned by ``schedule``.
        """
        self._schedule = schedule
        self._cancel = cancel
        self._handles: Dict[str, TimerHandle] = {}

    def schedule(self, key: str, delay_ms: int, callback: Callable[[], None]) -> None:
        """Schedule or reschedule ``callback`` for ``key`` after ``delay_ms``."""
        delay = max(1, int(delay_ms))
        self.cancel(key)
        handle = TimerHandle(key=key, token=None)

        def _fire() -> None:
            if self._handles.get(key) is handle:
                del self._handles[key]
            callback()

        handle.token = self._schedule(delay, _fire)
        self._handles[key] = handle

    def cancel(self, key: str) -> None:
        """Cancel a pending timer for ``key``; unknown keys are ignored."""
        handle = self._handles.pop(key, None)
        if not handle:
            return
        self._cancel(handle.token)

    def cancel_all(self) -> None:
        for key in list(self._handles.keys()):
            self.cancel(key)

    def pending(self, key: str) -> bool:
        return key in self._handles


def asyncio_timers(loop: Optional[asyncio.AbstractEventLoop] = None) -> TimerRegistry:
    """Build a registry driven by ``loop.call_later`` on the running loop."""

    def _loop() -> asyncio.AbstractEventLoop:
        return loop or asyncio.get_running_loop()

    def _schedule(delay_ms: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return _loop().call_later(delay_ms / 1000.0, callback)

    def _cancel(token: asyncio.TimerHandle) -> None:
        token.cancel()

    return TimerRegistry(_schedule, _cancel)


__all__ = ["TimerHandle", "TimerRegistry", "asyncio_timers"]
