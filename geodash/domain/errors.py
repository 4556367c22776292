"""Domain-level error types shared by adapters, router and page controllers."""

from __future__ import annotations


class RequestAborted(Exception):
    """A data request was superseded by a newer one before it completed.

    The router treats this as a silent no-op; it is never shown to the user.
    """

    def __init__(self, context: str = "") -> None:
        super().__init__(f"Request aborted: {context}" if context else "Request aborted")
        self.context = context


__all__ = ["RequestAborted"]
