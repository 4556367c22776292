"""Async HTTP adapter for the aggregation API.

The adapter keeps at most one logical request in flight: issuing a new fetch
cancels the previous one, and the superseded caller sees ``RequestAborted``.
Transport failures and non-2xx responses map onto the ``api_errors``
hierarchy and propagate; there is no retry policy.

Dependencies:
    - ``httpx`` for async network I/O.
    - ``geodash.domain.entities`` for typed response payloads.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from geodash.domain.entities import DailyResponse, OverviewResponse, ReadingsResponse
from geodash.domain.errors import RequestAborted
from geodash.domain.ports import DashboardApiPort

from .api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    ApiTimeoutError,
    build_error_message,
    extract_error_code,
    parse_error_payload,
)

LOGGER = logging.getLogger(__name__)


class DashboardRestAdapter(DashboardApiPort):
    """REST adapter for ``/api/overview``, ``/api/daily`` and ``/api/readings``."""

    def __init__(
        self,
        base_url: str,
        *,
        request_timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = str(base_url).rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=request_timeout_s,
            transport=transport,
        )
        self._inflight: Optional[asyncio.Task] = None

    async def fetch_overview(
        self, *, date_from: str = "", date_to: str = "", resolution: str = ""
    ) -> OverviewResponse:
        payload = await self._get_json(
            "/api/overview",
            {"date_from": date_from, "date_to": date_to, "resolution": resolution},
        )
        return OverviewResponse.from_payload(self._require_mapping(payload, "overview"))

    async def fetch_daily(self, *, date: str = "") -> DailyResponse:
        payload = await self._get_json("/api/daily", {"date": date})
        return DailyResponse.from_payload(self._require_mapping(payload, "daily"))

    async def fetch_readings(
        self,
        *,
        page: int = 1,
        gateway_id: str = "",
        date_from: str = "",
        date_to: str = "",
        sort: str = "",
        order: str = "",
    ) -> ReadingsResponse:
        payload = await self._get_json(
            "/api/readings",
            {
                "page": str(page) if page else "",
                "gateway_id": gateway_id,
                "date_from": date_from,
                "date_to": date_to,
                "sort": sort,
                "order": order,
            },
        )
        return ReadingsResponse.from_payload(self._require_mapping(payload, "readings"))

    async def aclose(self) -> None:
        self.abort()
        await self.client.aclose()

    def abort(self) -> None:
        """Cancel the in-flight request, if any."""
        task = self._inflight
        if task is not None and not task.done():
            LOGGER.debug("Aborting superseded request")
            task.cancel()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _get_json(self, path: str, params: Mapping[str, str]) -> Any:
        query = {key: value for key, value in params.items() if value}
        context = f"GET {self.base_url}{path}"
        self.abort()
        task = asyncio.ensure_future(self._send(path, query, context))
        self._inflight = task
        try:
            return await task
        except asyncio.CancelledError:
            # Only the adapter-initiated cancel is an abort; caller cancellation propagates.
            if task.cancelled() and self._inflight is not task:
                raise RequestAborted(context) from None
            raise
        finally:
            if self._inflight is task and task.done():
                self._inflight = None

    async def _send(self, path: str, query: Dict[str, str], context: str) -> Any:
        try:
            resp = await self.client.get(path, params=query, headers={"Accept": "application/json"})
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            raise ApiTimeoutError(f"Timeout contacting {self.base_url}{path}", context=context) from exc

        if resp.status_code >= 400:
            payload = parse_error_payload(resp)
            message = build_error_message(context, resp.status_code, payload)
            if resp.status_code >= 500:
                raise ApiServerError(message, status=resp.status_code, payload=payload, context=context)
            raise ApiClientError(
                message,
                status=resp.status_code,
                code=extract_error_code(payload),
                payload=payload,
                context=context,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError(f"{context}: invalid JSON response", context=context) from exc

    @staticmethod
    def _require_mapping(payload: Any, what: str) -> Mapping[str, Any]:
        if not isinstance(payload, Mapping):
            raise ApiError(f"Unexpected {what} payload type: {type(payload).__name__}")
        return payload


__all__ = ["DashboardRestAdapter"]
