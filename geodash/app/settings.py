from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

LOGGER = logging.getLogger(__name__)

DEFAULT_API_URL = "http://127.0.0.1:8000"


@dataclass(frozen=True)
class DashboardSettings:
    """Runtime settings for the dashboard web process."""

    api_url: str = DEFAULT_API_URL
    request_timeout_s: float = 10.0
    host: str = "127.0.0.1"
    port: int = 8080
    storage_secret: str = "geodash-web-ui-secret"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DashboardSettings":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            api_url=(env.get("GEODASH_API_URL") or defaults.api_url).rstrip("/"),
            request_timeout_s=_coerce_float(
                "GEODASH_REQUEST_TIMEOUT_S", env.get("GEODASH_REQUEST_TIMEOUT_S"), defaults.request_timeout_s
            ),
            host=env.get("GEODASH_HOST") or defaults.host,
            port=int(_coerce_float("GEODASH_PORT", env.get("GEODASH_PORT"), defaults.port)),
            storage_secret=env.get("GEODASH_STORAGE_SECRET") or defaults.storage_secret,
        )

    def with_overrides(self, **changes: object) -> "DashboardSettings":
        """Apply CLI overrides, ignoring ``None`` values."""
        filtered = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **filtered)


def _coerce_float(name: str, raw: Optional[str], fallback: float) -> float:
    if raw is None or not str(raw).strip():
        return fallback
    try:
        value = float(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r", name, raw)
        return fallback
    if value <= 0:
        LOGGER.warning("Ignoring non-positive %s=%r", name, raw)
        return fallback
    return value


__all__ = ["DEFAULT_API_URL", "DashboardSettings"]
