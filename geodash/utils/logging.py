"""Root logger setup shared by the dashboard and the data API.

``GEODASH_LOG_LEVEL`` (name or number) wins over a truthy ``GEODASH_DEBUG``,
which wins over the caller's default.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"
LEVEL_ENV = "GEODASH_LOG_LEVEL"
DEBUG_ENV = "GEODASH_DEBUG"

Level = Union[int, str]


def parse_level(value: Optional[Level], fallback: int = logging.INFO) -> int:
    """Map ``"warning"``, ``"30"`` or ``30`` to a level; anything else to ``fallback``."""
    if value is None:
        return fallback
    if isinstance(value, int):
        return value
    text = value.strip()
    if not text:
        return fallback
    try:
        return int(text)
    except ValueError:
        pass
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else fallback


def env_level(env: Optional[Mapping[str, str]] = None) -> Optional[int]:
    env = os.environ if env is None else env
    raw = env.get(LEVEL_ENV)
    if raw and raw.strip():
        return parse_level(raw)
    if (env.get(DEBUG_ENV) or "").strip().lower() in {"1", "true", "yes", "on"}:
        return logging.DEBUG
    return None


def configure_root(default_level: Level = logging.INFO, env: Optional[Mapping[str, str]] = None) -> int:
    """Install the compact handler once and set the root level; returns the level."""
    level = env_level(env)
    if level is None:
        level = parse_level(default_level)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    root.setLevel(level)
    return level
