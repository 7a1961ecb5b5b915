"""Host configuration read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from espresso_log.stores import RECENT_SHOTS

DEFAULT_DATA_PATH = "~/.espresso-log/data.json"


def _log_level(value: str | None, default: str) -> str:
    name = (value or "").strip().upper()
    # getLevelName maps known names to their number and anything else to a string
    if name and isinstance(logging.getLevelName(name), int):
        return name
    return default


def _safe_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class EspressoLogConfig:
    data_path: Path = Path(DEFAULT_DATA_PATH).expanduser()
    log_level: str = "WARNING"
    recent_limit: int = RECENT_SHOTS

    @classmethod
    def from_env(cls) -> "EspressoLogConfig":
        recent_limit = _safe_int(os.getenv("ESPRESSO_LOG_RECENT_LIMIT"), RECENT_SHOTS)
        return cls(
            data_path=Path(os.getenv("ESPRESSO_LOG_DATA_PATH") or DEFAULT_DATA_PATH).expanduser(),
            log_level=_log_level(os.getenv("ESPRESSO_LOG_LEVEL"), "WARNING"),
            recent_limit=recent_limit if recent_limit > 0 else RECENT_SHOTS,
        )
