"""Settings read from the environment.

No settings are required; every value has a default and bad values fall
back to it.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "CLARITY_PLAN"

OUTPUT_FORMATS: tuple[str, ...] = ("text", "json")


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env_log_level(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = (os.getenv(name) or "").strip().lower()
    return raw if raw in choices else default


def _env_path(name: str) -> Optional[Path]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return Path(raw).expanduser()


@dataclass(frozen=True)
class Settings:
    log_level: int = logging.WARNING
    log_file: Optional[Path] = None
    output_format: str = "text"


def load_settings() -> Settings:
    return Settings(
        log_level=_env_log_level(_k("LOG_LEVEL"), logging.WARNING),
        log_file=_env_path(_k("LOG_FILE")),
        output_format=_env_choice(_k("FORMAT"), OUTPUT_FORMATS, "text"),
    )
