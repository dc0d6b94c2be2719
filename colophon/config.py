from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

LOG_LEVEL_ENV = "COLOPHON_LOG_LEVEL"
OUTPUT_ENV = "COLOPHON_OUTPUT"
OUTPUT_FORMATS = ("text", "json")


def read_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Read *name* from the environment, falling back to the file named by ``<name>_FILE``."""
    value = os.getenv(name)
    if value not in {None, ""}:
        return value

    file_var = os.getenv(f"{name}_FILE")
    if not file_var:
        return default

    try:
        content = Path(file_var).read_text(encoding="utf-8")
    except OSError:
        return default
    return content.rstrip("\r\n")


@dataclass(frozen=True)
class Settings:
    log_level: int = logging.WARNING
    output: str = "text"


def _parse_log_level(raw: Optional[str]) -> int:
    if not raw:
        return logging.WARNING
    cleaned = raw.strip().upper()
    if cleaned.isdigit():
        return int(cleaned)
    level = logging.getLevelName(cleaned)
    return level if isinstance(level, int) else logging.WARNING


def load_settings() -> Settings:
    output = (read_env(OUTPUT_ENV, "text") or "text").strip().lower()
    if output not in OUTPUT_FORMATS:
        output = "text"
    return Settings(log_level=_parse_log_level(read_env(LOG_LEVEL_ENV)), output=output)
