"""Environment-driven settings for the command line front end."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

LOG_LEVEL_VAR = "GLYPH_LOG_LEVEL"
PY_TRACE_VAR = "GLYPH_DEBUG_PY_TRACE"

_TRUTHY = {"1", "true", "yes", "on"}
_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

SOURCE_SUFFIX = ".gly"


def _flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    log_level: str = "WARNING"
    py_trace: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        env = os.environ if environ is None else environ
        level = env.get(LOG_LEVEL_VAR, "WARNING").strip().upper()
        if level not in _LEVELS:
            level = "WARNING"
        return cls(log_level=level, py_trace=_flag(env.get(PY_TRACE_VAR)))
