"""Adapter settings — configured through environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Settings:
    source_name: str = "wasm_input"
    engine:      str = "naive"
    log_level:   str = "WARNING"


def get_settings() -> Settings:
    return Settings(
        source_name = os.getenv("DLQ_SOURCE_NAME", "wasm_input"),
        engine      = os.getenv("DLQ_ENGINE",      "naive"),
        log_level   = os.getenv("DLQ_LOG_LEVEL",   "WARNING").upper(),
    )
