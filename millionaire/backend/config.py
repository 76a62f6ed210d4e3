"""Configuration helpers for backend runtime."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass(frozen=True)
class BackendSettings:
    database_url: str | None
    gemini_api_key: str | None
    gemini_model: str
    advice_timeout: float
    host: str
    port: int
    log_level: str


def load_settings() -> BackendSettings:
    port_raw = os.getenv("MILLIONAIRE_PORT", "8000")
    timeout_raw = os.getenv("MILLIONAIRE_ADVICE_TIMEOUT", "30")
    return BackendSettings(
        database_url=os.getenv("MILLIONAIRE_DATABASE_URL"),
        gemini_api_key=os.getenv("MILLIONAIRE_GEMINI_API_KEY") or os.getenv("GEMINI_API_KEY"),
        gemini_model=os.getenv("MILLIONAIRE_GEMINI_MODEL", "gemini-2.5-flash"),
        advice_timeout=float(timeout_raw),
        host=os.getenv("MILLIONAIRE_HOST", "127.0.0.1"),
        port=int(port_raw),
        log_level=os.getenv("MILLIONAIRE_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
