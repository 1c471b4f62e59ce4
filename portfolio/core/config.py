"""
Configuration helpers for the portfolio backend.

Exposes a Settings object read from environment variables (storage backend,
fallback resource, update check throttle, category table) so that
repositories/services do not fetch os.environ directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

PACKAGE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_FALLBACK = PACKAGE_DIR / "data" / "projects.json"
DEFAULT_STORAGE_PATH = Path.cwd() / "storage.json"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    log_level: str
    storage_backend: str
    storage_path: str
    database_url: str
    fallback_source: str
    fallback_timeout: float
    update_check_interval_seconds: int
    categories_file: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _float(value: str, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        storage_backend=(os.getenv("STORAGE_BACKEND") or "json").strip().lower(),
        storage_path=os.getenv("STORAGE_PATH", str(DEFAULT_STORAGE_PATH)),
        database_url=os.getenv("DATABASE_URL", ""),
        fallback_source=os.getenv("FALLBACK_SOURCE", str(DEFAULT_FALLBACK)),
        fallback_timeout=_float(os.getenv("FALLBACK_TIMEOUT", "10"), 10.0),
        update_check_interval_seconds=_int(os.getenv("UPDATE_CHECK_INTERVAL_SECONDS", "3600"), 3600),
        categories_file=os.getenv("CATEGORIES_FILE", ""),
    )
