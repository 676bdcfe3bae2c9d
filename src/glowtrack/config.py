"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "GlowTrack"
    DB_FILENAME = "glowtrack.db"
    DEFAULT_TIMEZONE = "Europe/London"
    API_KEY_HEADER = "X-API-Key"

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("GLOWTRACK_SECRET_KEY", "replace-me")
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("GLOWTRACK_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("GLOWTRACK_DATABASE_URL", self._build_sqlite_url())
        self.API_KEY = os.getenv("GLOWTRACK_API_KEY") or None
        self.DEFAULT_TIMEZONE = os.getenv("GLOWTRACK_DEFAULT_TIMEZONE", self.DEFAULT_TIMEZONE)
        # Rolling window of steps created when a routine is published
        self.GENERATION_WINDOW_DAYS = _env_int("GLOWTRACK_GENERATION_WINDOW_DAYS", 60)
        # Horizon for routines without an end date
        self.ONGOING_ROUTINE_MONTHS = _env_int("GLOWTRACK_ONGOING_ROUTINE_MONTHS", 6)
        self.STREAK_FETCH_DAYS = _env_int("GLOWTRACK_STREAK_FETCH_DAYS", 60)
        self.MISSED_SWEEP_MINUTES = _env_int("GLOWTRACK_MISSED_SWEEP_MINUTES", 15)
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("GLOWTRACK_SECRET_KEY must be set in non-dev mode.")
        if self.STREAK_FETCH_DAYS < 1:
            raise ValueError("GLOWTRACK_STREAK_FETCH_DAYS must be at least 1.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory holding the SQLite file and logs."""

        data_root = os.getenv("GLOWTRACK_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        engine_options: dict[str, Any] = {"pool_pre_ping": True}
        if self.DATABASE_URL.startswith("sqlite"):
            engine_options["connect_args"] = {"check_same_thread": False}
        return engine_options


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration used by the test-suite."""

    __test__ = False
    DEBUG = False
    TESTING = True
