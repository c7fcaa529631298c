"""Library configuration objects and helpers."""

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


def _env_int(name: str, default: int, *, minimum: int = 1) -> int:
    """Read a positive integer setting, rejecting malformed values."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if parsed < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {parsed}")
    return parsed


def completion_window_days() -> int:
    """Default rolling window for single-habit completion percentages."""

    return _env_int("HABITPULSE_COMPLETION_WINDOW_DAYS", BaseConfig.DEFAULT_COMPLETION_WINDOW_DAYS)


def top_streaks_limit() -> int:
    """Default length of the dashboard's top-streak list."""

    return _env_int("HABITPULSE_TOP_STREAKS", BaseConfig.DEFAULT_TOP_STREAKS)


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitPulse"
    DB_FILENAME = "habitpulse.db"
    DEFAULT_COMPLETION_WINDOW_DAYS = 30
    DEFAULT_TOP_STREAKS = 5

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABITPULSE_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("HABITPULSE_DATABASE_URL", self._build_sqlite_url())
        self.COMPLETION_WINDOW_DAYS = completion_window_days()
        self.TOP_STREAKS = top_streaks_limit()

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HABITPULSE_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {}
        if self.DATABASE_URL.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        return {"connect_args": connect_args}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration for tests: throwaway SQLite file under the data dir."""

    __test__ = False  # keep pytest from collecting this class

    DEBUG = True
    TESTING = True
    DB_FILENAME = "habitpulse-test.db"

    def __init__(self, data_dir: Path | str | None = None) -> None:
        self._data_dir_override = data_dir
        super().__init__()
        self.DEV_MODE = True
        self.DATABASE_URL = self._build_sqlite_url()

    def _resolve_data_dir(self) -> Path:
        if self._data_dir_override is None:
            return super()._resolve_data_dir()
        path = Path(self._data_dir_override).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path
