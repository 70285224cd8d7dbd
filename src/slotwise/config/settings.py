from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv
from platformdirs import user_data_dir

from ..domain.calendar import DEFAULT_HOLIDAYS, InvalidDateError, MonthDay, parse_holidays

load_dotenv()

APP_NAME = "slotwise"
APP_AUTHOR = "slotwise"


@dataclass(frozen=True)
class StorageSettings:
    data_dir: Path
    events_file: Path


@dataclass(frozen=True)
class SearchSettings:
    max_iterations: int
    fallback_step: timedelta
    holidays: Tuple[MonthDay, ...]


@dataclass(frozen=True)
class ServerSettings:
    host: str
    port: int


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    log_dir: Path


@dataclass(frozen=True)
class AppSettings:
    storage: StorageSettings
    search: SearchSettings
    server: ServerSettings
    logging: LoggingSettings


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _path_from_env(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    return Path(raw).expanduser() if raw else default


def _holidays_from_env(name: str) -> Tuple[MonthDay, ...]:
    raw = os.getenv(name)
    if raw is None:
        return DEFAULT_HOLIDAYS
    try:
        return parse_holidays(raw)
    except (InvalidDateError, ValueError):
        return DEFAULT_HOLIDAYS


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    data_dir = _path_from_env("SLOTWISE_DATA_DIR", Path(user_data_dir(APP_NAME, APP_AUTHOR)))

    storage = StorageSettings(
        data_dir=data_dir,
        events_file=_path_from_env("SLOTWISE_EVENTS_FILE", data_dir / "events.txt"),
    )

    search = SearchSettings(
        max_iterations=max(_int_from_env("SLOTWISE_SEARCH_MAX_ITERATIONS", 365 * 24 * 60 // 15), 1),
        fallback_step=timedelta(minutes=max(_int_from_env("SLOTWISE_SEARCH_FALLBACK_MINUTES", 15), 1)),
        holidays=_holidays_from_env("SLOTWISE_HOLIDAYS"),
    )

    server = ServerSettings(
        host=os.getenv("SLOTWISE_API_HOST", "127.0.0.1"),
        port=_int_from_env("SLOTWISE_API_PORT", 8000),
    )

    logging_settings = LoggingSettings(
        level=os.getenv("SLOTWISE_LOG_LEVEL", "INFO").upper(),
        log_dir=_path_from_env("SLOTWISE_LOG_DIR", data_dir / "logs"),
    )

    return AppSettings(storage=storage, search=search, server=server, logging=logging_settings)


def reset_settings_cache() -> None:
    """Drop the cached settings so the next ``get_settings`` re-reads the environment."""

    get_settings.cache_clear()
