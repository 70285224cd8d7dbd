"""Configuration models and helpers."""

from __future__ import annotations

from .settings import (
    AppSettings,
    LoggingSettings,
    SearchSettings,
    ServerSettings,
    StorageSettings,
    ensure_dir,
    get_settings,
    reset_settings_cache,
)

__all__ = [
    "AppSettings",
    "LoggingSettings",
    "SearchSettings",
    "ServerSettings",
    "StorageSettings",
    "ensure_dir",
    "get_settings",
    "reset_settings_cache",
]
