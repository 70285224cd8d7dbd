"""Shared fixtures for the slotwise test suite."""
from __future__ import annotations

from datetime import datetime

import pytest

import slotwise.bootstrap.logging as logging_bootstrap
from slotwise.api import api_state
from slotwise.config import reset_settings_cache
from slotwise.services import CalendarService


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point every setting at a temporary directory and keep handlers off the root logger."""
    for name in (
        "SLOTWISE_EVENTS_FILE",
        "SLOTWISE_HOLIDAYS",
        "SLOTWISE_SEARCH_MAX_ITERATIONS",
        "SLOTWISE_SEARCH_FALLBACK_MINUTES",
        "SLOTWISE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SLOTWISE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("SLOTWISE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setattr(logging_bootstrap, "_INITIALIZED", True)
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def calendar():
    """In-memory calendar service with no file attached."""
    return CalendarService()


@pytest.fixture
def meeting_day(calendar):
    """Calendar holding a single 10:00-11:00 meeting on Thursday 2025-11-13."""
    calendar.add_event("Standup", "daily sync", datetime(2025, 11, 13, 10, 0), datetime(2025, 11, 13, 11, 0))
    return calendar


@pytest.fixture
def api_calendar(calendar):
    """Route the registered API functions to the in-memory calendar."""
    api_state.use(calendar)
    yield calendar
    api_state.use(None)
