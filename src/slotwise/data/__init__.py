"""Data access layer."""

from __future__ import annotations

from .cache.day_index import DayIndex
from .event_store import EventStore
from .repositories.events import EventFileRepository

__all__ = ["DayIndex", "EventFileRepository", "EventStore"]
