from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional, Tuple

from ..config import AppSettings, get_settings
from ..core import find_optimal_time, parse_filter
from ..data import DayIndex, EventFileRepository, EventStore
from ..domain import MAX_DESCRIPTION_LENGTH, MAX_TITLE_LENGTH, Event
from ..domain.filters import Filter
from ..data.repositories.events import DELIMITER

logger = logging.getLogger(__name__)


def _clean_text(value: str, limit: int, label: str) -> str:
    if DELIMITER in value or "\n" in value or "\r" in value:
        raise ValueError(f"{label} must not contain '{DELIMITER}' or line breaks")
    return value[:limit]


@dataclass
class CalendarService:
    """Event store, day index and optional file persistence kept in step."""

    repository: Optional[EventFileRepository] = None
    settings: AppSettings = field(default_factory=get_settings)
    store: EventStore = field(init=False)
    index: DayIndex = field(init=False)

    def __post_init__(self) -> None:
        self.store = EventStore()
        self.index = DayIndex(resolve=self.store.find)

    @classmethod
    def from_file(cls, path: Path, *, settings: Optional[AppSettings] = None) -> "CalendarService":
        service = cls(repository=EventFileRepository(path), settings=settings or get_settings())
        service.load()
        return service

    # persistence ---------------------------------------------------------
    def load(self) -> int:
        if self.repository is None:
            return 0
        for event in self.repository.load():
            try:
                self.store.restore(event)
            except ValueError as exc:
                logger.warning("Skipping event %s: %s", event.id, exc)
        self.index.rebuild(self.store)
        return len(self.store)

    def persist(self) -> None:
        if self.repository is not None:
            self.repository.save(self.store)

    # events ----------------------------------------------------------------
    def add_event(self, title: str, description: str, start: datetime, end: datetime) -> Event:
        event = self.store.insert(
            _clean_text(title, MAX_TITLE_LENGTH, "title"),
            _clean_text(description, MAX_DESCRIPTION_LENGTH, "description"),
            start,
            end,
        )
        self.index.add_event(event)
        self.persist()
        logger.info("Added event %s (%s) %s - %s", event.id, event.title, event.start, event.end)
        return event

    def remove_event(self, event_id: int) -> Optional[Event]:
        event = self.store.find(event_id)
        if event is None:
            logger.info("Event %s not found", event_id)
            return None
        successor = self.store.successor(event)
        self.store.remove(event_id)
        self.index.remove_event(event, successor)
        self.persist()
        logger.info("Removed event %s", event_id)
        return event

    def get_event(self, event_id: int) -> Optional[Event]:
        return self.store.find(event_id)

    def first_event_on(self, year: int, month: int, day: int) -> Optional[Event]:
        """First event starting on the given day; raises ``InvalidDateError`` for impossible dates."""

        return self.index.first_event_on(year, month, day)

    def list_between(self, start: datetime, end: datetime) -> List[Event]:
        return self.store.between(start, end)

    def list_events(self) -> List[Event]:
        return list(self.store)

    # scheduling ------------------------------------------------------------
    def compile_filter(self, filter_text: str = "", *, strict: bool = False) -> Filter:
        return parse_filter(filter_text, strict=strict)

    def find_slot(
        self,
        duration: timedelta,
        filter_text: str = "",
        *,
        start: Optional[datetime] = None,
        strict: bool = False,
    ) -> Optional[datetime]:
        filter_ = self.compile_filter(filter_text, strict=strict)
        logger.debug("Searching %s slot for %r -> %r", duration, filter_text, filter_)
        return find_optimal_time(
            self.store,
            filter_,
            duration,
            start=start,
            holidays=self.settings.search.holidays,
            max_iterations=self.settings.search.max_iterations,
            fallback_step=self.settings.search.fallback_step,
        )

    def schedule(
        self,
        duration: timedelta,
        filter_text: str,
        title: str,
        description: str = "",
        *,
        start: Optional[datetime] = None,
        strict: bool = False,
    ) -> Tuple[Optional[datetime], Optional[Event]]:
        """Find a slot and book an event there; ``(None, None)`` when nothing fits."""

        slot = self.find_slot(duration, filter_text, start=start, strict=strict)
        if slot is None:
            return None, None
        return slot, self.add_event(title, description, slot, slot + duration)


__all__ = ["CalendarService"]
