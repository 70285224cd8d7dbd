from __future__ import annotations

import bisect
import logging
from datetime import datetime
from typing import Iterator, List, Optional

from ..domain import Event

logger = logging.getLogger(__name__)


def _start_key(event: Event) -> datetime:
    return event.start


class EventStore:
    """Events kept sorted by start time; ties keep insertion order."""

    def __init__(self) -> None:
        self._events: List[Event] = []
        self._next_id = 1

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        return isinstance(event_id, int) and self.find(event_id) is not None

    def insert(self, title: str, description: str, start: datetime, end: datetime) -> Event:
        event = Event(id=self._next_id, title=title, description=description, start=start, end=end)
        self._next_id += 1
        self._place(event)
        logger.debug("Inserted event %s at %s", event.id, event.start)
        return event

    def restore(self, event: Event) -> Event:
        """Insert an event that already carries an id, e.g. one read from disk."""

        if self.find(event.id) is not None:
            raise ValueError(f"Event id {event.id} is already present")
        self._next_id = max(self._next_id, event.id + 1)
        self._place(event)
        return event

    def _place(self, event: Event) -> None:
        # insort_right keeps equal start times in insertion order.
        bisect.insort_right(self._events, event, key=_start_key)

    def _index_of(self, event_id: int) -> Optional[int]:
        for index, event in enumerate(self._events):
            if event.id == event_id:
                return index
        return None

    def find(self, event_id: int) -> Optional[Event]:
        index = self._index_of(event_id)
        return self._events[index] if index is not None else None

    def remove(self, event_id: int) -> Optional[Event]:
        index = self._index_of(event_id)
        if index is None:
            return None
        event = self._events.pop(index)
        logger.debug("Removed event %s", event_id)
        return event

    def successor(self, event: Event) -> Optional[Event]:
        index = self._index_of(event.id)
        if index is None or index + 1 >= len(self._events):
            return None
        return self._events[index + 1]

    def between(self, start: datetime, end: datetime) -> List[Event]:
        """Events whose start lies within ``[start, end]``."""

        low = bisect.bisect_left(self._events, start, key=_start_key)
        high = bisect.bisect_right(self._events, end, key=_start_key)
        return self._events[low:high]

    def overlapping(self, start: datetime, end: datetime) -> List[Event]:
        return [event for event in self._events if event.overlaps(start, end)]


__all__ = ["EventStore"]
