from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from ...domain import Event
from ...domain.calendar import day_of_year, year_day_of

logger = logging.getLogger(__name__)

DAYS_PER_BUCKET = 366


@dataclass
class YearBucket:
    year: int
    days: List[Optional[int]] = field(default_factory=lambda: [None] * DAYS_PER_BUCKET)


@dataclass
class DayIndex:
    """First event of every calendar day, keyed by (year, day-of-year).

    Slots hold event ids; ``resolve`` turns an id back into the stored event.
    The index leans on the store's start-time ordering rather than rescanning
    a day when its first event goes away.
    """

    resolve: Callable[[int], Optional[Event]]
    buckets: Dict[int, YearBucket] = field(default_factory=dict)
    _years: List[int] = field(default_factory=list, init=False, repr=False)

    def years(self) -> List[int]:
        return list(self._years)

    def _bucket(self, year: int) -> Optional[YearBucket]:
        return self.buckets.get(year)

    def _ensure_bucket(self, year: int) -> YearBucket:
        bucket = self.buckets.get(year)
        if bucket is None:
            bucket = YearBucket(year)
            self.buckets[year] = bucket
            bisect.insort(self._years, year)
        return bucket

    def add_event(self, event: Event) -> None:
        year, ordinal = year_day_of(event.start)
        bucket = self._ensure_bucket(year)
        current_id = bucket.days[ordinal - 1]
        current = self.resolve(current_id) if current_id is not None else None
        if current is None or event.start < current.start:
            bucket.days[ordinal - 1] = event.id

    def remove_event(self, event: Event, successor: Optional[Event]) -> None:
        """Patch the index after ``event`` left the store.

        ``successor`` is the event that followed ``event`` in store order. It
        inherits the slot when it starts on the same day; otherwise the day is
        cleared.
        """

        year, ordinal = year_day_of(event.start)
        bucket = self._bucket(year)
        if bucket is None or bucket.days[ordinal - 1] != event.id:
            return
        if successor is not None and year_day_of(successor.start) == (year, ordinal):
            bucket.days[ordinal - 1] = successor.id
            logger.debug("Day %s/%s now starts with event %s", year, ordinal, successor.id)
        else:
            bucket.days[ordinal - 1] = None

    def first_event_id(self, year: int, month: int, day: int) -> Optional[int]:
        ordinal = day_of_year(year, month, day)
        bucket = self._bucket(year)
        if bucket is None:
            return None
        return bucket.days[ordinal - 1]

    def first_event_on(self, year: int, month: int, day: int) -> Optional[Event]:
        event_id = self.first_event_id(year, month, day)
        return self.resolve(event_id) if event_id is not None else None

    def rebuild(self, events: Iterable[Event]) -> None:
        self.clear()
        for event in events:
            self.add_event(event)

    def clear(self) -> None:
        self.buckets.clear()
        self._years.clear()


__all__ = ["DayIndex", "YearBucket"]
