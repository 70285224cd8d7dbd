"""Tests for the first-event-of-day index."""
from datetime import datetime

import pytest

from slotwise.data import DayIndex, EventStore
from slotwise.domain.calendar import InvalidDateError


@pytest.fixture
def store():
    return EventStore()


@pytest.fixture
def index(store):
    return DayIndex(resolve=store.find)


def _add(store, index, title, start, end):
    event = store.insert(title, "", start, end)
    index.add_event(event)
    return event


def _remove(store, index, event):
    successor = store.successor(event)
    store.remove(event.id)
    index.remove_event(event, successor)


class TestAddEvent:
    """Index maintenance on insertion."""

    def test_earliest_event_wins(self, store, index):
        """A later insert that starts earlier takes over the day."""
        _add(store, index, "afternoon", datetime(2024, 2, 29, 14), datetime(2024, 2, 29, 15))
        morning = _add(store, index, "morning", datetime(2024, 2, 29, 8), datetime(2024, 2, 29, 9))
        assert index.first_event_on(2024, 2, 29) == morning

    def test_tie_keeps_first_inserted(self, store, index):
        """An event starting at the same time does not replace the holder."""
        first = _add(store, index, "first", datetime(2025, 1, 2, 9), datetime(2025, 1, 2, 10))
        _add(store, index, "second", datetime(2025, 1, 2, 9), datetime(2025, 1, 2, 11))
        assert index.first_event_on(2025, 1, 2) == first

    def test_years_are_ascending(self, store, index):
        """Year buckets are kept in ascending order."""
        for year in (2026, 2024, 2025):
            _add(store, index, str(year), datetime(year, 6, 1, 9), datetime(year, 6, 1, 10))
        assert index.years() == [2024, 2025, 2026]


class TestRemoveEvent:
    """Index maintenance on removal."""

    def test_successor_on_same_day_inherits(self, store, index):
        """The next event of the same day becomes the holder."""
        first = _add(store, index, "first", datetime(2025, 3, 3, 8), datetime(2025, 3, 3, 9))
        second = _add(store, index, "second", datetime(2025, 3, 3, 12), datetime(2025, 3, 3, 13))
        _remove(store, index, first)
        assert index.first_event_on(2025, 3, 3) == second

    def test_successor_on_next_day_clears(self, store, index):
        """The slot is cleared when the next event belongs to another day."""
        only = _add(store, index, "only", datetime(2025, 3, 3, 8), datetime(2025, 3, 3, 9))
        tomorrow = _add(store, index, "tomorrow", datetime(2025, 3, 4, 8), datetime(2025, 3, 4, 9))
        _remove(store, index, only)
        assert index.first_event_on(2025, 3, 3) is None
        assert index.first_event_on(2025, 3, 4) == tomorrow

    def test_removing_non_holder_changes_nothing(self, store, index):
        """Only the holder's removal touches the slot."""
        first = _add(store, index, "first", datetime(2025, 3, 3, 8), datetime(2025, 3, 3, 9))
        later = _add(store, index, "later", datetime(2025, 3, 3, 12), datetime(2025, 3, 3, 13))
        _remove(store, index, later)
        assert index.first_event_on(2025, 3, 3) == first


class TestLookup:
    """Direct day reads."""

    def test_empty_valid_day(self, index):
        """A real day without events yields None."""
        assert index.first_event_on(2025, 12, 31) is None

    def test_invalid_day_raises(self, index):
        """An impossible date is an error, not an empty day."""
        with pytest.raises(InvalidDateError):
            index.first_event_on(2025, 2, 29)

    def test_lookup_does_not_create_buckets(self, store, index):
        """Reading an unseen year leaves the bucket list alone; adding creates it."""
        assert index.first_event_on(2030, 1, 1) is None
        assert index.years() == []
        _add(store, index, "future", datetime(2030, 1, 1, 9), datetime(2030, 1, 1, 10))
        assert index.years() == [2030]

    def test_matches_minimum_start_after_rebuild(self, store, index):
        """After a rebuild every day holds its minimum-start event."""
        starts = [
            datetime(2025, 5, 1, 15),
            datetime(2025, 5, 1, 7),
            datetime(2025, 5, 2, 9),
            datetime(2025, 5, 1, 11),
        ]
        for number, start in enumerate(starts):
            store.insert(f"event {number}", "", start, start)
        index.rebuild(store)
        assert index.first_event_on(2025, 5, 1).start == datetime(2025, 5, 1, 7)
        assert index.first_event_on(2025, 5, 2).start == datetime(2025, 5, 2, 9)
