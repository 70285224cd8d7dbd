"""Tests for the optimal slot search."""
from datetime import datetime, time, timedelta

import pytest

from slotwise.core import find_optimal_time, parse_filter
from slotwise.domain import Event
from slotwise.domain.filters import AfterTimeOfDay, And, BeforeDateTime, MinDistance, NoFilter


@pytest.fixture
def events():
    """One 10:00-11:00 event on Thursday 2025-11-13."""
    return [Event(id=1, title="meeting", start=datetime(2025, 11, 13, 10), end=datetime(2025, 11, 13, 11))]


SPACED_MORNING = And(AfterTimeOfDay(time(9)), MinDistance(30))


class TestFindOptimalTime:
    """Search outcomes."""

    @pytest.mark.parametrize("minutes", [0, 15])
    def test_just_after_nine(self, events, minutes):
        """From midnight the first slot is just after nine, clear of the meeting."""
        slot = find_optimal_time(events, SPACED_MORNING, timedelta(minutes=minutes), start=datetime(2025, 11, 13))
        assert slot == datetime(2025, 11, 13, 9, 0, 1)

    @pytest.mark.parametrize("minutes", [0, 15])
    def test_after_meeting_padding(self, events, minutes):
        """From eleven the slot waits out the thirty minute padding."""
        slot = find_optimal_time(
            events, SPACED_MORNING, timedelta(minutes=minutes), start=datetime(2025, 11, 13, 11)
        )
        assert slot == datetime(2025, 11, 13, 11, 30)

    def test_unsatisfiable_filter(self, events):
        """A deadline in the past yields no slot instead of looping."""
        slot = find_optimal_time(
            events, BeforeDateTime(datetime(2025, 1, 1)), timedelta(minutes=30), start=datetime(2025, 11, 13)
        )
        assert slot is None

    def test_conflicts_are_checked_without_spacing(self, events):
        """Overlap with existing events is avoided even without a spacing rule."""
        slot = find_optimal_time(events, NoFilter(), timedelta(minutes=30), start=datetime(2025, 11, 13, 9, 45))
        assert slot == datetime(2025, 11, 13, 11)

    def test_back_to_back_conflicts(self, events):
        """Consecutive events are skipped one after another."""
        events.append(Event(id=2, title="lunch", start=datetime(2025, 11, 13, 11), end=datetime(2025, 11, 13, 12)))
        slot = find_optimal_time(events, None, timedelta(minutes=30), start=datetime(2025, 11, 13, 10, 30))
        assert slot == datetime(2025, 11, 13, 12)

    def test_zero_length_slot_inside_event(self, events):
        """A point in time strictly inside an event conflicts with it."""
        slot = find_optimal_time(events, None, timedelta(0), start=datetime(2025, 11, 13, 10, 30))
        assert slot == datetime(2025, 11, 13, 11)

    def test_unsorted_events_are_accepted(self):
        """Callers may pass events in any order."""
        events = [
            Event(id=2, title="b", start=datetime(2025, 11, 13, 11), end=datetime(2025, 11, 13, 12)),
            Event(id=1, title="a", start=datetime(2025, 11, 13, 9), end=datetime(2025, 11, 13, 11)),
        ]
        slot = find_optimal_time(events, None, timedelta(hours=1), start=datetime(2025, 11, 13, 9))
        assert slot == datetime(2025, 11, 13, 12)

    def test_business_hours_skip_holiday(self):
        """Christmas is skipped and the search lands on the next business morning."""
        slot = find_optimal_time(
            [],
            parse_filter("business_days and business_hours"),
            timedelta(hours=1),
            start=datetime(2025, 12, 24, 18),
        )
        assert slot == datetime(2025, 12, 26, 9, 0, 1)

    def test_weekend(self):
        """From a Thursday the weekend starts at Saturday midnight."""
        slot = find_optimal_time([], parse_filter("weekend"), timedelta(hours=2), start=datetime(2025, 11, 13, 10))
        assert slot == datetime(2025, 11, 15)

    def test_iteration_budget(self, events):
        """Running out of iterations is reported as no slot."""
        slot = find_optimal_time(
            events, SPACED_MORNING, timedelta(0), start=datetime(2025, 11, 13), max_iterations=1
        )
        assert slot is None

    def test_time_horizon(self):
        """A filter that keeps jumping without ever holding stops after about a year."""
        slot = find_optimal_time(
            [],
            parse_filter("before 9:00 and after 17:00"),
            timedelta(minutes=30),
            start=datetime(2025, 11, 13),
            max_iterations=10**9,
        )
        assert slot is None

    def test_slot_beyond_horizon(self):
        """A slot further out than the horizon is not reported."""
        deadline = parse_filter("after 2025-12-01")
        start = datetime(2025, 11, 13)
        assert find_optimal_time([], deadline, timedelta(0), start=start, horizon=timedelta(days=7)) is None
        assert find_optimal_time([], deadline, timedelta(0), start=start) == datetime(2025, 12, 1, 0, 0, 1)

    def test_negative_duration_is_rejected(self, events):
        """Durations must not be negative."""
        with pytest.raises(ValueError):
            find_optimal_time(events, None, timedelta(minutes=-5), start=datetime(2025, 11, 13))

    def test_defaults_to_now(self):
        """Without a start the search begins at the current time."""
        before = datetime.now().replace(microsecond=0)
        slot = find_optimal_time([], None, timedelta(minutes=5))
        assert slot is not None and before <= slot <= datetime.now()
