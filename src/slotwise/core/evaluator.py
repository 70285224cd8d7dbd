"""Transition queries over the filter tree.

Every node answers two questions about a candidate instant:

* ``until_valid`` - how long until the node holds (``now`` if it already does);
* ``until_invalid`` - how long until it stops holding (``now`` if it already
  doesn't).

``Not`` swaps the two, ``And``/``Or`` combine them with the monotone
``latest``/``earliest`` helpers so that ``never`` survives combination.
Queries are pure functions of the tree, the instant, the activity duration
and the evaluation context.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Callable, Dict, Optional, Tuple

from ..domain import Event, FilterKind
from ..domain.calendar import (
    DEFAULT_HOLIDAYS,
    MonthDay,
    at_clock,
    is_holiday,
    next_holiday,
    next_midnight,
    start_of_day,
    weekday_of,
)
from ..domain.filters import (
    AfterDateTime,
    AfterTimeOfDay,
    And,
    BeforeDateTime,
    BeforeTimeOfDay,
    DayOfWeek,
    Filter,
    MinDistance,
    NoFilter,
    Not,
    Or,
)
from .validity import Validity, ceil_minutes, earliest, latest

TICK = timedelta(seconds=1)
_MIDNIGHT = time(0, 0)
_ZERO = timedelta(0)


@dataclass(frozen=True)
class EvaluationContext:
    """What the predicates may consult besides the candidate instant."""

    events: Tuple[Event, ...] = ()
    holidays: Tuple[MonthDay, ...] = DEFAULT_HOLIDAYS

    def __post_init__(self) -> None:
        # Every query walks the events again; snapshot one-shot iterables.
        object.__setattr__(self, "events", tuple(self.events))
        object.__setattr__(self, "holidays", tuple(self.holidays))


_EMPTY_CONTEXT = EvaluationContext()
_NONE = NoFilter()

Query = Callable[[Filter, datetime, timedelta, EvaluationContext], Validity]


def _wait_until(target: datetime, candidate: datetime) -> Validity:
    return Validity.after(target - candidate)


# --- leaves -----------------------------------------------------------------


def _none_valid(node: Filter, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    return Validity.now()


def _none_invalid(node: Filter, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    return Validity.never()


def _day_of_week_valid(node: DayOfWeek, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    days_ahead = (node.day - weekday_of(candidate)) % 7
    if days_ahead == 0:
        return Validity.now()
    return _wait_until(start_of_day(candidate.date() + timedelta(days=days_ahead)), candidate)


def _day_of_week_invalid(node: DayOfWeek, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    if weekday_of(candidate) != node.day:
        return Validity.now()
    return _wait_until(next_midnight(candidate), candidate)


def _after_datetime_valid(node: AfterDateTime, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    if candidate > node.moment:
        return Validity.now()
    return Validity.after(node.moment - candidate + TICK)


def _after_datetime_invalid(node: AfterDateTime, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    if candidate <= node.moment:
        return Validity.now()
    return Validity.never()


def _before_datetime_valid(node: BeforeDateTime, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    if candidate < node.moment:
        return Validity.now()
    return Validity.never()


def _before_datetime_invalid(node: BeforeDateTime, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    if candidate >= node.moment:
        return Validity.now()
    return _wait_until(node.moment, candidate)


def _after_time_valid(node: AfterTimeOfDay, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    threshold = at_clock(candidate, node.clock)
    if candidate >= threshold:
        return Validity.now()
    return Validity.after(threshold - candidate + TICK)


def _after_time_invalid(node: AfterTimeOfDay, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    threshold = at_clock(candidate, node.clock)
    if candidate < threshold:
        return Validity.now()
    if node.clock == _MIDNIGHT:
        return Validity.never()
    return _wait_until(next_midnight(candidate), candidate)


def _before_time_valid(node: BeforeTimeOfDay, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    threshold = at_clock(candidate, node.clock)
    if candidate < threshold:
        return Validity.now()
    if node.clock == _MIDNIGHT:
        return Validity.never()
    return _wait_until(next_midnight(candidate), candidate)


def _before_time_invalid(node: BeforeTimeOfDay, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    threshold = at_clock(candidate, node.clock)
    if candidate >= threshold:
        return Validity.now()
    return _wait_until(threshold, candidate)


def _holiday_valid(node: Filter, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    today = candidate.date()
    if is_holiday(today, context.holidays):
        return Validity.now()
    upcoming = next_holiday(today, context.holidays)
    if upcoming is None:
        return Validity.never()
    return _wait_until(start_of_day(upcoming), candidate)


def _holiday_invalid(node: Filter, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    day = candidate.date()
    if not is_holiday(day, context.holidays):
        return Validity.now()
    # Back-to-back holidays (New Year's Eve, New Year's Day) stay valid.
    for _ in range(366):
        day += timedelta(days=1)
        if not is_holiday(day, context.holidays):
            return _wait_until(start_of_day(day), candidate)
    return Validity.never()


def _min_distance_valid(node: MinDistance, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    pad = timedelta(minutes=node.minutes)
    allowed_overlap = -pad if pad < _ZERO else None
    guess = candidate
    for event in context.events:
        # Events are ordered by start, so nothing later can interfere.
        if guess + duration + pad <= event.start:
            break
        if allowed_overlap is not None and min(duration, event.end - event.start) <= allowed_overlap:
            continue
        if guess < event.end + pad:
            guess = event.end + pad
    if guess <= candidate:
        return Validity.now()
    return Validity.after(ceil_minutes(guess - candidate))


def _min_distance_invalid(node: MinDistance, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    # Spacing is re-evaluated on every query, so a satisfied spacing rule never
    # predicts its own end.
    if _min_distance_valid(node, candidate, duration, context).is_now:
        return Validity.never()
    return Validity.now()


# --- combinators ----------------------------------------------------------


def _and_valid(node: And, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    return latest(
        until_valid(node.left, candidate, duration, context),
        until_valid(node.right, candidate, duration, context),
    )


def _and_invalid(node: And, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    return earliest(
        until_invalid(node.left, candidate, duration, context),
        until_invalid(node.right, candidate, duration, context),
    )


def _or_valid(node: Or, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    return earliest(
        until_valid(node.left, candidate, duration, context),
        until_valid(node.right, candidate, duration, context),
    )


def _or_invalid(node: Or, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    return latest(
        until_invalid(node.left, candidate, duration, context),
        until_invalid(node.right, candidate, duration, context),
    )


def _not_valid(node: Not, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    return until_invalid(node.operand, candidate, duration, context)


def _not_invalid(node: Not, candidate: datetime, duration: timedelta, context: EvaluationContext) -> Validity:
    return until_valid(node.operand, candidate, duration, context)


_UNTIL_VALID: Dict[FilterKind, Query] = {
    FilterKind.NONE: _none_valid,
    FilterKind.DAY_OF_WEEK: _day_of_week_valid,
    FilterKind.AFTER_DATETIME: _after_datetime_valid,
    FilterKind.BEFORE_DATETIME: _before_datetime_valid,
    FilterKind.AFTER_TIME_OF_DAY: _after_time_valid,
    FilterKind.BEFORE_TIME_OF_DAY: _before_time_valid,
    FilterKind.MIN_DISTANCE: _min_distance_valid,
    FilterKind.HOLIDAY: _holiday_valid,
    FilterKind.AND: _and_valid,
    FilterKind.OR: _or_valid,
    FilterKind.NOT: _not_valid,
}

_UNTIL_INVALID: Dict[FilterKind, Query] = {
    FilterKind.NONE: _none_invalid,
    FilterKind.DAY_OF_WEEK: _day_of_week_invalid,
    FilterKind.AFTER_DATETIME: _after_datetime_invalid,
    FilterKind.BEFORE_DATETIME: _before_datetime_invalid,
    FilterKind.AFTER_TIME_OF_DAY: _after_time_invalid,
    FilterKind.BEFORE_TIME_OF_DAY: _before_time_invalid,
    FilterKind.MIN_DISTANCE: _min_distance_invalid,
    FilterKind.HOLIDAY: _holiday_invalid,
    FilterKind.AND: _and_invalid,
    FilterKind.OR: _or_invalid,
    FilterKind.NOT: _not_invalid,
}


def _dispatch(table: Dict[FilterKind, Query], node: Optional[Filter]) -> Tuple[Filter, Query]:
    if node is None:
        node = _NONE
    try:
        return node, table[node.kind]
    except (AttributeError, KeyError) as exc:
        raise TypeError(f"Unsupported filter node: {node!r}") from exc


def until_valid(
    node: Optional[Filter],
    candidate: datetime,
    duration: timedelta = _ZERO,
    context: Optional[EvaluationContext] = None,
) -> Validity:
    """Time until ``node`` holds at ``candidate`` for an activity of ``duration``."""

    resolved, query = _dispatch(_UNTIL_VALID, node)
    return query(resolved, candidate, duration, context or _EMPTY_CONTEXT)


def until_invalid(
    node: Optional[Filter],
    candidate: datetime,
    duration: timedelta = _ZERO,
    context: Optional[EvaluationContext] = None,
) -> Validity:
    """Time until ``node`` stops holding; ``now`` when it does not hold at ``candidate``."""

    resolved, query = _dispatch(_UNTIL_INVALID, node)
    return query(resolved, candidate, duration, context or _EMPTY_CONTEXT)


def is_satisfied(
    node: Optional[Filter],
    candidate: datetime,
    duration: timedelta = _ZERO,
    context: Optional[EvaluationContext] = None,
) -> bool:
    return until_valid(node, candidate, duration, context).is_now


__all__ = ["EvaluationContext", "TICK", "is_satisfied", "until_invalid", "until_valid"]
