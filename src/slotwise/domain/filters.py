"""Immutable predicate tree describing when an activity may be scheduled.

Leaves test a single property of a candidate instant; ``And``/``Or``/``Not``
compose them. The tree carries no behaviour: evaluation lives in
:mod:`slotwise.core.evaluator`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from functools import reduce
from typing import Any, ClassVar, Optional

from .enums import FilterKind


@dataclass(frozen=True, slots=True)
class Filter:
    kind: ClassVar[FilterKind]


@dataclass(frozen=True, slots=True)
class NoFilter(Filter):
    """Always satisfied."""

    kind: ClassVar[FilterKind] = FilterKind.NONE


@dataclass(frozen=True, slots=True)
class DayOfWeek(Filter):
    kind: ClassVar[FilterKind] = FilterKind.DAY_OF_WEEK

    day: int  # 0 = Sunday .. 6 = Saturday


@dataclass(frozen=True, slots=True)
class AfterDateTime(Filter):
    kind: ClassVar[FilterKind] = FilterKind.AFTER_DATETIME

    moment: datetime


@dataclass(frozen=True, slots=True)
class BeforeDateTime(Filter):
    kind: ClassVar[FilterKind] = FilterKind.BEFORE_DATETIME

    moment: datetime


@dataclass(frozen=True, slots=True)
class AfterTimeOfDay(Filter):
    kind: ClassVar[FilterKind] = FilterKind.AFTER_TIME_OF_DAY

    clock: time


@dataclass(frozen=True, slots=True)
class BeforeTimeOfDay(Filter):
    kind: ClassVar[FilterKind] = FilterKind.BEFORE_TIME_OF_DAY

    clock: time


@dataclass(frozen=True, slots=True)
class MinDistance(Filter):
    """Keep ``minutes`` of clearance around existing events.

    A negative value lets the activity overlap events by up to that many minutes.
    """

    kind: ClassVar[FilterKind] = FilterKind.MIN_DISTANCE

    minutes: int


@dataclass(frozen=True, slots=True)
class Holiday(Filter):
    kind: ClassVar[FilterKind] = FilterKind.HOLIDAY


@dataclass(frozen=True, slots=True)
class And(Filter):
    kind: ClassVar[FilterKind] = FilterKind.AND

    left: Filter
    right: Filter


@dataclass(frozen=True, slots=True)
class Or(Filter):
    kind: ClassVar[FilterKind] = FilterKind.OR

    left: Filter
    right: Filter


@dataclass(frozen=True, slots=True)
class Not(Filter):
    kind: ClassVar[FilterKind] = FilterKind.NOT

    operand: Filter


_LEAF_TYPES = {
    FilterKind.NONE: NoFilter,
    FilterKind.DAY_OF_WEEK: DayOfWeek,
    FilterKind.AFTER_DATETIME: AfterDateTime,
    FilterKind.BEFORE_DATETIME: BeforeDateTime,
    FilterKind.AFTER_TIME_OF_DAY: AfterTimeOfDay,
    FilterKind.BEFORE_TIME_OF_DAY: BeforeTimeOfDay,
    FilterKind.MIN_DISTANCE: MinDistance,
    FilterKind.HOLIDAY: Holiday,
}


def make_filter(kind: FilterKind | str, value: Optional[Any] = None) -> Filter:
    """Build a leaf filter of ``kind`` carrying ``value`` as its payload."""

    resolved = FilterKind(kind)
    if resolved.is_combinator:
        raise ValueError(f"{resolved.value} is a combinator; use and_filter/or_filter/not_filter")
    leaf_type = _LEAF_TYPES[resolved]
    if resolved in (FilterKind.NONE, FilterKind.HOLIDAY):
        return leaf_type()
    if value is None:
        raise ValueError(f"{resolved.value} filter requires a value")
    return leaf_type(value)


def and_filter(left: Filter, right: Filter) -> And:
    return And(left, right)


def or_filter(left: Filter, right: Filter) -> Or:
    return Or(left, right)


def not_filter(operand: Filter) -> Not:
    return Not(operand)


def any_of(*filters: Filter) -> Filter:
    """Left-fold ``filters`` with ``Or``: ``any_of(a, b, c) == Or(Or(a, b), c)``."""

    if not filters:
        return NoFilter()
    return reduce(Or, filters)


WEEKDAYS = any_of(*(DayOfWeek(day) for day in range(1, 6)))
WEEKEND = Or(DayOfWeek(6), DayOfWeek(0))
BUSINESS_DAYS = And(WEEKDAYS, Not(Holiday()))
BUSINESS_HOURS = And(AfterTimeOfDay(time(9, 0)), BeforeTimeOfDay(time(17, 0)))


__all__ = [
    "And",
    "AfterDateTime",
    "AfterTimeOfDay",
    "BUSINESS_DAYS",
    "BUSINESS_HOURS",
    "BeforeDateTime",
    "BeforeTimeOfDay",
    "DayOfWeek",
    "Filter",
    "Holiday",
    "MinDistance",
    "NoFilter",
    "Not",
    "Or",
    "WEEKDAYS",
    "WEEKEND",
    "and_filter",
    "any_of",
    "make_filter",
    "not_filter",
    "or_filter",
]
