from __future__ import annotations

from enum import Enum


class FilterKind(str, Enum):
    NONE = "none"
    DAY_OF_WEEK = "day_of_week"
    AFTER_DATETIME = "after_datetime"
    BEFORE_DATETIME = "before_datetime"
    AFTER_TIME_OF_DAY = "after_time_of_day"
    BEFORE_TIME_OF_DAY = "before_time_of_day"
    MIN_DISTANCE = "min_distance"
    HOLIDAY = "holiday"
    AND = "and"
    OR = "or"
    NOT = "not"

    @property
    def is_combinator(self) -> bool:
        return self in (FilterKind.AND, FilterKind.OR, FilterKind.NOT)
