from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Tuple

MonthDay = Tuple[int, int]
YearDay = Tuple[int, int]

DEFAULT_HOLIDAYS: Tuple[MonthDay, ...] = (
    (1, 1),  # New Year's Day
    (7, 4),  # Independence Day
    (12, 25),  # Christmas Day
    (12, 31),  # New Year's Eve
)

# Enough to cover a Feb 29 holiday across a skipped century leap year.
_HOLIDAY_SEARCH_YEARS = 9


class InvalidDateError(ValueError):
    """Raised when a year/month/day triple does not name a real calendar day."""


def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def days_in_month(month: int, year: int) -> int:
    """Number of days in ``month`` (1-12) of ``year``; 0 for an invalid month."""

    if month in (1, 3, 5, 7, 8, 10, 12):
        return 31
    if month in (4, 6, 9, 11):
        return 30
    if month == 2:
        return 29 if is_leap_year(year) else 28
    return 0


def day_of_year(year: int, month: int, day: int) -> int:
    """Return the 1-based ordinal of the day within its year.

    Raises :class:`InvalidDateError` when the month is outside 1-12 or the day
    does not exist in that month.
    """

    if month < 1 or month > 12:
        raise InvalidDateError(f"Invalid month {month} for {year}")
    if day < 1 or day > days_in_month(month, year):
        raise InvalidDateError(f"Invalid day {day} for {year}-{month:02d}")
    return sum(days_in_month(m, year) for m in range(1, month)) + day


def date_of(instant: datetime) -> Tuple[int, int, int]:
    return instant.year, instant.month, instant.day


def year_day_of(instant: datetime) -> YearDay:
    return instant.year, day_of_year(instant.year, instant.month, instant.day)


def weekday_of(instant: datetime) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""

    return (instant.weekday() + 1) % 7


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time())


def next_midnight(instant: datetime) -> datetime:
    return start_of_day(instant.date() + timedelta(days=1))


def at_clock(instant: datetime, clock: time) -> datetime:
    """The instant on ``instant``'s calendar day at the wall-clock time ``clock``."""

    return datetime.combine(instant.date(), clock.replace(microsecond=0, tzinfo=None))


def is_holiday(day: date, holidays: Iterable[MonthDay] = DEFAULT_HOLIDAYS) -> bool:
    return (day.month, day.day) in set(holidays)


def next_holiday(day: date, holidays: Iterable[MonthDay] = DEFAULT_HOLIDAYS) -> Optional[date]:
    """Return the first holiday strictly after ``day``.

    The remainder of ``day``'s year is searched first, then the following
    years. Month/day pairs that do not exist in a given year are skipped.
    """

    table = sorted(set(holidays))
    if not table:
        return None
    for year in range(day.year, day.year + _HOLIDAY_SEARCH_YEARS):
        for month, mday in table:
            if mday < 1 or mday > days_in_month(month, year):
                continue
            candidate = date(year, month, mday)
            if candidate > day:
                return candidate
    return None


def parse_holidays(raw: str) -> Tuple[MonthDay, ...]:
    """Parse ``"1-1,7-4,12-25"`` into month/day pairs."""

    pairs: list[MonthDay] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        month_text, _, day_text = chunk.partition("-")
        month, mday = int(month_text), int(day_text)
        if mday < 1 or mday > days_in_month(month, 2000):
            raise InvalidDateError(f"Invalid holiday {chunk!r}")
        pairs.append((month, mday))
    return tuple(pairs)


__all__ = [
    "DEFAULT_HOLIDAYS",
    "InvalidDateError",
    "MonthDay",
    "YearDay",
    "at_clock",
    "date_of",
    "day_of_year",
    "days_in_month",
    "is_holiday",
    "is_leap_year",
    "next_holiday",
    "next_midnight",
    "parse_holidays",
    "start_of_day",
    "weekday_of",
    "year_day_of",
]
