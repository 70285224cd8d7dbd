"""Recursive-descent parser for the filter DSL.

Grammar (``or`` binds loosest, ``not`` tightest)::

    expr     := or_expr
    or_expr  := and_expr ('or' and_expr)*
    and_expr := unary ('and' unary)*
    unary    := 'not' unary | primary
    primary  := '(' expr ')'
              | 'weekdays' | 'weekend' | 'holidays'
              | 'business_days' | 'business_hours'
              | 'on' day (',' day)*
              | 'before' datetime | 'after' datetime
              | 'spaced' signed_int unit

By default the parser is lenient: anything it does not recognise becomes
``NoFilter`` (always satisfied). ``strict=True`` raises
:class:`FilterSyntaxError` instead.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time
from typing import Callable, Dict, Optional

from ..domain.filters import (
    BUSINESS_DAYS,
    BUSINESS_HOURS,
    WEEKDAYS,
    WEEKEND,
    AfterDateTime,
    AfterTimeOfDay,
    And,
    BeforeDateTime,
    BeforeTimeOfDay,
    DayOfWeek,
    Filter,
    Holiday,
    MinDistance,
    NoFilter,
    Not,
    Or,
)

logger = logging.getLogger(__name__)

DAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")

_BOUNDARY = r"(?=[\s(),]|$)"
_WHITESPACE = re.compile(r"\s*")
_INT = re.compile(r"\d+")
_SIGNED_INT = re.compile(r"[-+]?\d+")
_DATE = re.compile(r"(?P<year>\d{1,4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})")
_CLOCK = re.compile(r"(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?")
_DATE_TIME_SEPARATOR = re.compile(r"[ \t]+|[Tt-]")
_UNIT = re.compile(
    r"(?P<unit>minutes|minute|mins|min|m|hours|hour|hrs|hr|h|days|day|d)" + _BOUNDARY,
    re.IGNORECASE,
)
_UNIT_MINUTES = {"m": 1, "h": 60, "d": 1440}


class FilterSyntaxError(ValueError):
    """Raised by the strict parser when part of the input is not understood."""

    def __init__(self, message: str, *, text: str, position: int) -> None:
        super().__init__(f"{message} at position {position}: {text[position:]!r}")
        self.text = text
        self.position = position

    @property
    def remainder(self) -> str:
        return self.text[self.position:]


class _Parser:
    def __init__(self, text: str, *, strict: bool) -> None:
        self.text = text
        self.pos = 0
        self.strict = strict
        self._keywords: Dict[str, Callable[[], Optional[Filter]]] = {
            "weekdays": lambda: WEEKDAYS,
            "weekend": lambda: WEEKEND,
            "holidays": lambda: Holiday(),
            "business_days": lambda: BUSINESS_DAYS,
            "business_hours": lambda: BUSINESS_HOURS,
            "on": self._parse_on,
            "before": lambda: self._parse_moment(BeforeDateTime, BeforeTimeOfDay),
            "after": lambda: self._parse_moment(AfterDateTime, AfterTimeOfDay),
            "spaced": self._parse_spaced,
        }

    # scanning -----------------------------------------------------------
    def skip_ws(self) -> None:
        self.pos = _WHITESPACE.match(self.text, self.pos).end()

    def at_end(self) -> bool:
        self.skip_ws()
        return self.pos >= len(self.text)

    def match_char(self, char: str) -> bool:
        self.skip_ws()
        if self.text.startswith(char, self.pos):
            self.pos += 1
            return True
        return False

    def match_word(self, word: str) -> bool:
        """Case-insensitive keyword followed by whitespace, a bracket, a comma or the end."""

        self.skip_ws()
        end = self.pos + len(word)
        if self.text[self.pos:end].lower() != word:
            return False
        if end < len(self.text) and not (self.text[end].isspace() or self.text[end] in "(),"):
            return False
        self.pos = end
        return True

    def match_pattern(self, pattern: re.Pattern[str]) -> Optional[re.Match[str]]:
        found = pattern.match(self.text, self.pos)
        if found:
            self.pos = found.end()
        return found

    def fail(self, message: str, position: Optional[int] = None) -> None:
        if self.strict:
            raise FilterSyntaxError(message, text=self.text, position=self.pos if position is None else position)

    # grammar ------------------------------------------------------------
    def parse(self) -> Filter:
        result = self.parse_or()
        if not self.at_end():
            self.fail("Unexpected input")
            logger.debug("Ignoring unparsed filter text %r", self.text[self.pos:])
        return result

    def parse_or(self) -> Filter:
        left = self.parse_and()
        while self.match_word("or"):
            left = Or(left, self.parse_and())
        return left

    def parse_and(self) -> Filter:
        left = self.parse_unary()
        while self.match_word("and"):
            left = And(left, self.parse_unary())
        return left

    def parse_unary(self) -> Filter:
        if self.match_word("not"):
            return Not(self.parse_unary())
        return self.parse_primary()

    def parse_primary(self) -> Filter:
        if self.match_char("("):
            inside = self.parse_or()
            if not self.match_char(")"):
                self.fail("Expected ')'")
            return inside

        start = self.pos
        for word, production in self._keywords.items():
            if not self.match_word(word):
                continue
            result = production()
            if result is not None:
                return result
            self.pos = start
            self.skip_ws()
            self.fail(f"Incomplete '{word}' clause")
            return NoFilter()
        self.skip_ws()
        self.fail("Unrecognised filter")
        return NoFilter()

    # productions ----------------------------------------------------------
    def _day_name(self) -> Optional[int]:
        for index, name in enumerate(DAY_NAMES):
            if self.match_word(name):
                return index
        return None

    def _parse_on(self) -> Optional[Filter]:
        first = self._day_name()
        if first is None:
            return None
        result: Filter = DayOfWeek(first)
        while True:
            save = self.pos
            if not self.match_char(","):
                break
            day = self._day_name()
            if day is None:
                self.pos = save
                break
            result = Or(result, DayOfWeek(day))
        return result

    def _parse_clock(self) -> Optional[time]:
        found = self.match_pattern(_CLOCK)
        if not found:
            return None
        try:
            return time(int(found["hour"]), int(found["minute"]), int(found["second"] or 0))
        except ValueError:
            return None

    def _parse_moment(self, on_date: Callable[[datetime], Filter], on_clock: Callable[[time], Filter]) -> Optional[Filter]:
        self.skip_ws()
        save = self.pos
        found = self.match_pattern(_DATE)
        if found:
            try:
                day = date(int(found["year"]), int(found["month"]), int(found["day"]))
            except ValueError:
                return None
            clock = time()
            after_date = self.pos
            if self.match_pattern(_DATE_TIME_SEPARATOR):
                parsed = self._parse_clock()
                if parsed is None:
                    self.pos = after_date
                else:
                    clock = parsed
            return on_date(datetime.combine(day, clock))
        self.pos = save
        clock = self._parse_clock()
        if clock is None:
            return None
        return on_clock(clock)

    def _parse_spaced(self) -> Optional[Filter]:
        self.skip_ws()
        amount = self.match_pattern(_SIGNED_INT)
        if not amount:
            return None
        self.skip_ws()
        unit = self.match_pattern(_UNIT)
        if not unit:
            return None
        multiplier = _UNIT_MINUTES[unit["unit"][0].lower()]
        return MinDistance(int(amount.group()) * multiplier)


def parse_filter(text: Optional[str], *, strict: bool = False) -> Filter:
    """Compile filter DSL ``text`` into a filter tree.

    Empty or unrecognised input yields ``NoFilter`` unless ``strict`` is set,
    in which case :class:`FilterSyntaxError` reports the unparsed remainder.
    """

    if not text or not text.strip():
        return NoFilter()
    return _Parser(text, strict=strict).parse()


__all__ = ["DAY_NAMES", "FilterSyntaxError", "parse_filter"]
