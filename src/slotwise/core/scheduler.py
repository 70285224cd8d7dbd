from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from ..domain import Event
from ..domain.calendar import DEFAULT_HOLIDAYS, MonthDay
from ..domain.filters import Filter, NoFilter
from .evaluator import EvaluationContext, until_valid

logger = logging.getLogger(__name__)

FALLBACK_STEP = timedelta(minutes=15)
# About one year of simulated time when every step is the fallback step.
MAX_ITERATIONS = 365 * 24 * 60 // 15
SEARCH_HORIZON = timedelta(days=366)


def _first_conflict(events: Sequence[Event], start: datetime, end: datetime) -> Optional[Event]:
    for event in events:
        if event.start >= end:
            break
        if event.overlaps(start, end):
            return event
    return None


def find_optimal_time(
    events: Iterable[Event],
    filter_: Optional[Filter],
    duration: timedelta,
    *,
    start: Optional[datetime] = None,
    holidays: Iterable[MonthDay] = DEFAULT_HOLIDAYS,
    max_iterations: int = MAX_ITERATIONS,
    fallback_step: timedelta = FALLBACK_STEP,
    horizon: timedelta = SEARCH_HORIZON,
) -> Optional[datetime]:
    """Earliest instant from ``start`` that satisfies ``filter_`` and fits ``duration``.

    The filter engine proposes how far to jump; every satisfying candidate is
    then checked for overlap with the existing events, which happens whether
    or not the filter asks for spacing. Returns None when the filter can never
    be satisfied, the iteration budget runs out or the candidate moves more
    than ``horizon`` past ``start``.
    """

    if duration < timedelta(0):
        raise ValueError("duration must not be negative")
    root = filter_ or NoFilter()
    ordered = sorted(events, key=lambda event: event.start)
    context = EvaluationContext(events=ordered, holidays=tuple(holidays))
    candidate = start or datetime.now().replace(microsecond=0)
    deadline = candidate + horizon

    for iteration in range(1, max_iterations + 1):
        if candidate > deadline:
            logger.warning("No slot found before %s", deadline)
            return None
        validity = until_valid(root, candidate, duration, context)
        logger.debug("Candidate %s: filter valid %s", candidate, validity)
        if validity.is_never:
            logger.info("Filter can never be satisfied from %s", candidate)
            return None
        if not validity.is_now:
            candidate += validity.wait
            continue

        conflict = _first_conflict(ordered, candidate, candidate + duration)
        if conflict is None:
            logger.info("Found slot at %s after %s iterations", candidate, iteration)
            return candidate
        logger.debug("Candidate %s collides with event %s", candidate, conflict.id)
        candidate = conflict.end if conflict.end > candidate else candidate + fallback_step

    logger.warning("No slot found within %s iterations", max_iterations)
    return None


__all__ = ["FALLBACK_STEP", "MAX_ITERATIONS", "SEARCH_HORIZON", "find_optimal_time"]
