from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

_ZERO = timedelta(0)


@dataclass(frozen=True, slots=True)
class Validity:
    """How long until a predicate changes state.

    ``wait`` is ``timedelta(0)`` for "now", a positive delta for "after", and
    ``None`` for "never".
    """

    wait: Optional[timedelta]

    @classmethod
    def now(cls) -> "Validity":
        return cls(_ZERO)

    @classmethod
    def never(cls) -> "Validity":
        return cls(None)

    @classmethod
    def after(cls, wait: timedelta) -> "Validity":
        return cls(wait if wait > _ZERO else _ZERO)

    @property
    def is_now(self) -> bool:
        return self.wait is not None and self.wait <= _ZERO

    @property
    def is_never(self) -> bool:
        return self.wait is None

    def __str__(self) -> str:
        if self.wait is None:
            return "never"
        if self.is_now:
            return "now"
        return f"after {self.wait}"


def latest(left: Validity, right: Validity) -> Validity:
    """Both must hold: never wins, otherwise the longer wait."""

    if left.wait is None or right.wait is None:
        return Validity.never()
    return Validity(max(left.wait, right.wait))


def earliest(left: Validity, right: Validity) -> Validity:
    """Either may hold: now wins, never only when both are never."""

    if left.is_now or right.is_now:
        return Validity.now()
    if left.wait is None:
        return right
    if right.wait is None:
        return left
    return Validity(min(left.wait, right.wait))


def ceil_minutes(delta: timedelta) -> timedelta:
    """Round ``delta`` up to a whole number of minutes."""

    return timedelta(minutes=math.ceil(delta.total_seconds() / 60))


__all__ = ["Validity", "ceil_minutes", "earliest", "latest"]
