from __future__ import annotations

from .day_index import DayIndex, YearBucket

__all__ = ["DayIndex", "YearBucket"]
