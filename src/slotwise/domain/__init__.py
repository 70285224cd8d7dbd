"""Domain models for constraint-based slot finding."""

from __future__ import annotations

from .enums import FilterKind
from .models import MAX_DESCRIPTION_LENGTH, MAX_TITLE_LENGTH, Event

__all__ = ["Event", "FilterKind", "MAX_DESCRIPTION_LENGTH", "MAX_TITLE_LENGTH"]
