"""Application services orchestrating data access and the slot search."""

from __future__ import annotations

from .calendar import CalendarService

__all__ = ["CalendarService"]
