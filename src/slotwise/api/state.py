from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..config import ensure_dir, get_settings
from ..services import CalendarService


@dataclass(slots=True)
class ApiState:
    _calendar: Optional[CalendarService] = field(default=None, repr=False)

    @property
    def calendar(self) -> CalendarService:
        if self._calendar is None:
            settings = get_settings()
            ensure_dir(settings.storage.events_file.parent)
            self._calendar = CalendarService.from_file(settings.storage.events_file, settings=settings)
        return self._calendar

    def use(self, calendar: Optional[CalendarService]) -> None:
        """Swap the backing calendar; ``None`` reloads from the configured file on next access."""

        self._calendar = calendar


api_state = ApiState()
