from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict

MAX_TITLE_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 1023


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value)
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return datetime.fromtimestamp(int(text))
        return datetime.fromisoformat(text)
    raise ValueError(f"Unsupported datetime value: {value!r}")


@dataclass(slots=True)
class Event:
    id: int
    title: str
    start: datetime
    end: datetime
    description: str = ""

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """True when the event intersects ``[start, end)``.

        An empty window still conflicts with an event that strictly contains it.
        """

        if end <= start:
            return self.start < start < self.end
        return self.start < end and start < self.end

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Event":
        return cls(
            id=int(record["id"]),
            title=str(record["title"]),
            description=record.get("description") or "",
            start=_parse_datetime(record["start"]),
            end=_parse_datetime(record["end"]),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "start": int(self.start.timestamp()),
            "end": int(self.end.timestamp()),
        }
