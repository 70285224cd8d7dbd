from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..domain import Event


class EventPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    description: str = Field(default="")
    start: str
    end: str
    duration_minutes: float

    @classmethod
    def from_domain(cls, event: Event) -> "EventPayload":
        return cls(
            id=event.id,
            title=event.title,
            description=event.description,
            start=_iso(event.start),
            end=_iso(event.end),
            duration_minutes=event.duration.total_seconds() / 60,
        )


class SlotPayload(BaseModel):
    found: bool
    start: Optional[str] = Field(default=None)
    end: Optional[str] = Field(default=None)
    filter: str = Field(default="")
    event: Optional[EventPayload] = Field(default=None)

    @classmethod
    def from_search(
        cls,
        slot: Optional[datetime],
        end: Optional[datetime],
        filter_text: str,
        event: Optional[Event] = None,
    ) -> "SlotPayload":
        return cls(
            found=slot is not None,
            start=_iso(slot),
            end=_iso(end),
            filter=filter_text,
            event=EventPayload.from_domain(event) if event else None,
        )


class FilterNode(BaseModel):
    kind: str
    value: Optional[Union[int, str]] = Field(default=None)
    children: List["FilterNode"] = Field(default_factory=list)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
