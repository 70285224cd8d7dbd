from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional

from ..core import parse_filter
from .models import SlotPayload
from .registry import register_api
from .serializers import serialize_event, serialize_filter
from .state import api_state

DEFAULT_WINDOW = timedelta(days=30)


def _parse_datetime(timestamp: str) -> datetime:
    try:
        return datetime.fromisoformat(timestamp)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {timestamp}") from exc


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO date: {value}") from exc


@register_api(
    "list_events",
    description="Return events whose start lies in the inclusive range (default: the next 30 days).",
    tags=("read",),
)
def list_events(start: Optional[str] = None, end: Optional[str] = None) -> Dict[str, Any]:
    start_dt = _parse_datetime(start) if start else datetime.now().replace(microsecond=0)
    end_dt = _parse_datetime(end) if end else start_dt + DEFAULT_WINDOW
    events = api_state.calendar.list_between(start_dt, end_dt)
    return {
        "start": start_dt.isoformat(),
        "end": end_dt.isoformat(),
        "events": [serialize_event(event) for event in events],
    }


@register_api(
    "add_event",
    description="Add an event to the calendar and persist it.",
    tags=("write",),
)
def add_event(title: str, start: str, end: str, description: str = "") -> Dict[str, Any]:
    event = api_state.calendar.add_event(title, description, _parse_datetime(start), _parse_datetime(end))
    return {"event": serialize_event(event)}


@register_api(
    "remove_event",
    description="Remove an event by id.",
    tags=("write",),
)
def remove_event(event_id: int) -> Dict[str, Any]:
    event = api_state.calendar.remove_event(event_id)
    if event is None:
        raise KeyError(f"Event {event_id} not found.")
    return {"removed": serialize_event(event)}


@register_api(
    "get_event",
    description="Return a single event by id.",
    tags=("read",),
)
def get_event(event_id: int) -> Dict[str, Any]:
    event = api_state.calendar.get_event(event_id)
    if event is None:
        raise KeyError(f"Event {event_id} not found.")
    return {"event": serialize_event(event)}


@register_api(
    "first_event_on",
    description="Return the earliest-starting event of a calendar day (YYYY-MM-DD).",
    tags=("read", "index"),
)
def first_event_on(day: str) -> Dict[str, Any]:
    target = _parse_date(day)
    event = api_state.calendar.first_event_on(target.year, target.month, target.day)
    return {"day": target.isoformat(), "event": serialize_event(event) if event else None}


@register_api(
    "find_slot",
    description="Find the earliest start satisfying a filter expression; optionally book it.",
    tags=("search",),
)
def find_slot(
    duration_minutes: int,
    expression: str = "",
    start: Optional[str] = None,
    strict: bool = False,
    title: Optional[str] = None,
    description: str = "",
) -> Dict[str, Any]:
    if duration_minutes < 0:
        raise ValueError("duration_minutes must not be negative")
    duration = timedelta(minutes=duration_minutes)
    start_dt = _parse_datetime(start) if start else None
    calendar = api_state.calendar
    if title is None:
        slot = calendar.find_slot(duration, expression, start=start_dt, strict=strict)
        event = None
    else:
        slot, event = calendar.schedule(duration, expression, title, description, start=start_dt, strict=strict)
    end_dt = slot + duration if slot else None
    return SlotPayload.from_search(slot, end_dt, expression, event).model_dump()


@register_api(
    "describe_filter",
    description="Parse a filter expression and return its tree.",
    tags=("filter",),
)
def describe_filter(expression: str, strict: bool = False) -> Dict[str, Any]:
    return {"filter": expression, "tree": serialize_filter(parse_filter(expression, strict=strict))}
