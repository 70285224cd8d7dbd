from __future__ import annotations

from typing import Any, Dict, Optional

from ..domain import Event
from ..domain.filters import (
    AfterDateTime,
    AfterTimeOfDay,
    And,
    BeforeDateTime,
    BeforeTimeOfDay,
    DayOfWeek,
    Filter,
    MinDistance,
    Not,
    Or,
)
from .models import EventPayload, FilterNode


def serialize_event(event: Event) -> Dict[str, Any]:
    return EventPayload.from_domain(event).model_dump()


def _filter_value(node: Filter) -> Optional[int | str]:
    if isinstance(node, DayOfWeek):
        return node.day
    if isinstance(node, MinDistance):
        return node.minutes
    if isinstance(node, (AfterDateTime, BeforeDateTime)):
        return node.moment.isoformat()
    if isinstance(node, (AfterTimeOfDay, BeforeTimeOfDay)):
        return node.clock.isoformat()
    return None


def _filter_node(node: Filter) -> FilterNode:
    if isinstance(node, (And, Or)):
        children = [_filter_node(node.left), _filter_node(node.right)]
    elif isinstance(node, Not):
        children = [_filter_node(node.operand)]
    else:
        children = []
    return FilterNode(kind=node.kind.value, value=_filter_value(node), children=children)


def serialize_filter(node: Filter) -> Dict[str, Any]:
    return _filter_node(node).model_dump()

