from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from ...domain import Event

logger = logging.getLogger(__name__)

DELIMITER = "|"
FIELD_COUNT = 5


def format_record(event: Event) -> str:
    record = event.to_record()
    return DELIMITER.join(
        [
            str(record["id"]),
            record["title"],
            record["description"],
            str(record["start"]),
            str(record["end"]),
        ]
    )


def parse_record(line: str) -> Optional[Event]:
    """Parse one ``id|title|description|start|end`` line; None for blank lines."""

    text = line.rstrip("\r\n")
    if not text.strip():
        return None
    parts = text.split(DELIMITER)
    if len(parts) != FIELD_COUNT:
        raise ValueError(f"expected {FIELD_COUNT} fields, got {len(parts)}")
    event_id, title, description, start, end = parts
    return Event.from_record(
        {
            "id": int(event_id),
            "title": title,
            "description": description,
            "start": int(start),
            "end": int(end),
        }
    )


@dataclass(slots=True)
class EventFileRepository:
    """Line-oriented, pipe-delimited event file."""

    path: Path

    def load(self) -> List[Event]:
        if not self.path.exists():
            logger.debug("Event file %s does not exist yet", self.path)
            return []
        events: list[Event] = []
        with self.path.open("r", encoding="utf-8") as handle:
            for line_number, line in enumerate(handle, start=1):
                try:
                    event = parse_record(line)
                except ValueError as exc:
                    logger.warning("Skipping malformed line %s in %s: %s", line_number, self.path, exc)
                    continue
                if event is not None:
                    events.append(event)
        logger.info("Loaded %s events from %s", len(events), self.path)
        return events

    def save(self, events: Iterable[Event]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        lines = [format_record(event) + "\n" for event in events]
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.writelines(lines)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Saved %s events to %s", len(lines), self.path)


__all__ = ["DELIMITER", "EventFileRepository", "format_record", "parse_record"]
