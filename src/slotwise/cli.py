from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import orjson

from .api.serializers import serialize_event
from .bootstrap import configure_logging
from .config import ensure_dir, get_settings
from .core import FilterSyntaxError
from .domain import Event
from .domain.calendar import InvalidDateError
from .services import CalendarService

logger = logging.getLogger(__name__)

TIME_FORMAT = "%Y-%m-%d-%H:%M"
DEFAULT_LIST_WINDOW = timedelta(days=30)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2


def parse_time(value: str) -> datetime:
    """argparse type for ``YYYY-MM-DD-HH:MM`` (ISO 8601 is accepted as well)."""

    try:
        return datetime.strptime(value, TIME_FORMAT)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid time {value!r}, expected YYYY-MM-DD-HH:MM") from exc


def parse_day(value: str) -> tuple[int, int, int]:
    parts = value.split("-")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"invalid day {value!r}, expected YYYY-MM-DD")
    try:
        year, month, day = (int(part) for part in parts)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid day {value!r}, expected YYYY-MM-DD") from exc
    return year, month, day


def _non_negative_minutes(value: str) -> int:
    try:
        minutes = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid duration {value!r}") from exc
    if minutes < 0:
        raise argparse.ArgumentTypeError("duration must not be negative")
    return minutes


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="slotwise", description="Find free time slots that satisfy a filter.")
    parser.add_argument("-f", "--file", type=Path, default=None, help="Events file (default from settings).")
    parser.add_argument("--json", action="store_true", help="Print results as JSON.")
    parser.add_argument("--log-level", default=None, help="Override SLOTWISE_LOG_LEVEL.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List events starting in a range.")
    list_parser.add_argument("start", nargs="?", type=parse_time)
    list_parser.add_argument("end", nargs="?", type=parse_time)

    add_parser = subparsers.add_parser("add", help="Add an event.")
    add_parser.add_argument("title")
    add_parser.add_argument("description")
    add_parser.add_argument("start", type=parse_time)
    add_parser.add_argument("end", type=parse_time)

    find_parser = subparsers.add_parser("find", help="Find the earliest slot satisfying a filter.")
    find_parser.add_argument("duration", type=_non_negative_minutes, help="Duration in minutes.")
    find_parser.add_argument("filter", nargs="?", default="", help="Filter expression, e.g. 'weekdays and after 9:00'.")
    find_parser.add_argument("--start", type=parse_time, default=None, help="Search from this time (default: now).")
    find_parser.add_argument("--strict", action="store_true", help="Reject filter text that does not parse.")
    find_parser.add_argument("--add", nargs=2, metavar=("TITLE", "DESCRIPTION"), help="Book the slot that was found.")

    remove_parser = subparsers.add_parser("remove", help="Remove an event by id.")
    remove_parser.add_argument("id", type=int)

    first_parser = subparsers.add_parser("first", help="Show the first event of a day.")
    first_parser.add_argument("day", type=parse_day, help="YYYY-MM-DD")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API.")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    return parser


def format_event(event: Event) -> str:
    return "\t".join(
        (
            str(event.id),
            event.start.strftime(TIME_FORMAT),
            event.end.strftime(TIME_FORMAT),
            event.title,
            event.description,
        )
    )


class _Output:
    def __init__(self, as_json: bool) -> None:
        self.as_json = as_json

    def emit(self, text: str, payload: Any) -> None:
        if self.as_json:
            sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode() + "\n")
        else:
            print(text)

    def events(self, events: List[Event]) -> None:
        self.emit("\n".join(format_event(event) for event in events), [serialize_event(event) for event in events])

    def event(self, event: Event) -> None:
        self.emit(format_event(event), serialize_event(event))


def _load_calendar(path: Optional[Path]) -> CalendarService:
    settings = get_settings()
    events_file = path or settings.storage.events_file
    ensure_dir(events_file.parent)
    return CalendarService.from_file(events_file, settings=settings)


def _cmd_list(args: argparse.Namespace, calendar: CalendarService, out: _Output) -> int:
    start = args.start or datetime.now().replace(second=0, microsecond=0)
    end = args.end or start + DEFAULT_LIST_WINDOW
    out.events(calendar.list_between(start, end))
    return EXIT_OK


def _cmd_add(args: argparse.Namespace, calendar: CalendarService, out: _Output) -> int:
    try:
        event = calendar.add_event(args.title, args.description, args.start, args.end)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    out.event(event)
    return EXIT_OK


def _cmd_find(args: argparse.Namespace, calendar: CalendarService, out: _Output) -> int:
    duration = timedelta(minutes=args.duration)
    try:
        if args.add:
            title, description = args.add
            slot, event = calendar.schedule(
                duration, args.filter, title, description, start=args.start, strict=args.strict
            )
        else:
            slot = calendar.find_slot(duration, args.filter, start=args.start, strict=args.strict)
            event = None
    except (FilterSyntaxError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE

    if slot is None:
        print("No slot found.", file=sys.stderr)
        return EXIT_NOT_FOUND
    payload: Dict[str, Any] = {"start": slot.isoformat(), "end": (slot + duration).isoformat()}
    if event is not None:
        payload["event"] = serialize_event(event)
    text = slot.strftime(TIME_FORMAT)
    if event is not None:
        text = f"{text}\tbooked as event {event.id}"
    out.emit(text, payload)
    return EXIT_OK


def _cmd_remove(args: argparse.Namespace, calendar: CalendarService, out: _Output) -> int:
    event = calendar.remove_event(args.id)
    if event is None:
        print(f"Event {args.id} not found.", file=sys.stderr)
        return EXIT_NOT_FOUND
    out.event(event)
    return EXIT_OK


def _cmd_first(args: argparse.Namespace, calendar: CalendarService, out: _Output) -> int:
    year, month, day = args.day
    try:
        event = calendar.first_event_on(year, month, day)
    except InvalidDateError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_NOT_FOUND
    if event is None:
        print(f"No events on {year:04d}-{month:02d}-{day:02d}.", file=sys.stderr)
        return EXIT_NOT_FOUND
    out.event(event)
    return EXIT_OK


_COMMANDS: Dict[str, Callable[[argparse.Namespace, CalendarService, _Output], int]] = {
    "list": _cmd_list,
    "add": _cmd_add,
    "find": _cmd_find,
    "remove": _cmd_remove,
    "first": _cmd_first,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    logger.debug("slotwise %s", args.command)

    if args.command == "serve":
        from .services.http import run_local_server

        run_local_server(host=args.host, port=args.port)
        return EXIT_OK

    calendar = _load_calendar(args.file)
    return _COMMANDS[args.command](args, calendar, _Output(args.json))


if __name__ == "__main__":
    sys.exit(main())
