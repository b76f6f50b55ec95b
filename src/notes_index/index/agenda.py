"""Time-bucketed agenda view over indexed todos."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from pathlib import PurePosixPath

from notes_index.extract import ExtractError, parse_stamp
from notes_index.index.store import Store

DEFAULT_TIMESPAN = "today;+7D"
DEFAULT_INTERVAL = "1D"
DEFAULT_PATH_LENGTH = "2"

DURATION_UNITS: dict[str, timedelta] = {
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "D": timedelta(days=1),
    "W": timedelta(weeks=1),
    "M": timedelta(days=31),
    "Y": timedelta(days=366),
}


class AgendaError(ValueError):
    """Raised for an unparsable timespan, interval or path length."""


@dataclass(slots=True, frozen=True)
class AgendaItem:
    path: str
    line_number: int
    title: str
    stamp: str
    scheduled: bool


@dataclass(slots=True, frozen=True)
class AgendaEntry:
    start: datetime
    todos: tuple[AgendaItem, ...] = ()


@dataclass(slots=True, frozen=True)
class Agenda:
    overdue: tuple[AgendaItem, ...]
    entries: tuple[AgendaEntry, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "overdue": [_item_dict(item) for item in self.overdue],
            "entries": [
                {
                    "stamp": entry.start.isoformat(timespec="minutes"),
                    "todos": [_item_dict(item) for item in entry.todos],
                }
                for entry in self.entries
            ],
        }


def parse_duration(text: str) -> timedelta:
    """Parse ``[+-]<int><unit>`` where unit is one of ``s m h D W M Y``."""
    raw = text.strip()
    unit = DURATION_UNITS.get(raw[-1:])
    if unit is None:
        raise AgendaError(f"invalid duration {text!r}")
    try:
        amount = int(raw[:-1])
    except ValueError as exc:
        raise AgendaError(f"invalid duration {text!r}") from exc
    return unit * amount


def parse_point(text: str, today: date | None = None) -> datetime:
    """Parse a stamp, or a duration added to the start of today."""
    base = today or date.today()
    try:
        return datetime.fromisoformat(parse_stamp(text, line_number=0, today=base))
    except ExtractError:
        pass
    return datetime.combine(base, time()) + parse_duration(text)


def parse_timespan(text: str, today: date | None = None) -> tuple[datetime, datetime]:
    """Parse ``<start>;<end>``, for example ``today;+7D``."""
    start, separator, end = text.strip().partition(";")
    if not separator:
        raise AgendaError(f"timespan {text!r} needs a start and an end separated by ';'")
    return parse_point(start, today), parse_point(end, today)


def parse_path_length(text: str) -> int | None:
    """Return ``None`` for ``full``, ``0`` for ``none``, else the component count."""
    if text == "full":
        return None
    if text == "none":
        return 0
    try:
        length = int(text)
    except ValueError as exc:
        raise AgendaError(f"invalid path length {text!r}") from exc
    if length < 0:
        raise AgendaError(f"invalid path length {text!r}")
    return length


def cut_path(path: str, length: int | None) -> str:
    """Keep the last ``length`` path components."""
    if length is None:
        return path
    if length == 0:
        return ""
    parts = PurePosixPath(path).parts
    return PurePosixPath(*parts[-length:]).as_posix()


def build_agenda(store: Store, start: datetime, end: datetime, interval: timedelta) -> Agenda:
    """Group todos by their scheduled stamp, falling back to the deadline.

    Todos without a stamp or stamped after ``end`` are left out. Stamps before
    ``start`` are overdue; the rest land in the bucket ``[s, s + interval)``
    whose start ``s`` steps from ``start`` while ``s <= end``.
    """
    if interval <= timedelta(0):
        raise AgendaError("interval must be positive")

    starts: list[datetime] = []
    cursor = start
    while cursor <= end:
        starts.append(cursor)
        cursor += interval

    items: list[tuple[datetime, AgendaItem]] = []
    for todo in store.todos():
        stamp = todo.scheduled or todo.deadline
        record = store.file_by_id(todo.file_id)
        if stamp is None or record is None:
            continue
        when = datetime.fromisoformat(stamp)
        if when > end:
            continue
        item = AgendaItem(
            path=record.path,
            line_number=todo.line_number,
            title=todo.title,
            stamp=stamp,
            scheduled=todo.scheduled is not None,
        )
        items.append((when, item))
    items.sort(key=lambda pair: (pair[0], pair[1].path, pair[1].line_number))

    overdue: list[AgendaItem] = []
    buckets: list[list[AgendaItem]] = [[] for _ in starts]
    for when, item in items:
        if when < start:
            overdue.append(item)
            continue
        buckets[(when - start) // interval].append(item)

    return Agenda(
        overdue=tuple(overdue),
        entries=tuple(
            AgendaEntry(start=bucket_start, todos=tuple(bucket))
            for bucket_start, bucket in zip(starts, buckets)
        ),
    )


def _item_dict(item: AgendaItem) -> dict[str, object]:
    return {
        "path": item.path,
        "line_number": item.line_number,
        "title": item.title,
        "stamp": item.stamp,
        "scheduled": item.scheduled,
    }
