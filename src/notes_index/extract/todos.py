"""Line-oriented TODO marker grammar for the supported formats."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta

from notes_index.extract.formats import FileFormat
from notes_index.extract.models import ExtractError, Todo

STAMP_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%d")
RELATIVE_DAYS = {"yesterday": -1, "today": 0, "tomorrow": 1}


@dataclass(slots=True, frozen=True)
class _Grammar:
    """Per-format line patterns for markers and their follow-up stamps."""

    todo: re.Pattern[str]
    deadline: str
    scheduled: str
    strip_lines: bool


_GRAMMARS: dict[FileFormat, _Grammar] = {
    FileFormat.MARKDOWN: _Grammar(
        todo=re.compile(r"^#{1,5} TODO:(?P<title>.*)$"),
        deadline="> DEADLINE:",
        scheduled="> SCHEDULED:",
        strip_lines=False,
    ),
    FileFormat.TYPST: _Grammar(
        todo=re.compile(r"^={1,6} TODO:(?P<title>.*)$"),
        deadline="- DEADLINE:",
        scheduled="- SCHEDULED:",
        strip_lines=False,
    ),
    FileFormat.CLIKE: _Grammar(
        todo=re.compile(r"^// TODO:(?P<title>.*)$"),
        deadline="// - DEADLINE:",
        scheduled="// - SCHEDULED:",
        strip_lines=True,
    ),
}


def parse_stamp(raw: str, line_number: int, today: date | None = None) -> str:
    """Parse a stamp into an ISO-8601 minute-resolution string.

    Accepts ``YYYY-MM-DD[ HH:MM]`` or one of ``today``, ``tomorrow`` and
    ``yesterday`` with an optional `` HH:MM``. Relative words resolve against
    ``today``, which defaults to the date at parse time.
    """
    text = " ".join(raw.split())
    word, _, clock = text.partition(" ")
    offset = RELATIVE_DAYS.get(word)
    if offset is not None:
        base = (today or date.today()) + timedelta(days=offset)
        at = time()
        if clock:
            try:
                at = datetime.strptime(clock, "%H:%M").time()
            except ValueError as exc:
                raise ExtractError(
                    f"invalid timestamp {text!r}", line_number=line_number
                ) from exc
        return datetime.combine(base, at).isoformat(timespec="minutes")
    for fmt in STAMP_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.isoformat(timespec="minutes")
    raise ExtractError(f"invalid timestamp {text!r}", line_number=line_number)


def parse_todos(body: str, file_format: FileFormat, today: date | None = None) -> list[Todo]:
    """Return TODO markers in line order.

    A DEADLINE or SCHEDULED line attaches to the most recent TODO above it and
    is ignored when no TODO precedes it. A malformed stamp fails the whole file.
    """
    grammar = _GRAMMARS.get(file_format)
    if grammar is None:
        return []

    todos: list[Todo] = []
    for index, raw_line in enumerate(body.splitlines()):
        line_number = index + 1
        line = raw_line.strip() if grammar.strip_lines else raw_line
        match = grammar.todo.match(line)
        if match is not None:
            todos.append(Todo(line_number=line_number, title=match.group("title").strip()))
            continue
        if line.startswith(grammar.deadline):
            stamp = parse_stamp(line[len(grammar.deadline) :], line_number, today)
            if todos:
                todos[-1] = replace(todos[-1], deadline=stamp)
            continue
        if line.startswith(grammar.scheduled):
            stamp = parse_stamp(line[len(grammar.scheduled) :], line_number, today)
            if todos:
                todos[-1] = replace(todos[-1], scheduled=stamp)
    return todos
