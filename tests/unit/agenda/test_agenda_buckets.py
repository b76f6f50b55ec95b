from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta

import pytest

from notes_index.extract import Todo
from notes_index.index import (
    AgendaError,
    Store,
    build_agenda,
    cut_path,
    parse_duration,
    parse_path_length,
    parse_timespan,
)

START = datetime(2025, 6, 15)
END = datetime(2025, 6, 17)
DAY = timedelta(days=1)


def _store(*todos: Todo, path: str = "/notes/plan.md") -> Store:
    store = Store()
    store.add_file(path, 100, Counter({"plan": 1}), todos)
    return store


def test_overdue_collects_stamps_before_start() -> None:
    store = _store(
        Todo(line_number=1, title="late", deadline="2025-06-14T23:59"),
        Todo(line_number=3, title="later", scheduled="2025-06-01T00:00"),
    )

    agenda = build_agenda(store, START, END, DAY)

    assert [item.title for item in agenda.overdue] == ["later", "late"]
    assert all(not entry.todos for entry in agenda.entries)


def test_bucket_edges_are_half_open() -> None:
    store = _store(
        Todo(line_number=1, title="at start", scheduled="2025-06-15T00:00"),
        Todo(line_number=2, title="end of day", scheduled="2025-06-15T23:59"),
        Todo(line_number=3, title="next day", scheduled="2025-06-16T00:00"),
        Todo(line_number=4, title="at end", deadline="2025-06-17T00:00"),
        Todo(line_number=5, title="after end", deadline="2025-06-17T00:01"),
    )

    agenda = build_agenda(store, START, END, DAY)

    assert [entry.start for entry in agenda.entries] == [START, START + DAY, END]
    assert [[item.title for item in entry.todos] for entry in agenda.entries] == [
        ["at start", "end of day"],
        ["next day"],
        ["at end"],
    ]
    assert agenda.overdue == ()


def test_scheduled_stamp_wins_over_deadline() -> None:
    store = _store(
        Todo(
            line_number=1,
            title="both",
            deadline="2025-06-10T00:00",
            scheduled="2025-06-16T09:00",
        ),
    )

    agenda = build_agenda(store, START, END, DAY)

    assert agenda.overdue == ()
    (item,) = agenda.entries[1].todos
    assert item.scheduled is True
    assert item.stamp == "2025-06-16T09:00"


def test_unstamped_todos_are_left_out() -> None:
    store = _store(Todo(line_number=1, title="someday"))

    agenda = build_agenda(store, START, END, DAY)

    assert agenda.overdue == ()
    assert all(not entry.todos for entry in agenda.entries)


def test_empty_store_gives_empty_buckets() -> None:
    agenda = build_agenda(Store(), START, END, DAY)

    assert agenda.to_dict() == {
        "overdue": [],
        "entries": [
            {"stamp": "2025-06-15T00:00", "todos": []},
            {"stamp": "2025-06-16T00:00", "todos": []},
            {"stamp": "2025-06-17T00:00", "todos": []},
        ],
    }


def test_start_after_end_has_no_entries() -> None:
    assert build_agenda(Store(), END, START, DAY).entries == ()


def test_interval_must_be_positive() -> None:
    with pytest.raises(AgendaError):
        build_agenda(Store(), START, END, timedelta(0))


def test_parse_duration_units() -> None:
    assert parse_duration("+7D") == timedelta(days=7)
    assert parse_duration("-2h") == timedelta(hours=-2)
    assert parse_duration("1W") == timedelta(weeks=1)
    assert parse_duration("1M") == timedelta(days=31)
    with pytest.raises(AgendaError):
        parse_duration("7d")
    with pytest.raises(AgendaError):
        parse_duration("D")


def test_parse_timespan_mixes_stamps_and_durations() -> None:
    today = date(2025, 6, 15)

    assert parse_timespan("today;+7D", today) == (START, datetime(2025, 6, 22))
    assert parse_timespan("2025-06-01;tomorrow 12:00", today) == (
        datetime(2025, 6, 1),
        datetime(2025, 6, 16, 12, 0),
    )
    with pytest.raises(AgendaError):
        parse_timespan("today", today)
    with pytest.raises(AgendaError):
        parse_timespan("today;soon", today)


def test_path_length_cuts_leading_components() -> None:
    assert cut_path("/notes/work/plan.md", parse_path_length("2")) == "work/plan.md"
    assert cut_path("/notes/work/plan.md", parse_path_length("full")) == "/notes/work/plan.md"
    assert cut_path("/notes/work/plan.md", parse_path_length("none")) == ""
    assert cut_path("/notes/plan.md", parse_path_length("9")) == "/notes/plan.md"
    with pytest.raises(AgendaError):
        parse_path_length("short")
