from __future__ import annotations

import pytest

from notes_index.extract import Todo
from notes_index.index import Store, StoreInvariantError


def test_add_file_records_counts_and_todos() -> None:
    store = Store()

    record, term_ids = store.add_file(
        "/notes/a.md",
        10,
        {"fix": 2, "bug": 1, "ignored": 0},
        [Todo(line_number=1, title="fix bug")],
    )

    assert record.id == 1
    assert store.file_by_path("/notes/a.md") == record
    assert {store.term_text(term_id) for term_id in term_ids} == {"fix", "bug"}
    assert store.term_frequency(store.lookup_term("fix"), record.id) == 2
    assert [todo.title for todo in store.todos_for(record.id)] == ["fix bug"]
    assert store.todo_count == 1


def test_duplicate_path_is_rejected() -> None:
    store = Store()
    store.add_file("/notes/a.md", 10, {"fix": 1})

    with pytest.raises(StoreInvariantError, match="already indexed"):
        store.add_file("/notes/a.md", 20, {"fix": 1})


def test_remove_file_reports_touched_terms() -> None:
    store = Store()
    record, term_ids = store.add_file("/notes/a.md", 10, {"fix": 1, "bug": 3})

    touched = store.remove_file(record.id)

    assert touched == term_ids
    assert store.file_count == 0
    assert store.postings(store.lookup_term("bug")) == {}


def test_check_invariants_flags_stale_document_frequency() -> None:
    store = Store()
    store.add_file("/notes/a.md", 10, {"fix": 1})

    with pytest.raises(StoreInvariantError, match="stale"):
        store.check_invariants()

    store.recompute_document_frequency(store.lookup_term("fix"))
    store.check_invariants()
