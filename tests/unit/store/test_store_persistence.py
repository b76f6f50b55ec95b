from __future__ import annotations

import json
from pathlib import Path

import pytest

from notes_index.extract import Todo
from notes_index.index import (
    STORE_SCHEMA_VERSION,
    Store,
    StoreLoadError,
    dump_store,
    load_store,
    save_store,
)


def _populated_store() -> Store:
    store = Store()
    _, first_terms = store.add_file(
        "/notes/a.md",
        10,
        {"fix": 1, "bug": 1},
        [Todo(line_number=1, title="fix bug", deadline="2025-12-01T12:00")],
    )
    _, second_terms = store.add_file("/notes/b.md", 20, {"fix": 2})
    for term_id in first_terms | second_terms:
        store.recompute_document_frequency(term_id)
    return store


def test_missing_store_file_loads_empty(tmp_path: Path) -> None:
    store = load_store(tmp_path / "store.json")

    assert store.file_count == 0
    assert not (tmp_path / "store.json").exists()


def test_save_then_load_preserves_serialized_form(tmp_path: Path) -> None:
    store = _populated_store()
    path = tmp_path / "nested" / "store.json"

    save_store(store, path)
    loaded = load_store(path)

    assert dump_store(loaded) == dump_store(store)
    assert path.read_text(encoding="utf-8") == dump_store(store)
    assert not (path.parent / "store.json.tmp").exists()
    assert loaded.file_id_max == 2


def test_malformed_json_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StoreLoadError):
        load_store(path)


def test_schema_mismatch_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    payload = json.loads(dump_store(_populated_store()))
    payload["schema_version"] = STORE_SCHEMA_VERSION + 1
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(StoreLoadError, match="unsupported schema_version"):
        load_store(path)


def test_dangling_term_frequency_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    payload = json.loads(dump_store(_populated_store()))
    payload["store"]["term_frequencies"].append({"term": 1, "file": 99, "count": 1})
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(StoreLoadError, match="missing file"):
        load_store(path)


def test_wrong_field_type_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    payload = json.loads(dump_store(_populated_store()))
    payload["store"]["files"][0]["modified"] = "yesterday"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(StoreLoadError, match="modified"):
        load_store(path)
