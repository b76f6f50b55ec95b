"""In-memory index store: term dictionary, file registry and frequency ledgers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from notes_index.extract.models import Todo
from notes_index.index.models import FileRecord, TodoRecord


class StoreInvariantError(Exception):
    """Raised when the store's derived relations disagree with each other."""


class Store:
    """Explicit index state passed into reindex and rank.

    Term frequencies are kept twice: by file for cascade removal and by term
    for document-frequency recomputation. Both views are updated together by
    the methods below and never mutated directly.
    """

    def __init__(self) -> None:
        self.file_id_max = 0
        self.term_id_max = 0
        self._files: dict[int, FileRecord] = {}
        self._file_ids_by_path: dict[str, int] = {}
        self._terms: dict[int, str] = {}
        self._term_ids: dict[str, int] = {}
        self._file_terms: dict[int, dict[int, int]] = {}
        self._postings: dict[int, dict[int, int]] = {}
        self._document_frequencies: dict[int, int] = {}
        self._todos: dict[int, tuple[TodoRecord, ...]] = {}

    # Term dictionary

    def get_or_create_term(self, text: str) -> int:
        """Return the id for ``text``, minting a fresh one when absent."""
        term_id = self._term_ids.get(text)
        if term_id is not None:
            return term_id
        self.term_id_max += 1
        term_id = self.term_id_max
        self._terms[term_id] = text
        self._term_ids[text] = term_id
        return term_id

    def lookup_term(self, text: str) -> int | None:
        """Read-only lookup used by ranking."""
        return self._term_ids.get(text)

    def term_text(self, term_id: int) -> str:
        return self._terms[term_id]

    def remove_term(self, term_id: int) -> None:
        """Drop a term that no file references any more."""
        if self._postings.get(term_id):
            raise StoreInvariantError(f"term {term_id} is still referenced")
        text = self._terms.pop(term_id)
        del self._term_ids[text]
        self._postings.pop(term_id, None)
        self._document_frequencies.pop(term_id, None)

    # File registry

    def mint_file_id(self) -> int:
        self.file_id_max += 1
        return self.file_id_max

    def file_by_path(self, path: str) -> FileRecord | None:
        file_id = self._file_ids_by_path.get(path)
        if file_id is None:
            return None
        return self._files[file_id]

    def file_by_id(self, file_id: int) -> FileRecord | None:
        return self._files.get(file_id)

    def files(self) -> list[FileRecord]:
        """Return live file records ordered by path."""
        return sorted(self._files.values(), key=lambda record: record.path)

    def paths(self) -> set[str]:
        return set(self._file_ids_by_path)

    @property
    def file_count(self) -> int:
        return len(self._files)

    @property
    def term_count(self) -> int:
        return len(self._terms)

    def add_file(
        self,
        path: str,
        modified: int,
        term_counts: Mapping[str, int],
        todos: Iterable[Todo] = (),
    ) -> tuple[FileRecord, set[int]]:
        """Insert a freshly extracted file with its todos and term counts.

        Returns the new record and the ids of every term it references.
        Document frequencies are left for the caller to recompute.
        """
        if path in self._file_ids_by_path:
            raise StoreInvariantError(f"path already indexed: {path}")
        record = FileRecord(id=self.mint_file_id(), path=path, modified=modified)
        self._files[record.id] = record
        self._file_ids_by_path[path] = record.id

        counts: dict[int, int] = {}
        for text, count in term_counts.items():
            if count <= 0:
                continue
            term_id = self.get_or_create_term(text)
            counts[term_id] = counts.get(term_id, 0) + count
        self._file_terms[record.id] = counts
        for term_id, count in counts.items():
            self._postings.setdefault(term_id, {})[record.id] = count

        owned = tuple(
            TodoRecord(
                file_id=record.id,
                line_number=todo.line_number,
                title=todo.title,
                deadline=todo.deadline,
                scheduled=todo.scheduled,
            )
            for todo in todos
        )
        if owned:
            self._todos[record.id] = owned
        return record, set(counts)

    def remove_file(self, file_id: int) -> set[int]:
        """Remove a file with its term frequencies and todos.

        Returns the ids of the terms whose document frequency is now stale.
        """
        record = self._files.pop(file_id)
        del self._file_ids_by_path[record.path]
        self._todos.pop(file_id, None)
        touched = set(self._file_terms.pop(file_id, {}))
        for term_id in touched:
            postings = self._postings.get(term_id)
            if postings is None:
                continue
            postings.pop(file_id, None)
            if not postings:
                del self._postings[term_id]
        return touched

    # Frequency ledgers

    def term_frequency(self, term_id: int, file_id: int) -> int:
        return self._postings.get(term_id, {}).get(file_id, 0)

    def postings(self, term_id: int) -> dict[int, int]:
        """Return a copy of ``file_id -> count`` for a term."""
        return dict(self._postings.get(term_id, {}))

    def file_terms(self, file_id: int) -> dict[int, int]:
        return dict(self._file_terms.get(file_id, {}))

    def document_frequency(self, term_id: int) -> int:
        return self._document_frequencies.get(term_id, 0)

    def recompute_document_frequency(self, term_id: int) -> int:
        """Recount distinct referencing files; garbage-collect the term at zero."""
        df = len(self._postings.get(term_id, {}))
        if df == 0:
            if term_id in self._terms:
                self.remove_term(term_id)
            return 0
        self._document_frequencies[term_id] = df
        return df

    # Todo table

    def todos(self) -> list[TodoRecord]:
        """Return every todo ordered by owning path then line number."""
        output: list[TodoRecord] = []
        for record in self.files():
            output.extend(self._todos.get(record.id, ()))
        return output

    def todos_for(self, file_id: int) -> tuple[TodoRecord, ...]:
        return self._todos.get(file_id, ())

    @property
    def todo_count(self) -> int:
        return sum(len(items) for items in self._todos.values())

    # Consistency

    def check_invariants(self) -> None:
        """Verify path uniqueness, referential integrity and df consistency."""
        if len(self._file_ids_by_path) != len(self._files):
            raise StoreInvariantError("file path index is out of sync with file records")
        for path, file_id in self._file_ids_by_path.items():
            record = self._files.get(file_id)
            if record is None or record.path != path:
                raise StoreInvariantError(f"path {path!r} maps to a missing or different file")
            if file_id > self.file_id_max:
                raise StoreInvariantError(f"file id {file_id} exceeds counter")
        if set(self._term_ids.values()) != set(self._terms) or len(self._term_ids) != len(
            self._terms
        ):
            raise StoreInvariantError("term dictionary is out of sync")

        rebuilt: dict[int, dict[int, int]] = {}
        for file_id, counts in self._file_terms.items():
            if file_id not in self._files:
                raise StoreInvariantError(f"term frequencies reference missing file {file_id}")
            for term_id, count in counts.items():
                if term_id not in self._terms:
                    raise StoreInvariantError(f"term frequency references missing term {term_id}")
                if count <= 0:
                    raise StoreInvariantError(f"non-positive count for term {term_id}")
                rebuilt.setdefault(term_id, {})[file_id] = count
        if rebuilt != self._postings:
            raise StoreInvariantError("postings disagree with per-file term frequencies")

        for term_id in self._terms:
            if term_id > self.term_id_max:
                raise StoreInvariantError(f"term id {term_id} exceeds counter")
            expected = len(rebuilt.get(term_id, {}))
            if expected == 0:
                raise StoreInvariantError(f"term {term_id} has no referencing files")
            if self._document_frequencies.get(term_id) != expected:
                raise StoreInvariantError(f"document frequency of term {term_id} is stale")
        if set(self._document_frequencies) - set(self._terms):
            raise StoreInvariantError("document frequency rows reference missing terms")

        for file_id, items in self._todos.items():
            if file_id not in self._files:
                raise StoreInvariantError(f"todos reference missing file {file_id}")
            if any(item.file_id != file_id for item in items):
                raise StoreInvariantError(f"todo ownership mismatch for file {file_id}")

    # Serialization

    def to_dict(self) -> dict[str, object]:
        """Serialize to plain JSON types with deterministic ordering."""
        term_frequencies: list[dict[str, int]] = []
        for term_id in sorted(self._postings):
            for file_id, count in sorted(self._postings[term_id].items()):
                term_frequencies.append({"term": term_id, "file": file_id, "count": count})
        return {
            "file_id_max": self.file_id_max,
            "term_id_max": self.term_id_max,
            "files": [
                {"id": record.id, "path": record.path, "modified": record.modified}
                for record in sorted(self._files.values(), key=lambda item: item.id)
            ],
            "terms": [{"id": term_id, "text": self._terms[term_id]} for term_id in sorted(self._terms)],
            "term_frequencies": term_frequencies,
            "document_frequencies": [
                {"term": term_id, "df": df}
                for term_id, df in sorted(self._document_frequencies.items())
            ],
            "todos": [
                {
                    "file": item.file_id,
                    "line_number": item.line_number,
                    "title": item.title,
                    "deadline": item.deadline,
                    "scheduled": item.scheduled,
                }
                for file_id in sorted(self._todos)
                for item in self._todos[file_id]
            ],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> Store:
        """Rebuild a store, raising ``ValueError`` on malformed content."""
        store = cls()
        store.file_id_max = _require_int(payload, "file_id_max")
        store.term_id_max = _require_int(payload, "term_id_max")

        for row in _require_rows(payload, "files"):
            record = FileRecord(
                id=_require_int(row, "id"),
                path=_require_str(row, "path"),
                modified=_require_int(row, "modified"),
            )
            if record.id in store._files or record.path in store._file_ids_by_path:
                raise ValueError(f"duplicate file row: {record.path}")
            store._files[record.id] = record
            store._file_ids_by_path[record.path] = record.id

        for row in _require_rows(payload, "terms"):
            term_id = _require_int(row, "id")
            text = _require_str(row, "text")
            if term_id in store._terms or text in store._term_ids:
                raise ValueError(f"duplicate term row: {text}")
            store._terms[term_id] = text
            store._term_ids[text] = term_id

        for row in _require_rows(payload, "term_frequencies"):
            term_id = _require_int(row, "term")
            file_id = _require_int(row, "file")
            count = _require_int(row, "count")
            if term_id in store._file_terms.get(file_id, {}):
                raise ValueError(f"duplicate term frequency row: {term_id}/{file_id}")
            store._file_terms.setdefault(file_id, {})[term_id] = count
            store._postings.setdefault(term_id, {})[file_id] = count

        for row in _require_rows(payload, "document_frequencies"):
            store._document_frequencies[_require_int(row, "term")] = _require_int(row, "df")

        todos: dict[int, list[TodoRecord]] = {}
        for row in _require_rows(payload, "todos"):
            file_id = _require_int(row, "file")
            todos.setdefault(file_id, []).append(
                TodoRecord(
                    file_id=file_id,
                    line_number=_require_int(row, "line_number"),
                    title=_require_str(row, "title"),
                    deadline=_optional_str(row, "deadline"),
                    scheduled=_optional_str(row, "scheduled"),
                )
            )
        store._todos = {file_id: tuple(items) for file_id, items in todos.items()}
        for file_id in store._files:
            store._file_terms.setdefault(file_id, {})
        return store


def _require_int(row: Mapping[str, object], key: str) -> int:
    value = row.get(key)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"field '{key}' must be an integer")
    return value


def _require_str(row: Mapping[str, object], key: str) -> str:
    value = row.get(key)
    if not isinstance(value, str):
        raise ValueError(f"field '{key}' must be a string")
    return value


def _optional_str(row: Mapping[str, object], key: str) -> str | None:
    value = row.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"field '{key}' must be a string or null")
    return value


def _require_rows(payload: Mapping[str, object], key: str) -> list[Mapping[str, object]]:
    rows = payload.get(key)
    if not isinstance(rows, list):
        raise ValueError(f"field '{key}' must be a list")
    output: list[Mapping[str, object]] = []
    for row in rows:
        if not isinstance(row, dict):
            raise ValueError(f"entries of '{key}' must be objects")
        output.append(row)
    return output
