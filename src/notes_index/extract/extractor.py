"""Content extraction contract and the default notes extractor."""

from __future__ import annotations

from typing import Protocol

from notes_index.extract.formats import FileFormat
from notes_index.extract.models import ExtractError, Extraction
from notes_index.extract.stemmer import term_histogram
from notes_index.extract.todos import parse_todos


class ContentExtractor(Protocol):
    """Turns one file body into todos and a multiset of normalized terms."""

    def extract(self, path: str, file_format: FileFormat, body: str) -> Extraction: ...


class NotesExtractor:
    """Default extractor: TODO grammar per format plus stemmed term counts."""

    def extract(self, path: str, file_format: FileFormat, body: str) -> Extraction:
        if not file_format.is_known:
            raise ExtractError(f"unsupported format for {path}")
        todos = parse_todos(body, file_format)
        return Extraction(todos=tuple(todos), terms=term_histogram(body))
