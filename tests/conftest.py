from __future__ import annotations

from collections.abc import Callable

import pytest

from notes_index.extract import ExtractError, Extraction, FileFormat, NotesExtractor
from notes_index.index import WalkedFile


class CountingExtractor:
    """Wraps the default extractor, recording calls and failing on demand."""

    def __init__(self, fail_paths: set[str] | None = None) -> None:
        self.calls: list[str] = []
        self.fail_paths = fail_paths or set()
        self._inner = NotesExtractor()

    def extract(self, path: str, file_format: FileFormat, body: str) -> Extraction:
        self.calls.append(path)
        if path in self.fail_paths:
            raise ExtractError(f"refusing {path}")
        return self._inner.extract(path, file_format, body)


class MemoryTree:
    """In-memory stand-in for discovery output plus file bodies."""

    def __init__(self) -> None:
        self.bodies: dict[str, str] = {}
        self.mtimes: dict[str, int] = {}

    def write(self, path: str, body: str, mtime_ns: int) -> None:
        self.bodies[path] = body
        self.mtimes[path] = mtime_ns

    def delete(self, path: str) -> None:
        del self.bodies[path]
        del self.mtimes[path]

    def walked(self) -> list[WalkedFile]:
        return [WalkedFile(path=path, mtime_ns=self.mtimes[path]) for path in sorted(self.mtimes)]

    def read(self, path: str) -> str:
        if path not in self.bodies:
            raise FileNotFoundError(path)
        return self.bodies[path]


@pytest.fixture
def extractor() -> CountingExtractor:
    return CountingExtractor()


@pytest.fixture
def tree() -> MemoryTree:
    return MemoryTree()


@pytest.fixture
def failing_extractor_factory() -> Callable[[set[str]], CountingExtractor]:
    return lambda paths: CountingExtractor(fail_paths=paths)
