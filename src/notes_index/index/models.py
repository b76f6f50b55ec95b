"""Typed models for indexing state."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class WalkedFile:
    """A candidate file reported by discovery."""

    path: str
    mtime_ns: int


@dataclass(slots=True, frozen=True)
class FileRecord:
    """Represents a file tracked by the index."""

    id: int
    path: str
    modified: int


@dataclass(slots=True, frozen=True)
class TodoRecord:
    """A TODO owned by an indexed file."""

    file_id: int
    line_number: int
    title: str
    deadline: str | None = None
    scheduled: str | None = None


@dataclass(slots=True, frozen=True)
class ReindexSummary:
    """Counts produced by one reindex pass."""

    added: int
    updated: int
    removed: int
    unchanged: int = 0
    failed: int = 0


@dataclass(slots=True, frozen=True)
class RankedHit:
    """Typed ranking output before projection to paths."""

    path: str
    score: float
    matched_terms: tuple[str, ...]
