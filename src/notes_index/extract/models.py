"""Typed models produced by content extraction."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class Todo:
    """A TODO marker found in a file body."""

    line_number: int
    title: str
    deadline: str | None = None
    scheduled: str | None = None


@dataclass(slots=True, frozen=True)
class Extraction:
    """Entities and normalized term counts extracted from one file."""

    todos: tuple[Todo, ...] = ()
    terms: Counter[str] = field(default_factory=Counter)


class ExtractError(Exception):
    """Raised when a file body cannot be extracted."""

    def __init__(self, reason: str, line_number: int | None = None) -> None:
        if line_number is not None:
            super().__init__(f"line {line_number}: {reason}")
        else:
            super().__init__(reason)
        self.reason = reason
        self.line_number = line_number
