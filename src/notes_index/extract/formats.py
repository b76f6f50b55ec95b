"""Recognized note and source file formats."""

from __future__ import annotations

from enum import Enum
from pathlib import PurePath


class FileFormat(str, Enum):
    """File format derived from a path suffix."""

    UNKNOWN = "unknown"
    MARKDOWN = "markdown"
    TYPST = "typst"
    CLIKE = "clike"

    @classmethod
    def from_path(cls, path: str | PurePath) -> FileFormat:
        """Map a path to its format by lowercase suffix."""
        suffix = PurePath(path).suffix.lower()
        return _SUFFIX_FORMATS.get(suffix, cls.UNKNOWN)

    @property
    def is_known(self) -> bool:
        return self is not FileFormat.UNKNOWN


_SUFFIX_FORMATS: dict[str, FileFormat] = {
    ".md": FileFormat.MARKDOWN,
    ".typ": FileFormat.TYPST,
    ".c": FileFormat.CLIKE,
    ".h": FileFormat.CLIKE,
    ".cpp": FileFormat.CLIKE,
    ".hpp": FileFormat.CLIKE,
    ".rs": FileFormat.CLIKE,
    ".go": FileFormat.CLIKE,
    ".java": FileFormat.CLIKE,
    ".js": FileFormat.CLIKE,
    ".ts": FileFormat.CLIKE,
    ".cs": FileFormat.CLIKE,
}
