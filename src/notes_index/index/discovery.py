"""Deterministic file discovery for the notes tree."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path

from notes_index.config import IndexConfig
from notes_index.extract.formats import FileFormat
from notes_index.index.models import WalkedFile

logger = logging.getLogger(__name__)


class WalkError(Exception):
    """Raised when the discovery root itself cannot be enumerated."""

    def __init__(self, root: Path, reason: str) -> None:
        super().__init__(f"cannot index {root}: {reason}")
        self.root = root
        self.reason = reason


def discover_files(root: Path, config: IndexConfig) -> list[WalkedFile]:
    """Discover indexable files under ``root`` sorted by absolute path.

    Hidden entries, ignored globs and unknown formats are skipped. Failures
    below the root are logged and skipped; failures at the root raise.
    """
    resolved = root.expanduser().resolve()
    if not resolved.exists():
        raise WalkError(resolved, "path does not exist")
    if not resolved.is_dir():
        raise WalkError(resolved, "path is not a directory")
    include_extensions = set(config.include_extensions)
    output: list[WalkedFile] = []
    stack: list[Path] = [resolved]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                ordered_entries = sorted(entries, key=lambda item: item.name)
        except OSError as exc:
            if current is resolved:
                raise WalkError(resolved, exc.strerror or str(exc)) from exc
            logger.warning("ignoring unreadable directory %s: %s", current, exc)
            continue
        for entry in reversed(ordered_entries):
            if entry.name.startswith("."):
                continue
            full_path = Path(entry.path)
            relative = full_path.relative_to(resolved).as_posix()
            if should_exclude(relative, config.exclude_globs):
                continue
            if entry.is_dir(follow_symlinks=False):
                logger.debug("discovered directory %s", full_path)
                stack.append(full_path)
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            if full_path.suffix.lower() not in include_extensions:
                continue
            if not FileFormat.from_path(full_path).is_known:
                continue
            try:
                stat = entry.stat(follow_symlinks=False)
            except OSError as exc:
                logger.warning("ignoring file with unreadable metadata %s: %s", full_path, exc)
                continue
            logger.debug("discovered file %s", full_path)
            output.append(WalkedFile(path=full_path.as_posix(), mtime_ns=stat.st_mtime_ns))
    output.sort(key=lambda item: item.path)
    return output


def should_exclude(relative_path: str, exclude_globs: tuple[str, ...]) -> bool:
    """Return True when a path matches configured ignore globs."""
    anchored = f"/{relative_path}"
    with_children = f"/{relative_path}/"
    return any(
        fnmatch.fnmatch(relative_path, pattern)
        or fnmatch.fnmatch(anchored, pattern)
        or fnmatch.fnmatch(with_children, pattern)
        for pattern in exclude_globs
    )
