"""Incremental reindex orchestration over an explicit store."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from notes_index.config import IndexConfig
from notes_index.extract import ContentExtractor, ExtractError, FileFormat, NotesExtractor
from notes_index.index.discovery import discover_files
from notes_index.index.models import FileRecord, ReindexSummary, WalkedFile
from notes_index.index.store import Store

BodyReader = Callable[[str], str]

logger = logging.getLogger(__name__)


def read_text_body(path: str) -> str:
    """Read a file body as UTF-8 text."""
    return Path(path).read_text(encoding="utf-8")


def reindex(
    store: Store,
    walked: Iterable[WalkedFile],
    extractor: ContentExtractor,
    read_body: BodyReader = read_text_body,
) -> ReindexSummary:
    """Reconcile ``store`` with the current discovery output, in place.

    The pass runs in four phases: prune files that disappeared, detect
    stale files by modification time, re-extract stale files, then
    recompute document frequencies for every term the pass touched. Files
    that fail to read or extract are logged and left out of the store; the
    discovery listing is fully materialized before anything is mutated so an
    enumeration failure leaves the store untouched. Document frequencies are
    recomputed even when an extractor raises something unexpected.
    """
    started = time.perf_counter()
    reported = _reported_files(walked)

    touched: set[int] = set()
    removed = _prune(store, reported, touched)
    dirty, unchanged = _detect_stale(store, reported)

    added = 0
    updated = 0
    failed = 0
    try:
        for walked_file, previous in dirty:
            if previous is not None:
                touched |= store.remove_file(previous.id)
            term_ids = _extract_into(store, walked_file, extractor, read_body)
            if term_ids is None:
                failed += 1
                continue
            touched |= term_ids
            if previous is None:
                added += 1
            else:
                updated += 1
    finally:
        for term_id in sorted(touched):
            store.recompute_document_frequency(term_id)

    summary = ReindexSummary(
        added=added,
        updated=updated,
        removed=removed,
        unchanged=unchanged,
        failed=failed,
    )
    logger.info(
        "reindex finished in %.3fs: added=%d updated=%d removed=%d unchanged=%d failed=%d",
        time.perf_counter() - started,
        summary.added,
        summary.updated,
        summary.removed,
        summary.unchanged,
        summary.failed,
    )
    return summary


def reindex_root(
    store: Store,
    root: Path,
    config: IndexConfig,
    extractor: ContentExtractor | None = None,
    read_body: BodyReader = read_text_body,
) -> ReindexSummary:
    """Discover files under ``root`` and reindex them into ``store``."""
    walked = discover_files(root, config)
    return reindex(store, walked, extractor or NotesExtractor(), read_body=read_body)


def _reported_files(walked: Iterable[WalkedFile]) -> dict[str, WalkedFile]:
    reported: dict[str, WalkedFile] = {}
    for item in walked:
        existing = reported.get(item.path)
        if existing is not None:
            logger.warning("discovery reported %s twice, keeping the newest mtime", item.path)
            if existing.mtime_ns >= item.mtime_ns:
                continue
        reported[item.path] = item
    return reported


def _prune(store: Store, reported: dict[str, WalkedFile], touched: set[int]) -> int:
    removed = 0
    for record in store.files():
        if record.path in reported:
            continue
        logger.debug("removing vanished file %s (id %d)", record.path, record.id)
        touched |= store.remove_file(record.id)
        removed += 1
    return removed


def _detect_stale(
    store: Store, reported: dict[str, WalkedFile]
) -> tuple[list[tuple[WalkedFile, FileRecord | None]], int]:
    dirty: list[tuple[WalkedFile, FileRecord | None]] = []
    unchanged = 0
    for path in sorted(reported):
        walked_file = reported[path]
        previous = store.file_by_path(path)
        if previous is not None and walked_file.mtime_ns <= previous.modified:
            unchanged += 1
            continue
        dirty.append((walked_file, previous))
    return dirty, unchanged


def _extract_into(
    store: Store,
    walked_file: WalkedFile,
    extractor: ContentExtractor,
    read_body: BodyReader,
) -> set[int] | None:
    path = walked_file.path
    try:
        body = read_body(path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("skipping unreadable file %s: %s", path, exc)
        return None
    try:
        extraction = extractor.extract(path, FileFormat.from_path(path), body)
    except ExtractError as exc:
        logger.warning("skipping file that failed extraction %s: %s", path, exc)
        return None

    record, term_ids = store.add_file(
        path,
        walked_file.mtime_ns,
        extraction.terms,
        extraction.todos,
    )
    logger.debug(
        "indexed %s as id %d with %d terms and %d todos",
        path,
        record.id,
        len(term_ids),
        len(extraction.todos),
    )
    return term_ids
