"""Whole-store JSON persistence with atomic replacement."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from notes_index.index.store import Store, StoreInvariantError

STORE_SCHEMA_VERSION = 1

logger = logging.getLogger(__name__)


class StoreLoadError(Exception):
    """Raised when a persisted store cannot be read back."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"cannot load store at {path}: {reason}")
        self.path = path
        self.reason = reason


def load_store(path: Path) -> Store:
    """Load a store from ``path``; a missing file yields an empty store."""
    if not path.exists():
        logger.info("no store at %s, starting empty", path)
        return Store()
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise StoreLoadError(path, str(exc)) from exc
    if not isinstance(payload, dict):
        raise StoreLoadError(path, "top-level value must be an object")

    schema = payload.get("schema_version")
    if not isinstance(schema, int) or isinstance(schema, bool):
        raise StoreLoadError(path, "missing schema_version")
    if schema != STORE_SCHEMA_VERSION:
        raise StoreLoadError(
            path, f"unsupported schema_version {schema}, expected {STORE_SCHEMA_VERSION}"
        )
    body = payload.get("store")
    if not isinstance(body, dict):
        raise StoreLoadError(path, "missing store body")
    try:
        store = Store.from_dict(body)
        store.check_invariants()
    except (ValueError, StoreInvariantError) as exc:
        raise StoreLoadError(path, str(exc)) from exc
    logger.debug("loaded store with %d files from %s", store.file_count, path)
    return store


def dump_store(store: Store) -> str:
    """Serialize deterministically so equal stores produce equal text."""
    payload = {"schema_version": STORE_SCHEMA_VERSION, "store": store.to_dict()}
    return json.dumps(payload, sort_keys=True, ensure_ascii=False) + "\n"


def save_store(store: Store, path: Path) -> None:
    """Write the whole store, replacing the previous file atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as handle:
        handle.write(dump_store(store))
    tmp.replace(path)
    logger.debug("saved store with %d files to %s", store.file_count, path)
