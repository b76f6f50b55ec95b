"""Indexing, ranking and persistence package."""

from .agenda import (
    DEFAULT_INTERVAL,
    DEFAULT_PATH_LENGTH,
    DEFAULT_TIMESPAN,
    Agenda,
    AgendaEntry,
    AgendaError,
    AgendaItem,
    build_agenda,
    cut_path,
    parse_duration,
    parse_path_length,
    parse_timespan,
)
from .discovery import WalkError, discover_files, should_exclude
from .models import FileRecord, RankedHit, ReindexSummary, TodoRecord, WalkedFile
from .persistence import STORE_SCHEMA_VERSION, StoreLoadError, dump_store, load_store, save_store
from .ranking import query_term_ids, rank, rank_hits
from .reindex import read_text_body, reindex, reindex_root
from .store import Store, StoreInvariantError

__all__ = [
    "DEFAULT_INTERVAL",
    "DEFAULT_PATH_LENGTH",
    "DEFAULT_TIMESPAN",
    "Agenda",
    "AgendaEntry",
    "AgendaError",
    "AgendaItem",
    "FileRecord",
    "RankedHit",
    "ReindexSummary",
    "STORE_SCHEMA_VERSION",
    "Store",
    "StoreInvariantError",
    "StoreLoadError",
    "TodoRecord",
    "WalkError",
    "WalkedFile",
    "build_agenda",
    "cut_path",
    "discover_files",
    "dump_store",
    "load_store",
    "parse_duration",
    "parse_path_length",
    "parse_timespan",
    "query_term_ids",
    "rank",
    "rank_hits",
    "read_text_body",
    "reindex",
    "reindex_root",
    "save_store",
    "should_exclude",
]
