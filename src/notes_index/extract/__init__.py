"""Content extraction: formats, TODO grammar and term normalization."""

from .extractor import ContentExtractor, NotesExtractor
from .formats import FileFormat
from .models import ExtractError, Extraction, Todo
from .stemmer import normalize_terms, stem, term_histogram
from .todos import parse_stamp, parse_todos

__all__ = [
    "ContentExtractor",
    "ExtractError",
    "Extraction",
    "FileFormat",
    "NotesExtractor",
    "Todo",
    "normalize_terms",
    "parse_stamp",
    "parse_todos",
    "stem",
    "term_histogram",
]
