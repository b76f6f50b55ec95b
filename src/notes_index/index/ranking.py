"""Deterministic TF-IDF ranking over the index store."""

from __future__ import annotations

import math
from collections.abc import Callable

from notes_index.extract.stemmer import normalize_terms
from notes_index.index.models import RankedHit
from notes_index.index.store import Store

Normalizer = Callable[[str], list[str]]


def query_term_ids(store: Store, query: str, normalize: Normalizer = normalize_terms) -> list[int]:
    """Resolve distinct normalized query terms, dropping unknown ones."""
    output: list[int] = []
    for term in normalize(query):
        term_id = store.lookup_term(term)
        if term_id is None or term_id in output:
            continue
        output.append(term_id)
    return output


def rank_hits(store: Store, query: str, normalize: Normalizer = normalize_terms) -> list[RankedHit]:
    """Score files by summed ``tf * ln(N / df)`` over known query terms.

    Files containing none of the query terms are left out. Ordering is by
    score descending, then by the raw count of matched terms descending, then
    by path ascending.
    """
    term_ids = query_term_ids(store, query, normalize)
    total_files = store.file_count
    if not term_ids or total_files == 0:
        return []

    scores: dict[int, float] = {}
    raw_counts: dict[int, int] = {}
    matched: dict[int, list[str]] = {}
    for term_id in term_ids:
        df = store.document_frequency(term_id)
        if df < 1:
            continue
        idf = math.log(total_files / df)
        text = store.term_text(term_id)
        for file_id, tf in store.postings(term_id).items():
            scores[file_id] = scores.get(file_id, 0.0) + tf * idf
            raw_counts[file_id] = raw_counts.get(file_id, 0) + tf
            matched.setdefault(file_id, []).append(text)

    hits: list[tuple[RankedHit, int]] = []
    for file_id, score in scores.items():
        record = store.file_by_id(file_id)
        if record is None:
            continue
        hit = RankedHit(
            path=record.path,
            score=score,
            matched_terms=tuple(sorted(matched[file_id])),
        )
        hits.append((hit, raw_counts[file_id]))

    hits.sort(key=lambda item: (-item[0].score, -item[1], item[0].path))
    return [hit for hit, _ in hits]


def rank(store: Store, query: str, normalize: Normalizer = normalize_terms) -> list[str]:
    """Return indexed paths ranked for ``query``; never mutates the store."""
    return [hit.path for hit in rank_hits(store, query, normalize)]
