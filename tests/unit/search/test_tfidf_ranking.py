from __future__ import annotations

import math

import pytest

from notes_index.index import Store, rank, rank_hits, reindex


@pytest.fixture
def indexed(tree, extractor) -> Store:
    tree.write("/notes/a.md", "fix bug\n", mtime_ns=100)
    tree.write("/notes/b.md", "fix bug fix bug\n", mtime_ns=100)
    tree.write("/notes/c.md", "grocery list\n", mtime_ns=100)
    store = Store()
    reindex(store, tree.walked(), extractor, read_body=tree.read)
    return store


def test_higher_term_frequency_ranks_first(indexed: Store) -> None:
    assert rank(indexed, "fix bug") == ["/notes/b.md", "/notes/a.md"]


def test_scores_follow_tf_times_log_idf(indexed: Store) -> None:
    hits = rank_hits(indexed, "fix bug")
    idf = math.log(3 / 2)

    assert [hit.path for hit in hits] == ["/notes/b.md", "/notes/a.md"]
    assert hits[0].score == pytest.approx(4 * idf)
    assert hits[1].score == pytest.approx(2 * idf)
    assert hits[0].matched_terms == ("bug", "fix")


def test_files_without_query_terms_are_excluded(indexed: Store) -> None:
    assert "/notes/c.md" not in rank(indexed, "fix")
    assert rank(indexed, "grocery") == ["/notes/c.md"]


def test_rarer_terms_outweigh_common_ones(tree, extractor) -> None:
    tree.write("/notes/a.md", "common common common\n", mtime_ns=100)
    tree.write("/notes/b.md", "common rare\n", mtime_ns=100)
    tree.write("/notes/c.md", "common\n", mtime_ns=100)
    tree.write("/notes/d.md", "other\n", mtime_ns=100)
    store = Store()
    reindex(store, tree.walked(), extractor, read_body=tree.read)

    assert rank(store, "common rare") == ["/notes/b.md", "/notes/a.md", "/notes/c.md"]


def test_query_uses_index_normalization(indexed: Store) -> None:
    assert rank(indexed, "FIX, Bugs!") == rank(indexed, "fix bug")


def test_repeated_query_terms_count_once(indexed: Store) -> None:
    assert rank_hits(indexed, "fix fix fix") == rank_hits(indexed, "fix")
