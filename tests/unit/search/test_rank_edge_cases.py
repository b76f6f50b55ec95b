from __future__ import annotations

from notes_index.index import Store, dump_store, rank, reindex


def test_empty_and_unknown_queries_return_nothing(tree, extractor) -> None:
    tree.write("/notes/a.md", "fix bug\n", mtime_ns=100)
    store = Store()
    reindex(store, tree.walked(), extractor, read_body=tree.read)
    before = dump_store(store)

    assert rank(store, "") == []
    assert rank(store, "   ") == []
    assert rank(store, "zebra") == []
    assert rank(store, "!!! 123") == []
    assert dump_store(store) == before


def test_rank_on_empty_store_returns_nothing() -> None:
    assert rank(Store(), "anything") == []


def test_ties_fall_back_to_path_order(tree, extractor) -> None:
    tree.write("/notes/z.md", "fix\n", mtime_ns=100)
    tree.write("/notes/m.md", "fix\n", mtime_ns=100)
    tree.write("/notes/a.md", "fix\n", mtime_ns=100)
    tree.write("/notes/other.md", "unrelated\n", mtime_ns=100)
    store = Store()
    reindex(store, tree.walked(), extractor, read_body=tree.read)

    assert rank(store, "fix") == ["/notes/a.md", "/notes/m.md", "/notes/z.md"]


def test_rank_is_repeatable_between_passes(tree, extractor) -> None:
    for name in ("c", "a", "b"):
        tree.write(f"/notes/{name}.md", f"shared {name}\n", mtime_ns=100)
    store = Store()
    reindex(store, tree.walked(), extractor, read_body=tree.read)

    first = rank(store, "shared")
    second = rank(store, "shared")

    assert first == second
    assert first == ["/notes/a.md", "/notes/b.md", "/notes/c.md"]
