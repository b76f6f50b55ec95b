from __future__ import annotations

from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "src/notes_index/cli.py",
        "src/notes_index/config.py",
        "src/notes_index/extract/__init__.py",
        "src/notes_index/index/__init__.py",
        "src/notes_index/logging/__init__.py",
    ]
    for rel in required:
        assert (root / rel).exists(), rel
