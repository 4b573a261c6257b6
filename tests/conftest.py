"""Shared test fixtures for repolint."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from repolint.models import FileEntry

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def _entries(*paths: str) -> list[FileEntry]:
    """Build entries from relative paths; a trailing ``/`` marks a directory.

    Missing ancestor directories are added implicitly, as the scanner would
    report them.
    """
    found: dict[str, bool] = {}
    for raw in paths:
        is_dir = raw.endswith("/")
        rel = raw.rstrip("/")
        parts = rel.split("/")
        for i in range(1, len(parts)):
            found.setdefault("/".join(parts[:i]), True)
        found[rel] = is_dir or found.get(rel, False)
    return [
        FileEntry(
            path=f"/repo/{rel}",
            relative_path=rel,
            is_directory=is_dir,
            is_symlink=False,
            depth=rel.count("/") + 1,
        )
        for rel, is_dir in sorted(found.items())
    ]


@pytest.fixture()
def make_entries() -> Callable[..., list[FileEntry]]:
    """Factory for in-memory entry lists: ``make_entries("src/", "src/a.ts")``."""
    return _entries


def _write_tree(root: Path, *paths: str) -> Path:
    for raw in paths:
        target = root / raw.rstrip("/")
        if raw.endswith("/"):
            target.mkdir(parents=True, exist_ok=True)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text("")
    return root


@pytest.fixture()
def write_tree() -> Callable[..., Path]:
    """Factory creating files (and ``dir/`` entries) under a root directory."""
    return _write_tree


@pytest.fixture()
def tmp_project(tmp_path: Path) -> Path:
    """An empty project directory."""
    project = tmp_path / "proj"
    project.mkdir()
    return project
