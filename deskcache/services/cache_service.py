"""Shared helpers for reading and clearing the launcher cache."""

from __future__ import annotations

from pathlib import Path

from ..cache import CacheEntry, CacheStore


def lookup_entry(db_path: Path | str | None, path: Path | str) -> CacheEntry | None:
    """Return the cached row for *path*, or None when absent or no database exists."""

    if db_path is not None and not Path(db_path).exists():
        return None
    with CacheStore.open(db_path) as store:
        return store.get(str(path))


def list_entries(db_path: Path | str | None, owner: str | None = None) -> list[CacheEntry]:
    if db_path is not None and not Path(db_path).exists():
        return []
    with CacheStore.open(db_path) as store:
        if owner:
            return store.entries_for_owner(owner)
        return store.entries()


def clear_entries(db_path: Path | str | None) -> int:
    """Delete every cached row, returning how many were removed."""

    if db_path is not None and not Path(db_path).exists():
        return 0
    with CacheStore.open(db_path) as store:
        return store.clear()
