"""Launcher ownership cache backed by SQLite."""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator

from .errors import StoreUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path(os.path.expanduser("~")) / ".deskcache"
CACHE_DIR = DEFAULT_CACHE_DIR
_CACHE_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "deskcache_cache_dir_override",
    default=None,
)
DB_FILENAME = "desktop-files.db"
TABLE_NAME = "cache"


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """One tracked launcher file."""

    path: str
    owner: str
    visible: bool
    fingerprint: str


def _resolve_cache_dir() -> Path:
    override = _CACHE_DIR_OVERRIDE.get()
    return override if override is not None else CACHE_DIR


@contextmanager
def cache_dir_context(path: Path | str | None):
    """Temporarily override the cache directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CACHE_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CACHE_DIR_OVERRIDE.reset(token)


def ensure_cache_dir() -> Path:
    cache_dir = _resolve_cache_dir()
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def set_cache_dir(path: Path | str | None) -> None:
    global CACHE_DIR
    if path is None:
        CACHE_DIR = DEFAULT_CACHE_DIR
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    CACHE_DIR = dir_path


def cache_db_path() -> Path:
    """Return the absolute path to the default launcher cache database."""

    cache_dir = ensure_cache_dir()
    return cache_dir / DB_FILENAME


def _connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path, isolation_level=None)
    conn.row_factory = sqlite3.Row
    # a crash may lose the latest write, never the table structure
    conn.execute("PRAGMA synchronous = OFF;")
    return conn


def _table_exists(conn: sqlite3.Connection, table: str) -> bool:
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
        (table,),
    ).fetchone()
    return row is not None


def _ensure_schema(conn: sqlite3.Connection) -> None:
    if _table_exists(conn, TABLE_NAME):
        return
    conn.execute(
        """
        CREATE TABLE cache (
            path TEXT,
            package TEXT,
            show INTEGER,
            fingerprint TEXT
        )
        """
    )


def _row_to_entry(row: sqlite3.Row) -> CacheEntry:
    return CacheEntry(
        path=row["path"],
        owner=row["package"],
        visible=bool(row["show"]),
        fingerprint=row["fingerprint"],
    )


class CacheStore:
    """Point lookups, delete-then-insert upserts and full scans over the cache table."""

    def __init__(self, conn: sqlite3.Connection, db_path: Path) -> None:
        self._conn: sqlite3.Connection | None = conn
        self.db_path = db_path

    @classmethod
    def open(cls, db_path: Path | str | None = None) -> "CacheStore":
        """Open (or create) the cache database.

        Raises StoreUnavailableError when the file cannot be opened or the
        table cannot be created; callers treat that as "cache disabled".
        """

        path = Path(db_path) if db_path is not None else cache_db_path()
        existed = path.exists()
        logger.debug("trying to open database '%s'", path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            conn = _connect(path)
        except (OSError, sqlite3.Error) as exc:
            raise StoreUnavailableError(f"Can't open desktop database {path}: {exc}") from exc
        if not existed:
            logger.debug("creating database cache in %s", path)
        try:
            _ensure_schema(conn)
        except sqlite3.Error as exc:
            conn.close()
            raise StoreUnavailableError(f"Can't create cache table in {path}: {exc}") from exc
        return cls(conn, path)

    @property
    def closed(self) -> bool:
        return self._conn is None

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreUnavailableError(f"Cache store {self.db_path} is closed")
        return self._conn

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None

    def __enter__(self) -> "CacheStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def remove_by_path(self, path: str) -> bool:
        """Delete the row for *path*; a missing row is not an error."""

        conn = self._require_conn()
        try:
            conn.execute("DELETE FROM cache WHERE path = ?", (path,))
        except sqlite3.Error as exc:
            logger.warning("SQL error while removing %s: %s", path, exc)
            return False
        return True

    def upsert(self, entry: CacheEntry) -> bool:
        """Replace any row for ``entry.path`` with *entry*.

        The delete and the insert are two statements; a crash in between
        leaves the entry absent until the next rescan.
        """

        conn = self._require_conn()
        try:
            conn.execute("DELETE FROM cache WHERE path = ?", (entry.path,))
            conn.execute(
                "INSERT INTO cache (path, package, show, fingerprint) VALUES (?, ?, ?, ?)",
                (entry.path, entry.owner, 1 if entry.visible else 0, entry.fingerprint),
            )
        except sqlite3.Error as exc:
            logger.warning("SQL error while storing %s: %s", entry.path, exc)
            return False
        return True

    def get(self, path: str) -> CacheEntry | None:
        conn = self._require_conn()
        row = conn.execute(
            "SELECT path, package, show, fingerprint FROM cache WHERE path = ? LIMIT 1",
            (path,),
        ).fetchone()
        return _row_to_entry(row) if row is not None else None

    def entries(self) -> list[CacheEntry]:
        """Return every row in storage order."""

        conn = self._require_conn()
        rows = conn.execute(
            "SELECT path, package, show, fingerprint FROM cache ORDER BY rowid"
        ).fetchall()
        return [_row_to_entry(row) for row in rows]

    def entries_for_owner(self, owner: str) -> list[CacheEntry]:
        conn = self._require_conn()
        rows = conn.execute(
            "SELECT path, package, show, fingerprint FROM cache WHERE package = ? ORDER BY rowid",
            (owner,),
        ).fetchall()
        return [_row_to_entry(row) for row in rows]

    def __iter__(self) -> Iterator[CacheEntry]:
        return iter(self.entries())

    def for_each(self, callback: Callable[[CacheEntry], None]) -> int:
        """Call *callback* for every row, returning the number of rows visited.

        The row set is buffered first so *callback* may delete or upsert rows
        without rows being skipped or visited twice.
        """

        snapshot = self.entries()
        for entry in snapshot:
            callback(entry)
        return len(snapshot)

    def count(self) -> int:
        conn = self._require_conn()
        row = conn.execute("SELECT COUNT(*) AS total FROM cache").fetchone()
        return int(row["total"] if row is not None else 0)

    def clear(self) -> int:
        """Remove every row, returning how many were removed."""

        conn = self._require_conn()
        total = self.count()
        conn.execute("DELETE FROM cache")
        return total
