"""Utility helpers for filesystem access and path handling."""

from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path
from typing import Container, Iterator, List

logger = logging.getLogger(__name__)

LAUNCHER_SUFFIX = ".desktop"
_READ_CHUNK_SIZE = 64 * 1024


def resolve_directory(path: Path | str) -> Path:
    """Resolve and validate a user supplied directory path."""
    dir_path = Path(path).expanduser().resolve()
    if not dir_path.exists():
        raise FileNotFoundError(f"Directory does not exist: {dir_path}")
    if not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    return dir_path


def is_launcher_file(path: Path | str) -> bool:
    """Return True if *path* names a desktop launcher."""
    return os.fspath(path).endswith(LAUNCHER_SUFFIX)


def compute_fingerprint(path: Path | str) -> str | None:
    """Return the MD5 hex digest of *path*, or None if it cannot be read.

    A missing file and an unreadable file both yield None; callers use that
    as the signal that the cached row is stale.
    """

    file_path = Path(path)
    if not file_path.exists():
        logger.debug("file %s does not exist", file_path)
        return None
    digest = hashlib.md5(usedforsecurity=False)
    try:
        with file_path.open("rb") as handle:
            for block in iter(lambda: handle.read(_READ_CHUNK_SIZE), b""):
                digest.update(block)
    except OSError as exc:
        logger.warning("failed to open file %s: %s", file_path, exc)
        return None
    return digest.hexdigest()


def walk_launcher_files(root: Path | str, visited: Container[str]) -> List[Path]:
    """Collect launcher files under *root* whose path is not in *visited*.

    Subdirectories are searched depth first; directories that cannot be read
    are skipped with a warning.
    """

    return list(iter_launcher_files(root, visited))


def iter_launcher_files(root: Path | str, visited: Container[str]) -> Iterator[Path]:
    """Lazily yield the launcher files `walk_launcher_files` collects."""

    directory = Path(root)
    try:
        with os.scandir(directory) as iterator:
            children = sorted(iterator, key=lambda item: item.name)
    except OSError as exc:
        logger.warning("failed to open directory %s: %s", directory, exc)
        return

    for child in children:
        path = Path(child.path)
        try:
            is_dir = child.is_dir(follow_symlinks=False)
        except OSError:
            is_dir = False
        if is_dir:
            yield from iter_launcher_files(path, visited)
            continue
        if not is_launcher_file(child.name):
            continue
        if str(path) in visited:
            continue
        logger.debug("add of %s as not present in db", path)
        yield path
