"""deskcache package initialization."""

from __future__ import annotations

from .api import (
    clear_cache,
    config_context,
    ingest,
    list_entries,
    lookup,
    refresh,
    set_config_json,
    set_data_dir,
)
from .cache import CacheEntry
from .errors import DeskcacheError

__all__ = [
    "__version__",
    "CacheEntry",
    "DeskcacheError",
    "clear_cache",
    "config_context",
    "get_version",
    "ingest",
    "list_entries",
    "lookup",
    "refresh",
    "set_config_json",
    "set_data_dir",
]

__version__ = "0.1.0"


def get_version() -> str:
    """Return the current package version."""
    return __version__
