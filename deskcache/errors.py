"""Exception types shared across deskcache."""

from __future__ import annotations


class DeskcacheError(RuntimeError):
    """Base class for deskcache failures."""


class StoreUnavailableError(DeskcacheError):
    """Raised when the cache database cannot be opened or created."""


class DesktopEntryError(DeskcacheError):
    """Raised when a launcher file cannot be parsed."""


class QueryBusyError(DeskcacheError):
    """Raised when a query is issued while another one is still waiting."""


class BackendUnavailableError(DeskcacheError):
    """Raised when no package query backend can be created."""
