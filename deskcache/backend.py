"""Contracts between deskcache and the package query service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol, Sequence, Union

from .packages import Package

logger = logging.getLogger(__name__)

PERCENTAGE_INDETERMINATE = 101


class Role(str, Enum):
    REFRESH_CACHE = "refresh-cache"
    INSTALL_PACKAGES = "install-packages"
    SEARCH_FILE = "search-file"
    GET_FILES = "get-files"


class ExitStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Status(str, Enum):
    SCAN_APPLICATIONS = "scan-applications"
    GENERATE_PACKAGE_LIST = "generate-package-list"
    FINISHED = "finished"


@dataclass(frozen=True, slots=True)
class PackageEvent:
    """A package matched by a file search."""

    package: Package


@dataclass(frozen=True, slots=True)
class FilesEvent:
    """The file list of one package."""

    package_id: str
    files: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class FinishedEvent:
    """Terminal event of every query."""

    status: ExitStatus = ExitStatus.SUCCESS


QueryEvent = Union[PackageEvent, FilesEvent, FinishedEvent]
EventSink = Callable[[QueryEvent], None]


class QueryBackend(Protocol):
    """Package query service.

    Each query emits its result events through *emit* followed by exactly
    one FinishedEvent. Events may be emitted from any thread, before or
    after the call returns.
    """

    name: str

    def is_implemented(self, role: Role) -> bool:
        """Return True if the backend supports *role*."""
        raise NotImplementedError  # pragma: no cover

    def search_files(
        self,
        paths: Sequence[str],
        *,
        installed_only: bool,
        emit: EventSink,
    ) -> None:
        """Emit a PackageEvent for every package owning one of *paths*."""
        raise NotImplementedError  # pragma: no cover

    def get_files(self, package_ids: Sequence[str], *, emit: EventSink) -> None:
        """Emit a FilesEvent for every package in *package_ids*."""
        raise NotImplementedError  # pragma: no cover


class ProgressReporter(Protocol):
    def set_status(self, status: Status) -> None:
        raise NotImplementedError  # pragma: no cover

    def set_percentage(self, percentage: int) -> None:
        raise NotImplementedError  # pragma: no cover


class NullProgress:
    """Progress reporter that only logs."""

    def set_status(self, status: Status) -> None:
        logger.debug("status: %s", status.value)

    def set_percentage(self, percentage: int) -> None:
        return None
