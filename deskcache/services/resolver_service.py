"""Ownership resolution through the package query backend."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from ..backend import FilesEvent, PackageEvent, QueryBackend
from ..packages import Package, package_id_split
from .query_service import QueryChannel, QueryStatus

logger = logging.getLogger(__name__)


class ResolveStatus(str, Enum):
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"
    QUERY_FAILED = "query_failed"


@dataclass(slots=True)
class ResolveResult:
    status: ResolveStatus
    package: Package | None = None
    matches: int = 0
    query_status: QueryStatus = QueryStatus.SUCCESS

    @property
    def ok(self) -> bool:
        return self.status == ResolveStatus.RESOLVED and self.package is not None


@dataclass(slots=True)
class PackageFiles:
    query_status: QueryStatus
    files: list[tuple[str, str]] = field(default_factory=list)


class OwnershipResolver:
    """Answer "which installed package owns these files?" one query at a time."""

    def __init__(
        self,
        backend: QueryBackend,
        channel: QueryChannel | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        self.backend = backend
        self.channel = channel if channel is not None else QueryChannel()
        self.cancel = cancel

    def resolve_owner(self, paths: Sequence[str]) -> ResolveResult:
        """Return the single installed package owning *paths*.

        Anything other than exactly one match is a failure; ambiguous
        ownership is never guessed.
        """

        file_list = list(paths)
        result = self.channel.request(
            lambda emit: self.backend.search_files(
                file_list, installed_only=True, emit=emit
            ),
            cancel=self.cancel,
        )
        if not result.completed:
            return ResolveResult(
                status=ResolveStatus.QUERY_FAILED, query_status=result.status
            )
        if not result.ok:
            logger.warning(
                "search-file failed with exit code: %s", result.status.value
            )

        packages = [event.package for event in result.events if isinstance(event, PackageEvent)]
        if len(packages) != 1:
            logger.warning("not correct size, %i", len(packages))
            status = ResolveStatus.NOT_FOUND if not packages else ResolveStatus.AMBIGUOUS
            return ResolveResult(
                status=status, matches=len(packages), query_status=result.status
            )
        return ResolveResult(
            status=ResolveStatus.RESOLVED,
            package=packages[0],
            matches=1,
            query_status=result.status,
        )

    def files_for_packages(self, package_ids: Sequence[str]) -> PackageFiles:
        """Return ``(path, owner name)`` pairs for every file of *package_ids*."""

        id_list = list(package_ids)
        result = self.channel.request(
            lambda emit: self.backend.get_files(id_list, emit=emit),
            cancel=self.cancel,
        )
        if not result.ok:
            logger.warning("get-files failed with exit code: %s", result.status.value)

        files: list[tuple[str, str]] = []
        for event in result.events:
            if not isinstance(event, FilesEvent):
                continue
            try:
                owner = package_id_split(event.package_id)[0]
            except ValueError:
                logger.warning("ignoring files for invalid package id %r", event.package_id)
                continue
            files.extend((path, owner) for path in event.files)
        return PackageFiles(query_status=result.status, files=files)
