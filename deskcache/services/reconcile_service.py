"""Rescan and ingestion workflows that keep the launcher cache consistent."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

from .query_service import QueryStatus
from .resolver_service import OwnershipResolver
from ..backend import NullProgress, PERCENTAGE_INDETERMINATE, ProgressReporter, Role, Status
from ..cache import CacheEntry, CacheStore
from ..desktop import VisibilityEvaluator, evaluate_visibility
from ..errors import DesktopEntryError
from ..packages import NEWLY_DEPLOYED, Package
from ..utils import compute_fingerprint, is_launcher_file, walk_launcher_files

logger = logging.getLogger(__name__)


class ReconcileStatus(str, Enum):
    COMPLETED = "completed"
    UNSUPPORTED = "unsupported"
    NOTHING_TO_DO = "nothing_to_do"
    DISABLED = "disabled"
    IGNORED = "ignored"
    FAILED = "failed"


class VisitedSet:
    """Paths confirmed or rewritten during the current rescan."""

    def __init__(self) -> None:
        self._paths: set[str] = set()

    def mark(self, path: str) -> None:
        self._paths.add(path)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._paths))


@dataclass(slots=True)
class ReconcileResult:
    status: ReconcileStatus
    validated: int = 0
    updated: int = 0
    removed: int = 0
    added: int = 0
    skipped: int = 0
    packages: int = 0
    query_status: QueryStatus = QueryStatus.SUCCESS
    visited: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.updated or self.removed or self.added)


@dataclass
class ReconcileContext:
    """Everything one reconciliation pass works against."""

    store: CacheStore
    resolver: OwnershipResolver
    application_dir: Path
    evaluator: VisibilityEvaluator = evaluate_visibility
    progress: ProgressReporter = field(default_factory=NullProgress)

    def supports(self, role: Role) -> bool:
        return bool(self.resolver.backend.is_implemented(role))


def rescan(context: ReconcileContext) -> ReconcileResult:
    """Validate every cached row, then add launchers the cache does not know.

    Rows whose file vanished are deleted, rows whose content changed are
    re-resolved and rewritten, and files found under the application
    directory that were not confirmed by the validation pass are resolved
    and added. Files whose owner cannot be resolved stay untracked.
    """

    if not context.supports(Role.SEARCH_FILE):
        logger.debug("backend %s cannot search files", context.resolver.backend.name)
        return ReconcileResult(status=ReconcileStatus.UNSUPPORTED)

    result = ReconcileResult(status=ReconcileStatus.COMPLETED)
    visited = VisitedSet()
    progress = context.progress

    progress.set_status(Status.SCAN_APPLICATIONS)
    progress.set_percentage(PERCENTAGE_INDETERMINATE)
    context.store.for_each(lambda entry: _validate_entry(context, entry, visited, result))

    candidates = walk_launcher_files(context.application_dir, visited)
    result.visited = len(visited)
    logger.debug("%i launcher(s) not present in the cache", len(candidates))

    progress.set_status(Status.GENERATE_PACKAGE_LIST)
    total = len(candidates)
    for index, candidate in enumerate(candidates):
        progress.set_percentage(index * 100 // total)
        path = str(candidate)
        fingerprint = compute_fingerprint(path)
        if fingerprint is None:
            # removed between the walk and now
            result.skipped += 1
            continue
        if _add_launcher(context, path, fingerprint, result):
            result.added += 1
        else:
            result.skipped += 1

    progress.set_percentage(100)
    progress.set_status(Status.FINISHED)
    return result


def ingest(context: ReconcileContext, packages: Iterable[Package]) -> ReconcileResult:
    """Store the launchers shipped by packages that were just installed or updated."""

    if not context.supports(Role.GET_FILES):
        logger.debug("backend %s cannot list package files", context.resolver.backend.name)
        return ReconcileResult(status=ReconcileStatus.UNSUPPORTED)

    deployed = [package.as_installed() for package in packages if package.info in NEWLY_DEPLOYED]
    if not deployed:
        logger.debug("no packages installed or updated, nothing to ingest")
        return ReconcileResult(status=ReconcileStatus.NOTHING_TO_DO)

    result = ReconcileResult(status=ReconcileStatus.COMPLETED, packages=len(deployed))
    context.progress.set_status(Status.GENERATE_PACKAGE_LIST)
    context.progress.set_percentage(PERCENTAGE_INDETERMINATE)

    manifest = context.resolver.files_for_packages([package.package_id for package in deployed])
    result.query_status = manifest.query_status
    if manifest.query_status in {QueryStatus.TIMED_OUT, QueryStatus.CANCELLED}:
        result.status = ReconcileStatus.FAILED

    for path, owner in manifest.files:
        if not is_launcher_file(path) or not Path(path).exists():
            continue
        fingerprint = compute_fingerprint(path)
        if fingerprint is None:
            result.skipped += 1
            continue
        visible = _evaluate(context, path)
        if visible is None:
            result.skipped += 1
            continue
        if _store_launcher(context, path, owner, visible, fingerprint):
            result.added += 1
        else:
            result.skipped += 1

    context.progress.set_percentage(100)
    context.progress.set_status(Status.FINISHED)
    return result


def _validate_entry(
    context: ReconcileContext,
    entry: CacheEntry,
    visited: VisitedSet,
    result: ReconcileResult,
) -> None:
    if not entry.path or not entry.fingerprint:
        logger.warning("no filename or fingerprint, skipping row")
        result.skipped += 1
        return

    fingerprint = compute_fingerprint(entry.path)
    if fingerprint is None:
        logger.debug("remove of %s as no longer found", entry.path)
        if context.store.remove_by_path(entry.path):
            result.removed += 1
        return

    visited.mark(entry.path)
    if fingerprint == entry.fingerprint:
        result.validated += 1
        return

    logger.debug("%s has different fingerprint, re-adding", entry.path)
    if _add_launcher(context, entry.path, fingerprint, result):
        result.updated += 1
    else:
        result.skipped += 1


def _evaluate(context: ReconcileContext, path: str) -> bool | None:
    try:
        return bool(context.evaluator(Path(path)))
    except DesktopEntryError as exc:
        logger.warning("could not load desktop file %s: %s", path, exc)
        return None


def _add_launcher(
    context: ReconcileContext,
    path: str,
    fingerprint: str,
    result: ReconcileResult,
) -> bool:
    visible = _evaluate(context, path)
    if visible is None:
        return False
    resolved = context.resolver.resolve_owner([path])
    if resolved.query_status != QueryStatus.SUCCESS:
        result.query_status = resolved.query_status
    if not resolved.ok:
        logger.debug("failed to resolve owner of %s (%s)", path, resolved.status.value)
        return False
    return _store_launcher(context, path, resolved.package.name, visible, fingerprint)


def _store_launcher(
    context: ReconcileContext,
    path: str,
    owner: str,
    visible: bool,
    fingerprint: str,
) -> bool:
    logger.debug("adding filename %s, owner %s, show %i", path, owner, int(visible))
    return context.store.upsert(
        CacheEntry(path=path, owner=owner, visible=visible, fingerprint=fingerprint)
    )
