"""Host hooks that run the reconciliation workflows when transactions finish."""

from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .query_service import QueryChannel
from .reconcile_service import (
    ReconcileContext,
    ReconcileResult,
    ReconcileStatus,
    ingest,
    rescan,
)
from .resolver_service import OwnershipResolver
from ..backend import NullProgress, ProgressReporter, QueryBackend, Role
from ..cache import CacheStore
from ..config import Config, load_config, resolve_database_path
from ..desktop import VisibilityEvaluator, evaluate_visibility
from ..errors import DeskcacheError, QueryBusyError, StoreUnavailableError
from ..packages import Package

logger = logging.getLogger(__name__)


@dataclass
class Transaction:
    """A finished package operation as seen by the plugin."""

    role: Role
    backend: QueryBackend
    packages: Sequence[Package] = ()
    progress: ProgressReporter = field(default_factory=NullProgress)


class DesktopScanPlugin:
    """Keeps the launcher cache in step with refresh and install transactions.

    A plugin whose configuration disables scanning, or whose database cannot
    be opened, stays inert: every `finished` call returns a disabled result.
    """

    description = "Scans desktop files on refresh and adds them to a database"

    def __init__(
        self,
        *,
        evaluator: VisibilityEvaluator = evaluate_visibility,
        channel: QueryChannel | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        self.evaluator = evaluator
        self.cancel = cancel
        self._channel = channel
        self._store: CacheStore | None = None
        self._application_dir: Path | None = None
        self.error: str | None = None

    @property
    def enabled(self) -> bool:
        return self._store is not None

    @property
    def store(self) -> CacheStore | None:
        return self._store

    def initialize(self, config: Config | None = None) -> bool:
        """Open the cache database unless scanning is disabled."""

        config = config if config is not None else load_config()
        self.error = None
        if self._store is not None:
            self._store.close()
            self._store = None
        if not config.scan_desktop_files:
            logger.debug("desktop file scanning is disabled")
            return False
        try:
            self._store = CacheStore.open(resolve_database_path(config))
        except StoreUnavailableError as exc:
            logger.warning("%s", exc)
            self._store = None
            self.error = str(exc)
            return False
        if self._channel is None:
            self._channel = QueryChannel(
                timeout=config.effective_timeout,
                queue_size=config.queue_size,
            )
        self._application_dir = Path(config.application_dir).expanduser()
        return True

    def destroy(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None
        if self._channel is not None:
            self._channel.close()
            self._channel = None
        self._application_dir = None

    def finished(self, transaction: Transaction) -> ReconcileResult:
        """Run the workflow matching *transaction*'s role.

        Failures are logged and reported in the result; they never reach the
        caller, so a failed scan cannot fail the transaction itself.
        """

        if self._store is None or self._channel is None:
            return ReconcileResult(status=ReconcileStatus.DISABLED)
        if transaction.role not in {Role.REFRESH_CACHE, Role.INSTALL_PACKAGES}:
            return ReconcileResult(status=ReconcileStatus.IGNORED)

        context = ReconcileContext(
            store=self._store,
            resolver=OwnershipResolver(
                transaction.backend, self._channel, cancel=self.cancel
            ),
            application_dir=self._application_dir,
            evaluator=self.evaluator,
            progress=transaction.progress,
        )
        try:
            if transaction.role == Role.REFRESH_CACHE:
                return rescan(context)
            return ingest(context, transaction.packages)
        except QueryBusyError:
            raise
        except (DeskcacheError, sqlite3.Error) as exc:
            logger.warning("desktop file scan failed: %s", exc)
            return ReconcileResult(status=ReconcileStatus.FAILED)
