"""Public Python API for deskcache."""

from __future__ import annotations

from collections.abc import Mapping
from contextlib import ExitStack, contextmanager
import dataclasses
from pathlib import Path
from typing import Sequence

from .backend import ProgressReporter, QueryBackend, Role
from .cache import CacheEntry, cache_dir_context, set_cache_dir
from .config import (
    Config,
    config_dir_context,
    config_from_json,
    load_config,
    resolve_database_path,
    set_config_dir,
)
from .errors import DeskcacheError
from .packages import Package, PackageInfo
from .services.backend_service import create_backend
from .services.cache_service import clear_entries, list_entries as _list_entries, lookup_entry
from .services.plugin_service import DesktopScanPlugin, Transaction
from .services.reconcile_service import ReconcileResult
from .text import Messages
from .utils import resolve_directory

_RUNTIME_CONFIG: Config | None = None


@contextmanager
def _data_dir_context(
    data_dir: Path | str | None,
    *,
    config_dir: Path | str | None = None,
    cache_dir: Path | str | None = None,
):
    if data_dir is None and config_dir is None and cache_dir is None:
        yield
        return
    effective_config_dir = config_dir if config_dir is not None else data_dir
    effective_cache_dir = cache_dir if cache_dir is not None else data_dir
    with ExitStack() as stack:
        if effective_config_dir is not None:
            stack.enter_context(config_dir_context(effective_config_dir))
        if effective_cache_dir is not None:
            stack.enter_context(cache_dir_context(effective_cache_dir))
        yield


def set_data_dir(path: Path | str | None) -> None:
    """Set the base directory for config and cache data."""
    set_config_dir(path)
    set_cache_dir(path)


def set_config_json(
    payload: Mapping[str, object] | str | None, *, replace: bool = False
) -> None:
    """Set in-memory config for API calls from a JSON string or mapping."""
    global _RUNTIME_CONFIG
    if payload is None:
        _RUNTIME_CONFIG = None
        return
    base = None if replace else (_RUNTIME_CONFIG or load_config())
    try:
        _RUNTIME_CONFIG = config_from_json(payload, base=base)
    except ValueError as exc:
        raise DeskcacheError(str(exc)) from exc


@contextmanager
def config_context(
    payload: Mapping[str, object] | str | None,
    *,
    replace: bool = False,
):
    """Apply an in-memory config for the duration of the block."""
    global _RUNTIME_CONFIG
    previous = _RUNTIME_CONFIG
    set_config_json(payload, replace=replace)
    try:
        yield _RUNTIME_CONFIG
    finally:
        _RUNTIME_CONFIG = previous


def refresh(
    *,
    application_dir: Path | str | None = None,
    backend: QueryBackend | None = None,
    progress: ProgressReporter | None = None,
    data_dir: Path | str | None = None,
    use_config: bool = True,
) -> ReconcileResult:
    """Validate every cached launcher and add the untracked ones."""

    with _data_dir_context(data_dir):
        config = _resolve_config(use_config)
        if application_dir is not None:
            try:
                directory = resolve_directory(application_dir)
            except (FileNotFoundError, NotADirectoryError) as exc:
                raise DeskcacheError(str(exc)) from exc
            config = dataclasses.replace(config, application_dir=str(directory))
        return _run_transaction(config, Role.REFRESH_CACHE, backend, (), progress)


def ingest(
    packages: Sequence[Package | str],
    *,
    backend: QueryBackend | None = None,
    progress: ProgressReporter | None = None,
    data_dir: Path | str | None = None,
    use_config: bool = True,
) -> ReconcileResult:
    """Record the launchers of *packages*.

    Plain strings are package names or ids and are treated as just installed;
    `Package` values keep their own disposition.
    """

    if not packages:
        raise DeskcacheError(Messages.ERROR_NO_PACKAGES)
    items = tuple(_coerce_package(value) for value in packages)
    with _data_dir_context(data_dir):
        config = _resolve_config(use_config)
        return _run_transaction(config, Role.INSTALL_PACKAGES, backend, items, progress)


def lookup(
    path: Path | str,
    *,
    data_dir: Path | str | None = None,
    use_config: bool = True,
) -> CacheEntry | None:
    """Return the cached row for the launcher at *path*."""

    if not Path(path).is_absolute():
        raise DeskcacheError(Messages.ERROR_PATH_NOT_ABSOLUTE.format(path=path))
    with _data_dir_context(data_dir):
        config = _resolve_config(use_config)
        return lookup_entry(resolve_database_path(config), path)


def list_entries(
    *,
    owner: str | None = None,
    data_dir: Path | str | None = None,
    use_config: bool = True,
) -> list[CacheEntry]:
    """Return cached rows, optionally only those owned by *owner*."""

    with _data_dir_context(data_dir):
        config = _resolve_config(use_config)
        return _list_entries(resolve_database_path(config), owner)


def clear_cache(
    *,
    data_dir: Path | str | None = None,
    use_config: bool = True,
) -> int:
    """Delete every cached row, returning how many were removed."""

    with _data_dir_context(data_dir):
        config = _resolve_config(use_config)
        return clear_entries(resolve_database_path(config))


def _resolve_config(use_config: bool) -> Config:
    if use_config and _RUNTIME_CONFIG is not None:
        return _RUNTIME_CONFIG
    return load_config() if use_config else Config()


def _coerce_package(value: Package | str) -> Package:
    if isinstance(value, Package):
        return value
    try:
        return Package.from_id(str(value).strip(), PackageInfo.INSTALLING)
    except ValueError as exc:
        raise DeskcacheError(str(exc)) from exc


def _run_transaction(
    config: Config,
    role: Role,
    backend: QueryBackend | None,
    packages: Sequence[Package],
    progress: ProgressReporter | None,
) -> ReconcileResult:
    if not config.scan_desktop_files:
        raise DeskcacheError(Messages.ERROR_CACHE_DISABLED)
    query_backend = (
        backend
        if backend is not None
        else create_backend(config.provider, timeout=config.effective_timeout)
    )
    plugin = DesktopScanPlugin()
    if not plugin.initialize(config):
        raise DeskcacheError(
            Messages.ERROR_STORE_UNAVAILABLE.format(
                path=resolve_database_path(config), reason=plugin.error
            )
        )
    transaction = Transaction(role=role, backend=query_backend, packages=packages)
    if progress is not None:
        transaction.progress = progress
    try:
        return plugin.finished(transaction)
    finally:
        plugin.destroy()
