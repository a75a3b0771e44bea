"""Logic helpers for the `deskcache config` command."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import (
    Config,
    load_config,
    set_application_dir,
    set_database_path,
    set_provider,
    set_query_timeout,
    set_scan_desktop_files,
)


@dataclass(slots=True)
class ConfigUpdateResult:
    enabled_set: bool = False
    application_dir_set: bool = False
    provider_set: bool = False
    timeout_set: bool = False
    database_set: bool = False
    database_cleared: bool = False

    @property
    def changed(self) -> bool:
        return any(
            (
                self.enabled_set,
                self.application_dir_set,
                self.provider_set,
                self.timeout_set,
                self.database_set,
                self.database_cleared,
            )
        )


def apply_config_updates(
    *,
    scan_desktop_files: bool | None = None,
    application_dir: str | None = None,
    provider: str | None = None,
    query_timeout: float | None = None,
    database_path: str | None = None,
    clear_database_path: bool = False,
) -> ConfigUpdateResult:
    """Apply config mutations and report which fields were updated."""

    result = ConfigUpdateResult()
    if scan_desktop_files is not None:
        set_scan_desktop_files(scan_desktop_files)
        result.enabled_set = True
    if application_dir is not None:
        set_application_dir(application_dir)
        result.application_dir_set = True
    if provider is not None:
        set_provider(provider)
        result.provider_set = True
    if query_timeout is not None:
        set_query_timeout(query_timeout)
        result.timeout_set = True
    if database_path is not None:
        set_database_path(database_path)
        result.database_set = True
    if clear_database_path:
        set_database_path(None)
        result.database_cleared = True
    return result


def get_config_snapshot() -> Config:
    """Return the current configuration dataclass."""

    return load_config()
