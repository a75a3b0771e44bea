"""Global configuration management for deskcache."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from contextlib import contextmanager
from contextvars import ContextVar
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict

from .text import Messages

DEFAULT_CONFIG_DIR = Path(os.path.expanduser("~")) / ".deskcache"
CONFIG_DIR = DEFAULT_CONFIG_DIR
CONFIG_FILE = CONFIG_DIR / "config.json"
_CONFIG_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "deskcache_config_dir_override",
    default=None,
)
DEFAULT_APPLICATION_DIR = "/usr/share/applications"
DEFAULT_PROVIDER = "auto"
DEFAULT_QUERY_TIMEOUT = 300.0
DEFAULT_QUEUE_SIZE = 1024
SUPPORTED_PROVIDERS: tuple[str, ...] = (DEFAULT_PROVIDER, "dpkg", "rpm", "pacman")


@dataclass
class Config:
    scan_desktop_files: bool = True
    application_dir: str = DEFAULT_APPLICATION_DIR
    database_path: str | None = None
    provider: str = DEFAULT_PROVIDER
    query_timeout: float = DEFAULT_QUERY_TIMEOUT
    queue_size: int = DEFAULT_QUEUE_SIZE

    @property
    def effective_timeout(self) -> float | None:
        """Return the query timeout in seconds, or None to wait forever."""
        return self.query_timeout if self.query_timeout > 0 else None


def _resolve_config_dir() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    return override if override is not None else CONFIG_DIR


def _resolve_config_file() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    if override is not None:
        return override / "config.json"
    return CONFIG_FILE


@contextmanager
def config_dir_context(path: Path | str | None):
    """Temporarily override the config directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CONFIG_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CONFIG_DIR_OVERRIDE.reset(token)


def load_config() -> Config:
    config_file = _resolve_config_file()
    if not config_file.exists():
        return Config()
    raw = json.loads(config_file.read_text(encoding="utf-8"))
    provider = (raw.get("provider") or DEFAULT_PROVIDER).strip().lower()
    if provider not in SUPPORTED_PROVIDERS:
        provider = DEFAULT_PROVIDER
    queue_size = int(raw.get("queue_size", DEFAULT_QUEUE_SIZE))
    if queue_size < 1:
        queue_size = DEFAULT_QUEUE_SIZE
    return Config(
        scan_desktop_files=bool(raw.get("scan_desktop_files", True)),
        application_dir=raw.get("application_dir") or DEFAULT_APPLICATION_DIR,
        database_path=raw.get("database_path") or None,
        provider=provider,
        query_timeout=float(raw.get("query_timeout", DEFAULT_QUERY_TIMEOUT)),
        queue_size=queue_size,
    )


def save_config(config: Config) -> None:
    config_dir = _resolve_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    data: Dict[str, Any] = {}
    data["scan_desktop_files"] = bool(config.scan_desktop_files)
    if config.application_dir:
        data["application_dir"] = config.application_dir
    if config.database_path:
        data["database_path"] = config.database_path
    if config.provider:
        data["provider"] = config.provider
    data["query_timeout"] = config.query_timeout
    data["queue_size"] = config.queue_size
    config_file = _resolve_config_file()
    config_file.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def set_config_dir(path: Path | str | None) -> None:
    global CONFIG_DIR, CONFIG_FILE
    if path is None:
        CONFIG_DIR = DEFAULT_CONFIG_DIR
    else:
        dir_path = Path(path).expanduser().resolve()
        if dir_path.exists() and not dir_path.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {dir_path}")
        CONFIG_DIR = dir_path
    CONFIG_FILE = CONFIG_DIR / "config.json"


def config_from_json(
    payload: str | Mapping[str, object], *, base: Config | None = None
) -> Config:
    """Return a Config from a JSON string or mapping without saving it."""
    data = _coerce_config_payload(payload)
    config = Config() if base is None else replace(base)
    _apply_config_payload(config, data)
    return config


def update_config_from_json(
    payload: str | Mapping[str, object], *, replace: bool = False
) -> Config:
    """Update config from a JSON string or mapping and persist it."""
    base = None if replace else load_config()
    config = config_from_json(payload, base=base)
    save_config(config)
    return config


def set_scan_desktop_files(value: bool) -> None:
    config = load_config()
    config.scan_desktop_files = bool(value)
    save_config(config)


def set_application_dir(value: str) -> None:
    config = load_config()
    config.application_dir = value.strip() or DEFAULT_APPLICATION_DIR
    save_config(config)


def set_database_path(value: str | None) -> None:
    config = load_config()
    clean_value = (value or "").strip()
    config.database_path = clean_value or None
    save_config(config)


def set_provider(value: str) -> None:
    config = load_config()
    config.provider = normalize_provider(value)
    save_config(config)


def set_query_timeout(value: float) -> None:
    if value < 0:
        raise ValueError(Messages.ERROR_TIMEOUT_NEGATIVE)
    config = load_config()
    config.query_timeout = float(value)
    save_config(config)


def normalize_provider(value: str | None) -> str:
    normalized = (value or DEFAULT_PROVIDER).strip().lower() or DEFAULT_PROVIDER
    if normalized not in SUPPORTED_PROVIDERS:
        raise ValueError(
            Messages.ERROR_PROVIDER_INVALID.format(
                value=value, allowed=", ".join(SUPPORTED_PROVIDERS)
            )
        )
    return normalized


def resolve_database_path(config: Config) -> Path:
    """Return the cache database location for *config*."""

    if config.database_path:
        return Path(config.database_path).expanduser()
    from .cache import cache_db_path  # local import keeps config free of sqlite

    return cache_db_path()


def _coerce_config_payload(payload: str | Mapping[str, object]) -> Mapping[str, object]:
    if isinstance(payload, str):
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID) from exc
    elif isinstance(payload, Mapping):
        data = dict(payload)
    else:
        raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID)
    if not isinstance(data, Mapping):
        raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID)
    return data


def _apply_config_payload(config: Config, payload: Mapping[str, object]) -> None:
    if "scan_desktop_files" in payload:
        config.scan_desktop_files = _coerce_bool(
            payload["scan_desktop_files"], "scan_desktop_files"
        )
    if "application_dir" in payload:
        config.application_dir = _coerce_required_str(
            payload["application_dir"], "application_dir", DEFAULT_APPLICATION_DIR
        )
    if "database_path" in payload:
        config.database_path = _coerce_optional_str(
            payload["database_path"], "database_path"
        )
    if "provider" in payload:
        value = payload["provider"]
        if value is not None and not isinstance(value, str):
            raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field="provider"))
        config.provider = normalize_provider(value)
    if "query_timeout" in payload:
        timeout = _coerce_float(
            payload["query_timeout"], "query_timeout", DEFAULT_QUERY_TIMEOUT
        )
        if timeout < 0:
            raise ValueError(Messages.ERROR_TIMEOUT_NEGATIVE)
        config.query_timeout = timeout
    if "queue_size" in payload:
        queue_size = _coerce_int(payload["queue_size"], "queue_size", DEFAULT_QUEUE_SIZE)
        if queue_size < 1:
            raise ValueError(Messages.ERROR_QUEUE_SIZE_INVALID)
        config.queue_size = queue_size


def _coerce_optional_str(value: object, field: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        cleaned = value.strip()
        return cleaned or None
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_required_str(value: object, field: str, default: str) -> str:
    if value is None:
        return default
    if isinstance(value, str):
        cleaned = value.strip()
        return cleaned or default
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_int(value: object, field: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return default
        try:
            return int(cleaned)
        except ValueError as exc:
            raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field)) from exc
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_float(value: object, field: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return default
        try:
            return float(cleaned)
        except ValueError as exc:
            raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field)) from exc
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_bool(value: object, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        cleaned = value.strip().lower()
        if cleaned in {"true", "1", "yes", "on"}:
            return True
        if cleaned in {"false", "0", "no", "off"}:
            return False
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))
