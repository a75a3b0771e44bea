"""Desktop launcher parsing and menu visibility rules."""

from __future__ import annotations

import os
import shlex
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from .errors import DesktopEntryError

DESKTOP_GROUP = "Desktop Entry"
APPLICATION_TYPE = "Application"
CURRENT_DESKTOP_ENV = "XDG_CURRENT_DESKTOP"

VisibilityEvaluator = Callable[[Path], bool]


@dataclass
class DesktopEntry:
    """Fields of a launcher's ``[Desktop Entry]`` group used for visibility."""

    file_path: str = ""
    type: str = ""
    name: str = ""
    exec_cmd: str = ""
    try_exec: str = ""
    no_display: bool = False
    hidden: bool = False
    only_show_in: list[str] = field(default_factory=list)
    not_show_in: list[str] = field(default_factory=list)


def _split_list(value: str) -> list[str]:
    return [item for item in value.split(";") if item]


def _parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def parse_desktop_file(path: Path | str) -> DesktopEntry:
    """Load *path* as an application launcher.

    The first group must be ``[Desktop Entry]`` with ``Type=Application``
    and a ``Name``. A ``TryExec`` binary, and the program named first in
    ``Exec``, must both be found on ``PATH``. Anything else raises
    DesktopEntryError, as does an unreadable file.
    """

    entry = DesktopEntry(file_path=str(path))
    first_group: str | None = None
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if line.startswith("[") and line.endswith("]"):
                    if first_group is not None:
                        break
                    first_group = line[1:-1]
                    if first_group != DESKTOP_GROUP:
                        raise DesktopEntryError(
                            f"{path} does not start with a [{DESKTOP_GROUP}] group"
                        )
                    continue
                if first_group is None or "=" not in line:
                    continue

                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()

                if key == "Type":
                    entry.type = value
                elif key == "Name":
                    entry.name = value
                elif key == "Exec":
                    entry.exec_cmd = value
                elif key == "TryExec":
                    entry.try_exec = value
                elif key == "NoDisplay":
                    entry.no_display = _parse_bool(value)
                elif key == "Hidden":
                    entry.hidden = _parse_bool(value)
                elif key == "OnlyShowIn":
                    entry.only_show_in = _split_list(value)
                elif key == "NotShowIn":
                    entry.not_show_in = _split_list(value)
    except OSError as exc:
        raise DesktopEntryError(f"could not load desktop file {path}: {exc}") from exc

    if first_group is None:
        raise DesktopEntryError(f"{path} has no [{DESKTOP_GROUP}] group")
    if not entry.type or not entry.name:
        raise DesktopEntryError(f"{path} is missing Type or Name")
    if entry.type != APPLICATION_TYPE:
        raise DesktopEntryError(f"{path} has Type={entry.type}, not {APPLICATION_TYPE}")
    _check_programs(entry)
    return entry


def _check_programs(entry: DesktopEntry) -> None:
    if entry.try_exec and shutil.which(entry.try_exec) is None:
        raise DesktopEntryError(
            f"{entry.file_path}: TryExec program {entry.try_exec} not found"
        )
    if not entry.exec_cmd:
        return
    try:
        argv = shlex.split(entry.exec_cmd)
    except ValueError as exc:
        raise DesktopEntryError(f"{entry.file_path}: cannot parse Exec: {exc}") from exc
    if not argv:
        return
    if shutil.which(argv[0]) is None:
        raise DesktopEntryError(f"{entry.file_path}: Exec program {argv[0]} not found")


def current_desktops() -> tuple[str, ...]:
    """Return the desktop names listed in ``XDG_CURRENT_DESKTOP``."""

    raw = os.environ.get(CURRENT_DESKTOP_ENV, "")
    return tuple(item for item in raw.split(":") if item)


def should_show(entry: DesktopEntry, desktops: Sequence[str] | None = None) -> bool:
    """Return True if *entry* belongs in application menus."""

    if entry.no_display or entry.hidden:
        return False
    active = tuple(desktops) if desktops is not None else current_desktops()
    if entry.only_show_in:
        if not any(name in entry.only_show_in for name in active):
            return False
    if entry.not_show_in:
        if any(name in entry.not_show_in for name in active):
            return False
    return True


def evaluate_visibility(path: Path | str) -> bool:
    """Default visibility evaluator: parse *path* and apply `should_show`."""

    return should_show(parse_desktop_file(path))
