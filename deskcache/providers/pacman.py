"""Arch Linux package backend built on ``pacman -Q``."""

from __future__ import annotations

import re
from typing import Iterator, Sequence

from .command import CommandBackend
from ..packages import INSTALLED_DATA, Package, PackageInfo

_OWNED_BY = re.compile(r" is owned by (?P<name>\S+) (?P<version>\S+)$")


class PacmanBackend(CommandBackend):
    name = "pacman"
    executable = "pacman"

    def search_command(self, paths: Sequence[str]) -> list[str]:
        return [self.executable, "-Qo", *paths]

    def files_command(self, name: str, arch: str) -> list[str]:
        return [self.executable, "-Qlq", name]

    def parse_search(self, stdout: str) -> Iterator[Package]:
        for line in stdout.splitlines():
            match = _OWNED_BY.search(line.strip())
            if match is None:
                continue
            yield Package(
                name=match.group("name"),
                version=match.group("version"),
                data=INSTALLED_DATA,
                info=PackageInfo.INSTALLED,
            )

    def parse_files(self, stdout: str) -> Iterator[str]:
        for path in super().parse_files(stdout):
            # directories are listed with a trailing slash
            if not path.endswith("/"):
                yield path
