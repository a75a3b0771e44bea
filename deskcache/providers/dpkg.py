"""Debian package backend built on ``dpkg-query``."""

from __future__ import annotations

from typing import Iterator, Sequence

from .command import CommandBackend
from ..packages import INSTALLED_DATA, Package, PackageInfo

_DIVERSION_PREFIX = "diversion by "


class DpkgBackend(CommandBackend):
    name = "dpkg"
    executable = "dpkg-query"

    def search_command(self, paths: Sequence[str]) -> list[str]:
        return [self.executable, "-S", *paths]

    def files_command(self, name: str, arch: str) -> list[str]:
        target = f"{name}:{arch}" if arch else name
        return [self.executable, "-L", target]

    def parse_search(self, stdout: str) -> Iterator[Package]:
        """Parse ``pkg[:arch][, pkg[:arch]]: /path`` lines."""

        for line in stdout.splitlines():
            if not line.strip() or line.startswith(_DIVERSION_PREFIX):
                continue
            owners, sep, _path = line.partition(": ")
            if not sep:
                continue
            for owner in owners.split(","):
                name, _, arch = owner.strip().partition(":")
                if not name:
                    continue
                yield Package(
                    name=name,
                    arch=arch,
                    data=INSTALLED_DATA,
                    info=PackageInfo.INSTALLED,
                )
