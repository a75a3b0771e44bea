"""RPM package backend."""

from __future__ import annotations

from typing import Iterator, Sequence

from .command import CommandBackend, CommandOutput
from ..packages import PACKAGE_ID_SEPARATOR, Package, PackageInfo

QUERY_FORMAT = "%{NAME};%{VERSION}-%{RELEASE};%{ARCH};installed\\n"


class RpmBackend(CommandBackend):
    name = "rpm"
    executable = "rpm"

    def search_command(self, paths: Sequence[str]) -> list[str]:
        return [self.executable, "-qf", "--qf", QUERY_FORMAT, *paths]

    def files_command(self, name: str, arch: str) -> list[str]:
        target = f"{name}.{arch}" if arch else name
        return [self.executable, "-ql", target]

    def _failed(self, output: CommandOutput) -> bool:
        # rpm exits with the number of unowned files
        return output.returncode in {124, 127}

    def parse_search(self, stdout: str) -> Iterator[Package]:
        for line in stdout.splitlines():
            line = line.strip()
            # "file /x is not owned by any package" has no separator
            if line.count(PACKAGE_ID_SEPARATOR) != 3:
                continue
            try:
                yield Package.from_id(line, PackageInfo.INSTALLED)
            except ValueError:
                continue
