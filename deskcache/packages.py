"""Package identities as reported by package query backends."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

PACKAGE_ID_SEPARATOR = ";"
INSTALLED_DATA = "installed"


class PackageInfo(str, Enum):
    """Disposition of a package within a finished operation."""

    INSTALLED = "installed"
    AVAILABLE = "available"
    INSTALLING = "installing"
    UPDATING = "updating"
    REMOVING = "removing"
    DOWNGRADING = "downgrading"
    REINSTALLING = "reinstalling"
    UNKNOWN = "unknown"


# packages whose files were just put on disk
NEWLY_DEPLOYED: frozenset[PackageInfo] = frozenset(
    {PackageInfo.INSTALLING, PackageInfo.UPDATING}
)


@dataclass(frozen=True, slots=True)
class Package:
    name: str
    version: str = ""
    arch: str = ""
    data: str = ""
    info: PackageInfo = PackageInfo.UNKNOWN

    @property
    def package_id(self) -> str:
        return package_id_build(self.name, self.version, self.arch, self.data)

    @classmethod
    def from_id(cls, package_id: str, info: PackageInfo = PackageInfo.UNKNOWN) -> "Package":
        name, version, arch, data = package_id_split(package_id)
        return cls(name=name, version=version, arch=arch, data=data, info=info)

    def as_installed(self) -> "Package":
        """Return a copy whose id carries the ``installed`` data field."""
        return Package(
            name=self.name,
            version=self.version,
            arch=self.arch,
            data=INSTALLED_DATA,
            info=self.info,
        )


def package_id_build(name: str, version: str = "", arch: str = "", data: str = "") -> str:
    """Return the ``name;version;arch;data`` id for a package."""
    if not name:
        raise ValueError("Package name must not be empty")
    return PACKAGE_ID_SEPARATOR.join((name, version or "", arch or "", data or ""))


def package_id_split(package_id: str) -> tuple[str, str, str, str]:
    """Split a package id into ``(name, version, arch, data)``.

    A bare package name is accepted and yields empty version, arch and data.
    """

    parts = package_id.split(PACKAGE_ID_SEPARATOR)
    if len(parts) == 1:
        parts = [parts[0], "", "", ""]
    if len(parts) != 4 or not parts[0]:
        raise ValueError(f"Invalid package id: {package_id!r}")
    return parts[0], parts[1], parts[2], parts[3]
