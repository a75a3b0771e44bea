from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence

import pytest

from deskcache.backend import (
    ExitStatus,
    FilesEvent,
    FinishedEvent,
    PackageEvent,
    Role,
)
from deskcache.packages import Package, PackageInfo


class FakeBackend:
    """In-memory package query service answering from fixed tables."""

    name = "fake"

    def __init__(
        self,
        owners: Mapping[str, Sequence[str]] | None = None,
        manifests: Mapping[str, Sequence[str]] | None = None,
        *,
        roles: Sequence[Role] = (Role.SEARCH_FILE, Role.GET_FILES),
        status: ExitStatus = ExitStatus.SUCCESS,
    ) -> None:
        self.owners = {path: list(names) for path, names in (owners or {}).items()}
        self.manifests = {name: list(paths) for name, paths in (manifests or {}).items()}
        self.roles = set(roles)
        self.status = status
        self.searches: list[list[str]] = []
        self.file_requests: list[list[str]] = []

    def is_implemented(self, role: Role) -> bool:
        return role in self.roles

    def search_files(self, paths, *, installed_only, emit) -> None:
        self.searches.append(list(paths))
        for path in paths:
            for name in self.owners.get(str(path), []):
                emit(
                    PackageEvent(
                        package=Package(
                            name=name,
                            version="1.0",
                            arch="x86_64",
                            data="installed",
                            info=PackageInfo.INSTALLED,
                        )
                    )
                )
        emit(FinishedEvent(status=self.status))

    def get_files(self, package_ids, *, emit) -> None:
        self.file_requests.append(list(package_ids))
        for package_id in package_ids:
            name = package_id.split(";")[0]
            emit(FilesEvent(package_id=package_id, files=tuple(self.manifests.get(name, ()))))
        emit(FinishedEvent(status=self.status))


class RecordingProgress:
    def __init__(self) -> None:
        self.statuses = []
        self.percentages: list[int] = []

    def set_status(self, status) -> None:
        self.statuses.append(status)

    def set_percentage(self, percentage: int) -> None:
        self.percentages.append(percentage)


def _write_launcher(path: Path, name: str = "App", extra: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        f"[Desktop Entry]\nType=Application\nName={name}\nExec=sh\n{extra}",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def fake_backend():
    return FakeBackend


@pytest.fixture
def recording_progress():
    return RecordingProgress()


@pytest.fixture
def write_launcher():
    return _write_launcher


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Point config and cache directories at a temporary location."""

    data_dir = tmp_path / "home"
    monkeypatch.setattr("deskcache.config.CONFIG_DIR", data_dir)
    monkeypatch.setattr("deskcache.config.CONFIG_FILE", data_dir / "config.json")
    monkeypatch.setattr("deskcache.cache.CACHE_DIR", data_dir)
    return data_dir
