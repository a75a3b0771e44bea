from __future__ import annotations

import pytest

import deskcache
from deskcache.services.reconcile_service import ReconcileStatus


@pytest.fixture
def app_dir(tmp_path):
    directory = tmp_path / "applications"
    directory.mkdir()
    return directory


def test_launcher_lifecycle(tmp_path, app_dir, fake_backend, write_launcher):
    data_dir = tmp_path / "data"
    editor = write_launcher(app_dir / "editor.desktop", "Editor")
    viewer = write_launcher(app_dir / "sub" / "viewer.desktop", "Viewer")
    write_launcher(app_dir / "notes.txt")
    backend = fake_backend(owners={str(editor): ["gedit"], str(viewer): ["eog"]})

    with deskcache.config_context({"application_dir": str(app_dir)}, replace=True):
        first = deskcache.refresh(backend=backend, data_dir=data_dir)
        assert first.status is ReconcileStatus.COMPLETED
        assert (first.added, first.validated) == (2, 0)
        assert first.visited == 0

        second = deskcache.refresh(backend=backend, data_dir=data_dir)
        assert (second.added, second.validated) == (0, 2)
        assert second.visited == 2

        write_launcher(editor, "Editor", extra="NoDisplay=true\n")
        viewer.unlink()
        third = deskcache.refresh(backend=backend, data_dir=data_dir)
        assert (third.updated, third.removed, third.added) == (1, 1, 0)

        entries = deskcache.list_entries(data_dir=data_dir)
        assert [(entry.owner, entry.visible) for entry in entries] == [("gedit", False)]


def test_refresh_leaves_unresolved_launchers_untracked(tmp_path, app_dir, fake_backend, write_launcher):
    data_dir = tmp_path / "data"
    orphan = write_launcher(app_dir / "orphan.desktop")
    shared = write_launcher(app_dir / "shared.desktop")
    backend = fake_backend(owners={str(shared): ["one", "two"]})

    with deskcache.config_context({"application_dir": str(app_dir)}, replace=True):
        result = deskcache.refresh(backend=backend, data_dir=data_dir)

    assert result.added == 0
    assert result.skipped == 2
    assert deskcache.lookup(orphan, data_dir=data_dir) is None
    assert deskcache.lookup(shared, data_dir=data_dir) is None


def test_ingest_then_refresh_validates(tmp_path, app_dir, fake_backend, write_launcher):
    data_dir = tmp_path / "data"
    launcher = write_launcher(app_dir / "gimp.desktop", "GIMP")
    backend = fake_backend(
        owners={str(launcher): ["gimp"]},
        manifests={"gimp": [str(launcher), "/usr/bin/gimp"]},
    )

    with deskcache.config_context({"application_dir": str(app_dir)}, replace=True):
        ingested = deskcache.ingest(["gimp;2.10;x86_64;fedora"], backend=backend, data_dir=data_dir)
        refreshed = deskcache.refresh(backend=backend, data_dir=data_dir)

    assert ingested.added == 1
    assert backend.file_requests == [["gimp;2.10;x86_64;installed"]]
    assert refreshed.validated == 1
    assert refreshed.added == 0
    assert backend.searches == []
    assert deskcache.clear_cache(data_dir=data_dir) == 1
