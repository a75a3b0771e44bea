from __future__ import annotations

import hashlib
import os
from pathlib import Path

import pytest

import deskcache.utils as utils


def test_resolve_directory_validates(tmp_path):
    with pytest.raises(FileNotFoundError):
        utils.resolve_directory(tmp_path / "missing")

    file_path = tmp_path / "file.txt"
    file_path.write_text("x", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        utils.resolve_directory(file_path)

    assert utils.resolve_directory(tmp_path) == tmp_path.resolve()


def test_is_launcher_file():
    assert utils.is_launcher_file("/usr/share/applications/firefox.desktop")
    assert utils.is_launcher_file(Path("gimp.desktop"))
    assert not utils.is_launcher_file("/usr/share/applications/mimeinfo.cache")
    assert not utils.is_launcher_file("notes.desktop.bak")


def test_compute_fingerprint_matches_md5(tmp_path):
    launcher = tmp_path / "app.desktop"
    payload = b"[Desktop Entry]\nType=Application\nName=App\n"
    launcher.write_bytes(payload)

    assert utils.compute_fingerprint(launcher) == hashlib.md5(payload).hexdigest()


def test_compute_fingerprint_changes_with_content(tmp_path):
    launcher = tmp_path / "app.desktop"
    launcher.write_text("one", encoding="utf-8")
    first = utils.compute_fingerprint(launcher)
    launcher.write_text("two", encoding="utf-8")

    assert utils.compute_fingerprint(launcher) != first


def test_compute_fingerprint_missing_file(tmp_path):
    assert utils.compute_fingerprint(tmp_path / "gone.desktop") is None


def test_compute_fingerprint_unreadable_file(tmp_path, monkeypatch, caplog):
    launcher = tmp_path / "locked.desktop"
    launcher.write_text("data", encoding="utf-8")

    def fake_open(self, *args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(Path, "open", fake_open)
    with caplog.at_level("WARNING", logger="deskcache.utils"):
        assert utils.compute_fingerprint(launcher) is None
    assert "failed to open file" in caplog.text


def test_walk_launcher_files_recurses_and_filters(tmp_path):
    (tmp_path / "kde").mkdir()
    (tmp_path / "a.desktop").write_text("a", encoding="utf-8")
    (tmp_path / "readme.txt").write_text("x", encoding="utf-8")
    (tmp_path / "kde" / "b.desktop").write_text("b", encoding="utf-8")

    found = utils.walk_launcher_files(tmp_path, set())

    assert found == [tmp_path / "a.desktop", tmp_path / "kde" / "b.desktop"]


def test_walk_launcher_files_skips_visited(tmp_path):
    (tmp_path / "a.desktop").write_text("a", encoding="utf-8")
    (tmp_path / "b.desktop").write_text("b", encoding="utf-8")

    found = utils.walk_launcher_files(tmp_path, {str(tmp_path / "a.desktop")})

    assert found == [tmp_path / "b.desktop"]


def test_walk_launcher_files_warns_on_unreadable_directory(tmp_path, monkeypatch, caplog):
    blocked = tmp_path / "blocked"
    blocked.mkdir()
    (blocked / "hidden.desktop").write_text("x", encoding="utf-8")
    (tmp_path / "a.desktop").write_text("a", encoding="utf-8")
    real_scandir = os.scandir

    def fake_scandir(path):
        if Path(path) == blocked:
            raise PermissionError("denied")
        return real_scandir(path)

    monkeypatch.setattr(utils.os, "scandir", fake_scandir)
    with caplog.at_level("WARNING", logger="deskcache.utils"):
        found = utils.walk_launcher_files(tmp_path, set())

    assert found == [tmp_path / "a.desktop"]
    assert "failed to open directory" in caplog.text


def test_walk_launcher_files_missing_root(tmp_path):
    assert utils.walk_launcher_files(tmp_path / "missing", set()) == []
