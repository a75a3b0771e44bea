from __future__ import annotations

import pytest

from deskcache import api as api_module
from deskcache.config import Config
from deskcache.errors import BackendUnavailableError, DeskcacheError
from deskcache.packages import Package, PackageInfo
from deskcache.services.reconcile_service import ReconcileStatus


@pytest.fixture
def app_dir(tmp_path):
    directory = tmp_path / "applications"
    directory.mkdir()
    return directory


def _use_config(monkeypatch, app_dir, **overrides):
    cfg = Config(application_dir=str(app_dir), query_timeout=5.0, **overrides)
    monkeypatch.setattr(api_module, "load_config", lambda: cfg)
    return cfg


def test_refresh_populates_cache(isolated_home, monkeypatch, app_dir, fake_backend, write_launcher):
    _use_config(monkeypatch, app_dir)
    launcher = write_launcher(app_dir / "files.desktop", "Files")
    backend = fake_backend(owners={str(launcher): ["nautilus"]})

    result = api_module.refresh(backend=backend)

    assert result.status is ReconcileStatus.COMPLETED
    assert result.added == 1
    entry = api_module.lookup(launcher)
    assert entry.owner == "nautilus"
    assert (isolated_home / "desktop-files.db").exists()


def test_refresh_with_explicit_directory(isolated_home, monkeypatch, tmp_path, fake_backend, write_launcher):
    _use_config(monkeypatch, tmp_path / "unused")
    other = tmp_path / "other"
    launcher = write_launcher(other / "x.desktop")

    result = api_module.refresh(
        application_dir=other, backend=fake_backend(owners={str(launcher.resolve()): ["x"]})
    )

    assert result.added == 1


def test_refresh_rejects_missing_directory(isolated_home, monkeypatch, app_dir, tmp_path, fake_backend):
    _use_config(monkeypatch, app_dir)

    with pytest.raises(DeskcacheError):
        api_module.refresh(application_dir=tmp_path / "missing", backend=fake_backend())


def test_refresh_when_disabled(isolated_home, monkeypatch, app_dir, fake_backend):
    _use_config(monkeypatch, app_dir, scan_desktop_files=False)

    with pytest.raises(DeskcacheError):
        api_module.refresh(backend=fake_backend())


def test_refresh_reports_unavailable_store(isolated_home, monkeypatch, app_dir, tmp_path, fake_backend):
    blocked = tmp_path / "blocked.db"
    blocked.mkdir()
    _use_config(monkeypatch, app_dir, database_path=str(blocked))

    with pytest.raises(DeskcacheError) as exc:
        api_module.refresh(backend=fake_backend())

    assert str(blocked) in str(exc.value)


def test_refresh_without_backend_uses_configured_provider(isolated_home, monkeypatch, app_dir):
    _use_config(monkeypatch, app_dir, provider="dpkg")
    captured = {}

    def fake_create_backend(name, *, timeout=None):
        captured["name"] = name
        captured["timeout"] = timeout
        raise BackendUnavailableError("no dpkg")

    monkeypatch.setattr(api_module, "create_backend", fake_create_backend)

    with pytest.raises(BackendUnavailableError):
        api_module.refresh()
    assert captured == {"name": "dpkg", "timeout": 5.0}


def test_ingest_accepts_names_and_packages(isolated_home, monkeypatch, app_dir, fake_backend, write_launcher):
    _use_config(monkeypatch, app_dir)
    gimp = write_launcher(app_dir / "gimp.desktop", "GIMP")
    vim = write_launcher(app_dir / "vim.desktop", "Vim")
    backend = fake_backend(manifests={"gimp": [str(gimp)], "vim": [str(vim)]})

    result = api_module.ingest(
        ["gimp", Package(name="vim", info=PackageInfo.REMOVING)],
        backend=backend,
    )

    assert result.added == 1
    assert backend.file_requests == [["gimp;;;installed"]]
    assert [entry.owner for entry in api_module.list_entries()] == ["gimp"]


def test_ingest_validates_input(isolated_home):
    with pytest.raises(DeskcacheError):
        api_module.ingest([])
    with pytest.raises(DeskcacheError):
        api_module.ingest(["a;b"])


def test_lookup_requires_absolute_path(isolated_home):
    with pytest.raises(DeskcacheError):
        api_module.lookup("relative.desktop")


def test_list_and_clear(isolated_home, monkeypatch, app_dir, fake_backend, write_launcher):
    _use_config(monkeypatch, app_dir)
    a = write_launcher(app_dir / "a.desktop")
    b = write_launcher(app_dir / "b.desktop")
    api_module.refresh(backend=fake_backend(owners={str(a): ["one"], str(b): ["two"]}))

    assert [e.owner for e in api_module.list_entries(owner="two")] == ["two"]
    assert api_module.clear_cache() == 2
    assert api_module.list_entries() == []


def test_data_dir_redirects_storage(tmp_path, monkeypatch, app_dir, fake_backend, write_launcher):
    monkeypatch.setattr("deskcache.config.CONFIG_DIR", tmp_path / "unused-config")
    monkeypatch.setattr("deskcache.config.CONFIG_FILE", tmp_path / "unused-config" / "config.json")
    monkeypatch.setattr("deskcache.cache.CACHE_DIR", tmp_path / "unused-cache")
    data_dir = tmp_path / "data"
    launcher = write_launcher(app_dir / "a.desktop")

    with api_module.config_context({"application_dir": str(app_dir)}):
        api_module.refresh(backend=fake_backend(owners={str(launcher): ["pkg"]}), data_dir=data_dir)

    assert (data_dir / "desktop-files.db").exists()
    assert api_module.list_entries(data_dir=data_dir)[0].owner == "pkg"
    assert not (tmp_path / "unused-cache" / "desktop-files.db").exists()


def test_set_config_json_rejects_invalid(isolated_home):
    with pytest.raises(DeskcacheError):
        api_module.set_config_json({"queue_size": "many"})


def test_config_context_restores_previous(isolated_home):
    with api_module.config_context({"provider": "rpm"}) as cfg:
        assert cfg.provider == "rpm"
        assert api_module._resolve_config(True).provider == "rpm"

    assert api_module._resolve_config(True).provider == "auto"
    assert api_module._resolve_config(False) == Config()
