from __future__ import annotations

import pytest

from deskcache.services import config_service


def test_apply_config_updates_reports_changes(isolated_home):
    result = config_service.apply_config_updates(
        scan_desktop_files=False,
        application_dir="/opt/apps",
        provider="dpkg",
        query_timeout=0,
    )

    assert result.changed
    assert result.enabled_set and result.application_dir_set
    assert result.provider_set and result.timeout_set
    assert not result.database_set

    cfg = config_service.get_config_snapshot()
    assert cfg.scan_desktop_files is False
    assert cfg.application_dir == "/opt/apps"
    assert cfg.provider == "dpkg"
    assert cfg.effective_timeout is None


def test_apply_config_updates_without_values_changes_nothing(isolated_home):
    result = config_service.apply_config_updates()

    assert result.changed is False
    assert not (isolated_home / "config.json").exists()


def test_database_path_set_and_cleared(isolated_home, tmp_path):
    set_result = config_service.apply_config_updates(database_path=str(tmp_path / "x.db"))
    assert set_result.database_set
    assert config_service.get_config_snapshot().database_path == str(tmp_path / "x.db")

    cleared = config_service.apply_config_updates(clear_database_path=True)
    assert cleared.database_cleared
    assert config_service.get_config_snapshot().database_path is None


def test_apply_config_updates_propagates_invalid_provider(isolated_home):
    with pytest.raises(ValueError):
        config_service.apply_config_updates(provider="brew")
