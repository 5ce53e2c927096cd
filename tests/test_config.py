"""Tests for settings loading (init > env > yaml)."""

from pathlib import Path

import pytest

from cyber_sensei import config
from cyber_sensei.config import Settings


@pytest.fixture
def yaml_root(tmp_path, monkeypatch):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "settings.yaml").write_text(
        "server:\n"
        "  port: 9100\n"
        "storage:\n"
        "  progress_key: yaml_progress\n"
        "gamification:\n"
        "  achievement_toast_seconds: 8\n"
    )
    monkeypatch.setattr(config, "_find_project_root", lambda: tmp_path)
    return tmp_path


def test_yaml_values_are_loaded(yaml_root):
    settings = Settings()
    assert settings.port == 9100
    assert settings.progress_storage_key == "yaml_progress"
    assert settings.achievement_toast_seconds == 8.0
    assert settings.daily_challenges_storage_key == "cyber_sensei_daily_progress"


def test_env_overrides_yaml(yaml_root, monkeypatch):
    monkeypatch.setenv("CYBER_SENSEI_PORT", "9200")
    assert Settings().port == 9200


def test_init_overrides_everything(yaml_root, monkeypatch):
    monkeypatch.setenv("CYBER_SENSEI_PORT", "9200")
    assert Settings(port=9300).port == 9300


def test_missing_yaml_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "_find_project_root", lambda: tmp_path)
    settings = Settings()
    assert settings.progress_storage_key == "cyber_sensei_progress"
    assert settings.achievement_toast_seconds == 5.0


def test_relative_data_dir_hangs_off_project_root(tmp_path):
    settings = Settings(project_root=tmp_path, data_dir=Path("state/progress"))
    assert settings.storage_dir == tmp_path / "state" / "progress"
    assert settings.storage_dir.is_dir()


def test_default_storage_dir(tmp_path):
    settings = Settings(project_root=tmp_path)
    assert settings.storage_dir == tmp_path / "data" / "progress"
