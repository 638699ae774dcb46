"""Tests for application settings precedence and validation."""

import pytest

from vess.shared.core.configuration import (
    SettingsManager,
    SystemSettings,
    ValidationLevel,
    get_settings_manager,
)
from vess.shared.domain.models import DEFAULT_LANGUAGE

ENV_KEYS = ("VESS_TARGET", "VESS_DATA_DIR", "VESS_REQUIRE_DESCRIPTION", "LOG_LEVEL", "VESS_LOG_BACKUP_COUNT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_builtin_defaults(tmp_path):
    settings = SettingsManager(tmp_path).get_settings()

    assert settings == SystemSettings()
    assert settings.storage.target == "desktop"
    assert settings.storage.record_key == "user_config"
    assert settings.evaluation.require_description is True
    assert settings.evaluation.default_language == DEFAULT_LANGUAGE


def test_env_overrides_user_file_overrides_defaults(tmp_path, monkeypatch):
    (tmp_path / "defaults.yaml").write_text("storage:\n  target: embedded\n  data_dir: /srv/vess\n", encoding="utf-8")
    (tmp_path / "user.yaml").write_text("storage:\n  target: memory\n", encoding="utf-8")

    manager = SettingsManager(tmp_path)
    settings = manager.get_settings()
    assert settings.storage.target == "memory"
    assert settings.storage.data_dir == "/srv/vess"

    monkeypatch.setenv("VESS_TARGET", "desktop")
    monkeypatch.setenv("VESS_REQUIRE_DESCRIPTION", "no")
    monkeypatch.setenv("LOG_LEVEL", "info")
    settings = manager.get_settings()
    assert settings.storage.target == "desktop"
    assert settings.evaluation.require_description is False
    assert settings.logging.level == "info"


def test_invalid_env_values_are_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("VESS_REQUIRE_DESCRIPTION", "maybe")
    monkeypatch.setenv("VESS_LOG_BACKUP_COUNT", "many")

    settings = SettingsManager(tmp_path).get_settings()

    assert settings.evaluation.require_description is True
    assert settings.logging.backup_count == 5


def test_strict_validation_raises_and_lenient_falls_back(tmp_path):
    (tmp_path / "user.yaml").write_text("logging:\n  backup_count: 500\n", encoding="utf-8")
    manager = SettingsManager(tmp_path)

    with pytest.raises(ValueError, match="Settings validation failed"):
        manager.get_settings()
    assert manager.get_settings(ValidationLevel.LENIENT) == SystemSettings()


def test_unknown_keys_are_rejected(tmp_path):
    (tmp_path / "user.yaml").write_text("storage:\n  colour: blue\n", encoding="utf-8")

    with pytest.raises(ValueError):
        SettingsManager(tmp_path).get_settings()


def test_unreadable_user_file_is_ignored(tmp_path):
    (tmp_path / "user.yaml").write_text("storage: [broken\n", encoding="utf-8")
    assert SettingsManager(tmp_path).get_settings() == SystemSettings()


def test_save_user_settings_merges_and_reloads(tmp_path):
    manager = SettingsManager(tmp_path)
    assert manager.get_settings().storage.target == "desktop"

    assert manager.save_user_settings({"storage": {"target": "embedded"}})
    assert manager.save_user_settings({"evaluation": {"require_description": False}})

    settings = manager.get_settings()
    assert settings.storage.target == "embedded"
    assert settings.evaluation.require_description is False


def test_global_manager_recreated_for_new_directory(tmp_path):
    first = get_settings_manager(tmp_path)
    assert get_settings_manager() is first
    assert get_settings_manager(tmp_path / "other") is not first
