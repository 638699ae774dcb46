"""
Application Settings for the VESS core

Runtime settings (storage target, evaluation policy, logging) with a 3-tier
precedence hierarchy: environment → user file → system defaults.

These are *application* settings. The evaluator's profile record (name,
e-mail, language, ...) is ``vess.shared.domain.models.Config`` and lives in
the ConfigStore.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from vess.shared.domain.models import DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)


class ValidationLevel(Enum):
    """Settings validation strictness levels"""
    STRICT = "strict"      # Fail fast on validation errors
    LENIENT = "lenient"    # Log warnings, use defaults


class StorageSettings(BaseModel):
    """Where and how the user config record is persisted"""
    model_config = ConfigDict(extra='forbid')

    target: str = Field(default="desktop", description="Deployment target: desktop, embedded or memory")
    data_dir: str = Field(default="data", description="Directory holding persisted files")
    yaml_filename: str = Field(default="user_settings.yaml", description="Key-value file for the desktop target")
    duckdb_filename: str = Field(default="vess_data.duckdb", description="Database file for the embedded target")
    record_key: str = Field(default="user_config", min_length=1, description="Key of the persisted config record")


class EvaluationSettings(BaseModel):
    """Evaluation workflow policy"""
    model_config = ConfigDict(extra='forbid')

    require_description: bool = Field(default=True, description="Reject sessions started without a description")
    default_language: str = Field(default=DEFAULT_LANGUAGE, description="Language shown before the user picks one")


class LoggingSettings(BaseModel):
    """Logging Configuration"""
    model_config = ConfigDict(extra='forbid')

    level: str = Field(default="DEBUG", description="File log level")
    console_level: str = Field(default="WARNING", description="Console log level")
    file_enabled: bool = Field(default=True, description="Write a rotating log file")
    log_dir: str = Field(default="data/logs", description="Directory for log files")
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024, description="Rotate after this many bytes")
    backup_count: int = Field(default=5, ge=0, le=50, description="Rotated files to keep")


class SystemSettings(BaseModel):
    """Complete application settings"""
    model_config = ConfigDict(extra='forbid')

    storage: StorageSettings = Field(default_factory=StorageSettings)
    evaluation: EvaluationSettings = Field(default_factory=EvaluationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    schema_version: int = Field(default=1, description="Settings schema version")


# Environment variable -> (section, key, type)
ENV_OVERRIDES: Dict[str, tuple] = {
    'VESS_TARGET': ('storage', 'target', str),
    'VESS_DATA_DIR': ('storage', 'data_dir', str),
    'VESS_RECORD_KEY': ('storage', 'record_key', str),
    'VESS_REQUIRE_DESCRIPTION': ('evaluation', 'require_description', bool),
    'VESS_DEFAULT_LANGUAGE': ('evaluation', 'default_language', str),
    'LOG_LEVEL': ('logging', 'level', str),
    'VESS_LOG_DIR': ('logging', 'log_dir', str),
    'VESS_LOG_TO_FILE': ('logging', 'file_enabled', bool),
    'VESS_LOG_BACKUP_COUNT': ('logging', 'backup_count', int),
}

_TRUE_VALUES = ('true', '1', 'yes', 'on')
_FALSE_VALUES = ('false', '0', 'no', 'off')


class SettingsManager:
    """Centralized settings manager with env → user → defaults precedence"""

    def __init__(self, settings_dir: Optional[Path] = None):
        self.settings_dir = Path(settings_dir) if settings_dir else Path.cwd() / "settings"
        self._defaults: Optional[SystemSettings] = None
        self._user_settings: Optional[Dict[str, Any]] = None

    @property
    def defaults_path(self) -> Path:
        return self.settings_dir / "defaults.yaml"

    @property
    def user_path(self) -> Path:
        return self.settings_dir / "user.yaml"

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load a YAML mapping; missing or unreadable files yield {}"""
        if not file_path.exists():
            return {}

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load {file_path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring {file_path}: top level is not a mapping")
            return {}
        return data

    def _save_yaml_file(self, file_path: Path, data: Dict[str, Any]) -> bool:
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, indent=2, allow_unicode=True)
            return True
        except OSError as e:
            logger.error(f"Failed to save {file_path}: {e}")
            return False

    def _load_defaults(self) -> SystemSettings:
        if self._defaults is None:
            try:
                self._defaults = SystemSettings(**self._load_yaml_file(self.defaults_path))
            except ValidationError as e:
                logger.warning(f"System defaults validation failed, using built-in defaults: {e}")
                self._defaults = SystemSettings()
        return self._defaults

    def _load_user_settings(self) -> Dict[str, Any]:
        if self._user_settings is None:
            self._user_settings = self._load_yaml_file(self.user_path)
        return self._user_settings

    def _deep_merge(self, base: Dict[str, Any], updates: Dict[str, Any]) -> None:
        """Deep merge settings dictionaries in place"""
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _get_env_overrides(self) -> Dict[str, Any]:
        """Extract overrides from environment variables, skipping bad values"""
        overrides: Dict[str, Any] = {}
        for env_key, (section, key, kind) in ENV_OVERRIDES.items():
            raw = os.getenv(env_key)
            if raw is None:
                continue

            if kind is bool:
                lowered = raw.strip().lower()
                if lowered in _TRUE_VALUES:
                    value: Any = True
                elif lowered in _FALSE_VALUES:
                    value = False
                else:
                    logger.warning(f"Ignoring {env_key}={raw!r}: not a boolean")
                    continue
            elif kind is int:
                try:
                    value = int(raw)
                except ValueError:
                    logger.warning(f"Ignoring {env_key}={raw!r}: not an integer")
                    continue
            else:
                value = raw

            overrides.setdefault(section, {})[key] = value
        return overrides

    def _merge_settings(self) -> Dict[str, Any]:
        merged = self._load_defaults().model_dump()
        self._deep_merge(merged, self._load_user_settings())
        self._deep_merge(merged, self._get_env_overrides())
        return merged

    def get_settings(self, validation_level: ValidationLevel = ValidationLevel.STRICT) -> SystemSettings:
        """Get merged settings with validation"""
        merged = self._merge_settings()

        try:
            return SystemSettings(**merged)
        except ValidationError as e:
            if validation_level == ValidationLevel.STRICT:
                raise ValueError(f"Settings validation failed: {e}") from e
            logger.warning(f"Settings validation failed, using defaults: {e}")
            return SystemSettings()

    def save_user_settings(self, updates: Dict[str, Any]) -> bool:
        """Merge ``updates`` into the user settings file"""
        existing = self._load_yaml_file(self.user_path)
        self._deep_merge(existing, updates)

        success = self._save_yaml_file(self.user_path, existing)
        if success:
            self._user_settings = None
        return success

    def reload(self) -> None:
        """Drop cached files so the next read hits disk"""
        self._defaults = None
        self._user_settings = None


_settings_manager: Optional[SettingsManager] = None


def get_settings_manager(settings_dir: Optional[Path] = None) -> SettingsManager:
    """Get the process settings manager (recreated when a directory is given)"""
    global _settings_manager
    if _settings_manager is None or settings_dir is not None:
        _settings_manager = SettingsManager(settings_dir)
    return _settings_manager


def get_settings(validation_level: ValidationLevel = ValidationLevel.STRICT) -> SystemSettings:
    """Get current application settings"""
    return get_settings_manager().get_settings(validation_level)
