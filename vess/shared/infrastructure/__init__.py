"""
Shared Infrastructure Module
=============================

Technical adapters for the host platform: config persistence backends and
the per-target store factory.
"""

from vess.shared.infrastructure.platform import PlatformContext
from vess.shared.infrastructure.persistence import (
    ConfigStore,
    DuckDBConfigStore,
    MappingConfigStore,
    YamlConfigStore,
)
from vess.shared.infrastructure.persistence.factory import TargetType, build_config_store

__all__ = [
    "PlatformContext",
    # Persistence
    "ConfigStore",
    "DuckDBConfigStore",
    "MappingConfigStore",
    "YamlConfigStore",
    # Factory
    "TargetType",
    "build_config_store",
]
