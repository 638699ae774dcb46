"""Persistence adapters for the evaluator config (mapping, YAML, DuckDB)."""

from vess.shared.infrastructure.persistence.config_store import DEFAULT_RECORD_KEY, ConfigStore
from vess.shared.infrastructure.persistence.duckdb_store import DuckDBConfigStore
from vess.shared.infrastructure.persistence.mapping_store import MappingConfigStore
from vess.shared.infrastructure.persistence.yaml_store import YamlConfigStore

__all__ = [
    "DEFAULT_RECORD_KEY",
    "ConfigStore",
    "DuckDBConfigStore",
    "MappingConfigStore",
    "YamlConfigStore",
]
