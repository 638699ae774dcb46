"""
ConfigStore factory.

Each deployment target maps to exactly one backend constructor in a static
table; selection never inspects runtime types.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict

from vess.shared.core.configuration import StorageSettings
from vess.shared.domain.models import Config
from vess.shared.infrastructure.persistence.config_store import ConfigStore
from vess.shared.infrastructure.persistence.duckdb_store import DuckDBConfigStore
from vess.shared.infrastructure.persistence.mapping_store import MappingConfigStore
from vess.shared.infrastructure.persistence.yaml_store import YamlConfigStore
from vess.shared.infrastructure.platform import PlatformContext

logger = logging.getLogger(__name__)


class TargetType(str, Enum):
    """Supported deployment targets."""
    DESKTOP = "desktop"
    EMBEDDED = "embedded"
    MEMORY = "memory"


StoreBuilder = Callable[[PlatformContext, StorageSettings, Config], ConfigStore]


def _desktop_store(context: PlatformContext, settings: StorageSettings, default: Config) -> ConfigStore:
    return YamlConfigStore(context.resolve(settings.yaml_filename), record_key=settings.record_key, default_config=default)


def _embedded_store(context: PlatformContext, settings: StorageSettings, default: Config) -> ConfigStore:
    return DuckDBConfigStore(context.resolve(settings.duckdb_filename), record_key=settings.record_key, default_config=default)


def _memory_store(context: PlatformContext, settings: StorageSettings, default: Config) -> ConfigStore:
    return MappingConfigStore(context.preferences, record_key=settings.record_key, default_config=default)


STORE_BUILDERS: Dict[TargetType, StoreBuilder] = {
    TargetType.DESKTOP: _desktop_store,
    TargetType.EMBEDDED: _embedded_store,
    TargetType.MEMORY: _memory_store,
}


def build_config_store(
    context: PlatformContext,
    settings: StorageSettings | None = None,
    default_language: str | None = None,
) -> ConfigStore:
    """Create the ConfigStore for ``context.target``.

    Args:
        context: Platform context naming the target and data directory
        settings: Storage settings (file names, record key)
        default_language: Language of the config used before one is saved

    Raises:
        ValueError: If the target is not supported
    """
    settings = settings or StorageSettings(target=context.target)
    try:
        target = TargetType(context.target.strip().lower())
    except ValueError:
        raise ValueError(
            f"Unsupported target: {context.target}. "
            f"Supported: {[t.value for t in TargetType]}"
        ) from None

    default = Config(language=default_language) if default_language else Config()
    store = STORE_BUILDERS[target](context, settings, default)
    logger.info(f"Using {type(store).__name__} for target '{target.value}'")
    return store
