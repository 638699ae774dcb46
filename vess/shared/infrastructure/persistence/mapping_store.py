"""ConfigStore over any key-value mapping (dict, shelve, platform prefs)."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, MutableMapping, Optional

from vess.shared.domain.models import Config
from vess.shared.infrastructure.persistence.config_store import DEFAULT_RECORD_KEY, ConfigStore

logger = logging.getLogger(__name__)


class MappingConfigStore(ConfigStore):
    """Stores the record as JSON text in a platform-supplied mapping.

    The mapping plays the role of the platform's preferences API; it is
    handed in by the bootstrap code and never created here.
    """

    def __init__(
        self,
        storage: Optional[MutableMapping[str, Any]] = None,
        record_key: str = DEFAULT_RECORD_KEY,
        default_config: Optional[Config] = None,
    ) -> None:
        super().__init__(record_key, default_config)
        self.storage: MutableMapping[str, Any] = {} if storage is None else storage

    def _read_record(self) -> Any:
        return self.storage.get(self.record_key)

    def _write_record(self, record: Mapping[str, str]) -> None:
        self.storage[self.record_key] = json.dumps(dict(record), ensure_ascii=False)
        sync = getattr(self.storage, "sync", None)
        if callable(sync):
            # shelve and similar handles buffer writes
            sync()

    def close(self) -> None:
        closer = getattr(self.storage, "close", None)
        if callable(closer):
            closer()
            logger.debug("Mapping storage closed")
