"""YAML file ConfigStore for the desktop target."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from vess.shared.core.errors import PersistenceDeserializationError
from vess.shared.domain.models import Config
from vess.shared.infrastructure.persistence.config_store import DEFAULT_RECORD_KEY, ConfigStore

logger = logging.getLogger(__name__)


class YamlConfigStore(ConfigStore):
    """Keeps the config record as a mapping inside a YAML key-value file.

    Other top-level keys in the file are preserved on write. Writes go to a
    temporary file that replaces the original, so a crash never leaves a
    half-written record behind.
    """

    def __init__(
        self,
        path: Union[str, Path],
        record_key: str = DEFAULT_RECORD_KEY,
        default_config: Optional[Config] = None,
    ) -> None:
        super().__init__(record_key, default_config)
        self.path = Path(path)

    def _load_document(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
            raise PersistenceDeserializationError(f"{self.path}: {exc}") from exc

        if document is None:
            return {}
        if not isinstance(document, dict):
            raise PersistenceDeserializationError(f"{self.path}: top level is not a mapping")
        return document

    def _read_record(self) -> Any:
        return self._load_document().get(self.record_key)

    def _write_record(self, record: Mapping[str, str]) -> None:
        try:
            document = self._load_document()
        except PersistenceDeserializationError as exc:
            logger.warning(f"Overwriting unreadable settings file: {exc}")
            document = {}
        document[self.record_key] = dict(record)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(document, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote '{self.record_key}' to {self.path}")
