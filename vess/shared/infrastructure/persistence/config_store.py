"""ConfigStore contract shared by every storage backend.

A store owns exactly one durable record (the evaluator ``Config``) and
exposes it as a replay-latest ``StateFlow``. Backends only implement raw
record access; decoding, fallback to defaults, write serialization and
publishing live here.
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from vess.shared.core.errors import PersistenceDeserializationError, PersistenceError
from vess.shared.core.reactive import StateFlow
from vess.shared.domain.models import Config

logger = logging.getLogger(__name__)

DEFAULT_RECORD_KEY = "user_config"


class ConfigStore(ABC):
    """Persist the evaluator config and publish every committed value.

    Usage:
        store = YamlConfigStore(path)
        store.observe().listen(render)
        await store.save(Config(name="Ana"))
    """

    def __init__(self, record_key: str = DEFAULT_RECORD_KEY, default_config: Optional[Config] = None) -> None:
        self.record_key = record_key
        # Value used when nothing usable is stored
        self.default_config = default_config or Config()
        self._flow: Optional[StateFlow[Config]] = None
        self._write_lock: Optional[asyncio.Lock] = None
        self._loop_id: Optional[int] = None

    # --- Backend hooks ---

    @abstractmethod
    def _read_record(self) -> Any:
        """Return the raw persisted record, or None when nothing is stored."""

    @abstractmethod
    def _write_record(self, record: Mapping[str, str]) -> None:
        """Durably store ``record`` under ``self.record_key``."""

    def close(self) -> None:
        """Release backend resources."""

    # --- Contract ---

    def observe(self) -> StateFlow[Config]:
        """Live config value; loads the persisted record on first access."""
        if self._flow is None:
            self._flow = StateFlow(self._load(), name=f"config:{self.record_key}")
        return self._flow

    async def save(self, config: Config) -> None:
        """Persist ``config``, then publish it to every observer.

        Calls are serialized in invocation order; the last one wins.

        Raises:
            PersistenceError: If the backend could not store the record
        """
        flow = self.observe()
        async with self._ensure_lock():
            loop = asyncio.get_running_loop()
            try:
                await loop.run_in_executor(None, self._write_record, config.to_record())
            except PersistenceError:
                raise
            except Exception as exc:
                logger.error(f"Failed to persist config '{self.record_key}': {exc}")
                raise PersistenceError(f"Could not save config '{self.record_key}'") from exc

            logger.debug(f"Config '{self.record_key}' persisted")
            flow.emit(config)

    # --- Internals ---

    def _ensure_lock(self) -> asyncio.Lock:
        """Get or create the write lock for the running event loop."""
        loop_id = id(asyncio.get_running_loop())
        if self._write_lock is None or self._loop_id != loop_id:
            self._write_lock = asyncio.Lock()
            self._loop_id = loop_id
        return self._write_lock

    def _load(self) -> Config:
        try:
            raw = self._read_record()
        except PersistenceDeserializationError as exc:
            logger.warning(f"Stored config '{self.record_key}' is unreadable, using defaults: {exc}")
            return self.default_config

        if raw is None:
            logger.info(f"No stored config under '{self.record_key}', starting from defaults")
            return self.default_config

        try:
            return self.decode(raw)
        except PersistenceDeserializationError as exc:
            logger.warning(f"Stored config '{self.record_key}' is corrupted, using defaults: {exc}")
            return self.default_config

    def decode(self, raw: Any) -> Config:
        """Decode JSON text or a mapping into a Config.

        A record without ``language`` takes the default config's language.

        Raises:
            PersistenceDeserializationError: If ``raw`` is not a valid record
        """
        try:
            if isinstance(raw, (str, bytes, bytearray)):
                record = json.loads(raw)
            else:
                record = raw
            if not isinstance(record, Mapping):
                raise PersistenceDeserializationError(
                    f"expected an object, got {type(record).__name__}"
                )
            record = dict(record)
            record.setdefault("language", self.default_config.language)
            return Config.from_record(record)
        except (ValueError, ValidationError) as exc:
            # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
            raise PersistenceDeserializationError(str(exc)) from exc
