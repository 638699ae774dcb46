"""DuckDB ConfigStore for the embedded target.

The record lives in a small key-value table so the same database file can
hold other keyed records later.
"""

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import duckdb

from vess.shared.core.errors import PersistenceError
from vess.shared.domain.models import Config
from vess.shared.infrastructure.persistence.config_store import DEFAULT_RECORD_KEY, ConfigStore

logger = logging.getLogger(__name__)


class DuckDBConfigStore(ConfigStore):
    """Stores the config record as JSON text in ``kv_store``."""

    def __init__(
        self,
        db_path: Union[str, Path] = ":memory:",
        record_key: str = DEFAULT_RECORD_KEY,
        default_config: Optional[Config] = None,
    ):
        super().__init__(record_key, default_config)
        self.db_path = str(db_path)
        self.conn: Optional[duckdb.DuckDBPyConnection] = None
        self._connect()

    def _connect(self) -> None:
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = duckdb.connect(self.db_path)
        self._create_schema()
        logger.info(f"Config database initialized: {self.db_path}")

    def _create_schema(self) -> None:
        try:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key VARCHAR PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
        except duckdb.Error as e:
            logger.error(f"Error creating config schema: {e}", exc_info=True)
            raise PersistenceError(f"Could not prepare {self.db_path}") from e

    def _cursor(self) -> duckdb.DuckDBPyConnection:
        # Writes run on executor threads; each operation gets its own cursor
        if self.conn is None:
            raise PersistenceError("Config database is closed")
        return self.conn.cursor()

    def _read_record(self) -> Any:
        with self._cursor() as cur:
            row = cur.execute(
                "SELECT value FROM kv_store WHERE key = ?",
                [self.record_key],
            ).fetchone()
        return row[0] if row else None

    def _write_record(self, record: Mapping[str, str]) -> None:
        value = json.dumps(dict(record), ensure_ascii=False)
        with self._cursor() as cur:
            cur.execute("""
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT (key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
            """, [self.record_key, value])

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None
