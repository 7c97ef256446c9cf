"""
DuckDB store backend.

Keeps every entry in a single two-column table. Ideal for development,
testing, and single-machine deployments; use ``:memory:`` for a throwaway
database or a file path for persistence.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import duckdb

from ..exceptions import StorageConnectionError, StorageIOError, ValidationError
from ..logging_utils import get_storage_logger
from .base import KeyValueStore

logger = get_storage_logger("duckdb")

DEFAULT_TABLE = "kv_entries"

_TABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass
class DuckDBStoreConfig:
    """Configuration for DuckDB storage."""

    db_path: str | Path = ":memory:"  # Use :memory: for in-memory database
    table: str = DEFAULT_TABLE
    max_entry_size: int | None = None

    @classmethod
    def from_env(cls) -> DuckDBStoreConfig:
        """Create config from environment variables.

        Expected environment variables:
        - CHUNKED_STORAGE_DUCKDB_PATH: Database file (default ':memory:')
        - CHUNKED_STORAGE_DUCKDB_TABLE: Table name (default 'kv_entries')
        - CHUNKED_STORAGE_MAX_ENTRY_SIZE: Optional per-entry limit in bytes
        """
        max_entry = os.environ.get("CHUNKED_STORAGE_MAX_ENTRY_SIZE")
        return cls(
            db_path=os.environ.get("CHUNKED_STORAGE_DUCKDB_PATH", ":memory:"),
            table=os.environ.get("CHUNKED_STORAGE_DUCKDB_TABLE", DEFAULT_TABLE),
            max_entry_size=int(max_entry) if max_entry else None,
        )


class DuckDBStore(KeyValueStore):
    """
    Key-value store backed by a DuckDB table.

    Schema:
        {table}(key VARCHAR PRIMARY KEY, value BLOB NOT NULL)

    Transactions map directly onto DuckDB BEGIN/COMMIT/ROLLBACK.
    """

    def __init__(self, config: DuckDBStoreConfig):
        """
        Initialize DuckDB store.

        Args:
            config: DuckDB configuration
        """
        if not _TABLE_NAME_RE.match(config.table):
            raise ValidationError("table", "must be a plain SQL identifier", config.table)
        self.config = config
        self.max_entry_size = config.max_entry_size
        self.conn: Any = None  # DuckDB connection (using Any due to type stub limitations)
        self._in_transaction = False
        self._initialized = False

    @classmethod
    def create(cls, config: DuckDBStoreConfig | None = None) -> DuckDBStore:
        """Create and initialize DuckDB store."""
        if config is None:
            config = DuckDBStoreConfig.from_env()

        store = cls(config)
        store.initialize()
        return store

    def initialize(self) -> None:
        """Open the connection and create the entries table."""
        if self._initialized:
            return

        try:
            self.conn = duckdb.connect(str(self.config.db_path))
            self.conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.config.table} (
                    key VARCHAR NOT NULL PRIMARY KEY,
                    value BLOB NOT NULL
                )
            """)
        except duckdb.Error as e:
            raise StorageConnectionError(str(self.config.db_path), e) from e

        self._initialized = True
        logger.info(f"DuckDB store initialized: {self.config.db_path} ({self.config.table})")

    def close(self) -> None:
        """Close DuckDB connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
        self._initialized = False

    def _ensure_initialized(self, operation: str) -> None:
        if not self._initialized:
            raise StorageIOError(operation, cause=RuntimeError("Store not initialized"))

    def get(self, key: str) -> bytes | None:
        self._ensure_initialized("get")
        try:
            row = self.conn.execute(
                f"SELECT value FROM {self.config.table} WHERE key = ?", [key]
            ).fetchone()
        except duckdb.Error as e:
            raise StorageIOError("get", key, e) from e
        return bytes(row[0]) if row else None

    def set(self, key: str, value: bytes) -> None:
        self._ensure_initialized("set")
        self.check_entry_size(key, value)
        try:
            self.conn.execute(
                f"""
                INSERT INTO {self.config.table} (key, value) VALUES (?, ?)
                ON CONFLICT (key) DO UPDATE SET value = excluded.value
                """,
                [key, bytes(value)],
            )
        except duckdb.Error as e:
            raise StorageIOError("set", key, e) from e

    def delete(self, key: str) -> None:
        self._ensure_initialized("delete")
        try:
            self.conn.execute(f"DELETE FROM {self.config.table} WHERE key = ?", [key])
        except duckdb.Error as e:
            raise StorageIOError("delete", key, e) from e

    def keys(self, prefix: str = "") -> list[str]:
        self._ensure_initialized("keys")
        try:
            rows = self.conn.execute(
                f"SELECT key FROM {self.config.table} WHERE starts_with(key, ?) ORDER BY key",
                [prefix],
            ).fetchall()
        except duckdb.Error as e:
            raise StorageIOError("keys", prefix, e) from e
        return [row[0] for row in rows]

    @property
    def supports_transactions(self) -> bool:
        return True

    @contextmanager
    def transaction(self) -> Iterator[None]:
        self._ensure_initialized("transaction")
        if self._in_transaction:
            raise StorageIOError("transaction", cause=RuntimeError("Transactions do not nest"))

        self.conn.begin()
        self._in_transaction = True
        try:
            yield
        except BaseException:
            self.conn.rollback()
            logger.debug("Rolled back DuckDB transaction")
            raise
        else:
            self.conn.commit()
        finally:
            self._in_transaction = False
