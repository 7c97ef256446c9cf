"""
Key-value store backends.

Chunk collections talk to any KeyValueStore (memory, DuckDB, Cosmos DB).
Each backend implements the same interface, allowing seamless switching.
"""

from __future__ import annotations

import os

from ..exceptions import ValidationError
from .base import KeyValueStore
from .memory import MemoryStore

BACKEND_MEMORY = "memory"
BACKEND_DUCKDB = "duckdb"
BACKEND_COSMOS = "cosmos"

BACKENDS = (BACKEND_MEMORY, BACKEND_DUCKDB, BACKEND_COSMOS)


def create_store(backend: str | None = None) -> KeyValueStore:
    """Create and initialize a store from environment configuration.

    Args:
        backend: 'memory', 'duckdb' or 'cosmos'. Defaults to the
            CHUNKED_STORAGE_BACKEND environment variable, then 'memory'.

    Raises:
        ValidationError: If the backend name is unknown
    """
    name = (backend or os.environ.get("CHUNKED_STORAGE_BACKEND") or BACKEND_MEMORY).lower()

    if name == BACKEND_MEMORY:
        max_entry = os.environ.get("CHUNKED_STORAGE_MAX_ENTRY_SIZE")
        return MemoryStore(max_entry_size=int(max_entry) if max_entry else None)

    if name == BACKEND_DUCKDB:
        from .duckdb import DuckDBStore

        return DuckDBStore.create()

    if name == BACKEND_COSMOS:
        from .cosmos import CosmosStore

        return CosmosStore.create()

    raise ValidationError("backend", f"must be one of {', '.join(BACKENDS)}", name)


__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "create_store",
    "BACKENDS",
]
