"""
Per-collection metadata records.

Each collection has one metadata record tracking its shape:
- count: number of chunks
- total_bytes: sum of all chunk lengths
- version: incremented once per successful mutation

The record is absent until the first write and is deleted by ``clear``,
so an absent record reads back as the zero default.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .backends.base import KeyValueStore
from .exceptions import StorageIOError
from .keys import meta_key
from .logging_utils import get_storage_logger

logger = get_storage_logger("metadata")

# Metadata fields are persisted as unsigned 32-bit counters
UINT32_MAX = 2**32 - 1


@dataclass
class ChunkMeta:
    """Metadata about a chunk collection.

    Attributes:
        count: Number of chunks in the collection
        total_bytes: Total size in bytes across all chunks
        version: Version for optimistic locking (incremented on each write)
    """

    count: int = 0
    total_bytes: int = 0
    version: int = 0

    def is_empty(self) -> bool:
        return self.count == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "count": self.count,
            "total_bytes": self.total_bytes,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChunkMeta:
        """Create from dictionary."""
        return cls(
            count=int(data.get("count", 0)),
            total_bytes=int(data.get("total_bytes", 0)),
            version=int(data.get("version", 0)),
        )

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_bytes(cls, raw: bytes) -> ChunkMeta:
        return cls.from_dict(json.loads(raw.decode("utf-8")))


class MetadataStore:
    """Reads and writes collection metadata records through a store.

    Performs no invariant checks; the collection keeps count and
    total_bytes consistent with its chunks.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def read(self, collection_id: str) -> ChunkMeta:
        """Read metadata for a collection.

        Returns:
            The stored record, or a zero-valued ChunkMeta if absent

        Raises:
            StorageIOError: If the stored record cannot be decoded
        """
        key = meta_key(collection_id)
        raw = self.store.get(key)
        if raw is None:
            return ChunkMeta()
        try:
            return ChunkMeta.from_bytes(raw)
        except (UnicodeDecodeError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Corrupt metadata record at {key}: {e}")
            raise StorageIOError("decode_metadata", key, e) from e

    def write(self, collection_id: str, meta: ChunkMeta) -> None:
        """Overwrite the metadata record for a collection."""
        self.store.set(meta_key(collection_id), meta.to_bytes())

    def delete(self, collection_id: str) -> None:
        """Delete the metadata record. No error if absent."""
        self.store.delete(meta_key(collection_id))
