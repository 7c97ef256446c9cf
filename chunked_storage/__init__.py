"""
Chunked Storage

Ordered, randomly addressable collections of byte chunks on top of
key-value stores whose entries have a bounded size.

Provides:
- Chunk collections with index-shifting insert/remove and version tracking
- Auto-chunked writes and size-aware appends
- Lazy in-order reads and full assembly
- Store backends (memory, DuckDB, Cosmos DB)

Usage:

    >>> from chunked_storage import ChunkCollection, MemoryStore
    >>> store = MemoryStore()
    >>> log = ChunkCollection.open(store, "build-log")
    >>> log.write_chunked(b"ABCDEFGHIJ", chunk_size=4)
    3
    >>> log.get(2)
    b'IJ'
    >>> log.append(b"K", max_chunk_size=4)
    2
    >>> log.assemble()
    b'ABCDEFGHIJK'

Backend Selection:

    # In-memory, for tests and caches
    from chunked_storage.backends import MemoryStore

    # DuckDB for local files and development
    from chunked_storage.backends.duckdb import DuckDBStore, DuckDBStoreConfig

    # Cosmos DB for cloud storage (requires the 'cosmos' extra)
    from chunked_storage.backends.cosmos import CosmosStore, CosmosStoreConfig

    # Or pick from CHUNKED_STORAGE_BACKEND
    from chunked_storage.backends import create_store
"""

from .backends import KeyValueStore, MemoryStore, create_store
from .bulk import DEFAULT_CHUNK_SIZE, split_content
from .collection import ChunkCollection

# Exceptions
from .exceptions import (
    AuthenticationError,
    ChunkStorageError,
    EntryTooLargeError,
    IndexOutOfBoundsError,
    StorageConnectionError,
    StorageIOError,
    StorageLimitExceededError,
    ValidationError,
    VersionConflictError,
)
from .keys import chunk_key, meta_key, validate_collection_id
from .metadata import ChunkMeta, MetadataStore
from .reader import ChunkSequence

# Conditional imports for optional backends
try:
    from .backends.duckdb import DuckDBStore, DuckDBStoreConfig  # noqa: F401

    _has_duckdb = True
except ImportError:
    _has_duckdb = False

try:
    from .backends.cosmos import CosmosStore, CosmosStoreConfig  # noqa: F401

    _has_cosmos = True
except ImportError:
    _has_cosmos = False


__all__ = [
    # Core
    "ChunkCollection",
    "ChunkMeta",
    "ChunkSequence",
    "MetadataStore",
    "DEFAULT_CHUNK_SIZE",
    "split_content",
    # Keys
    "meta_key",
    "chunk_key",
    "validate_collection_id",
    # Stores
    "KeyValueStore",
    "MemoryStore",
    "create_store",
    # Exceptions
    "ChunkStorageError",
    "IndexOutOfBoundsError",
    "ValidationError",
    "VersionConflictError",
    "StorageLimitExceededError",
    "EntryTooLargeError",
    "StorageIOError",
    "StorageConnectionError",
    "AuthenticationError",
]

# Add optional exports
if _has_duckdb:
    __all__.extend(["DuckDBStore", "DuckDBStoreConfig"])

if _has_cosmos:
    __all__.extend(["CosmosStore", "CosmosStoreConfig"])

__version__ = "0.1.0"
