"""
Chunk collections over a key-value store.

A collection is an ordered list of byte chunks where each chunk lives in
its own store entry, keyed by collection id and position. Position is the
identity of a chunk: inserting or removing anywhere but the tail re-keys
every chunk after that position, so prefer ``push`` and tail removal on
hot paths.

Usage:

    >>> from chunked_storage import ChunkCollection, MemoryStore
    >>> store = MemoryStore()
    >>> doc = ChunkCollection.open(store, "readme")
    >>> doc.push(b"Hello, ")
    0
    >>> doc.push(b"World!")
    1
    >>> doc.assemble()
    b'Hello, World!'
"""

from __future__ import annotations

from collections.abc import Iterator

from . import bulk, reader
from .backends.base import KeyValueStore
from .exceptions import (
    IndexOutOfBoundsError,
    StorageLimitExceededError,
    ValidationError,
    VersionConflictError,
)
from .keys import chunk_key, validate_collection_id
from .logging_utils import CollectionLoggerAdapter, get_storage_logger
from .metadata import UINT32_MAX, ChunkMeta, MetadataStore

logger = get_storage_logger("collection")

BytesLike = bytes | bytearray | memoryview


def _as_bytes(data: BytesLike) -> bytes:
    """Normalize chunk payloads to immutable bytes."""
    if isinstance(data, str):
        raise ValidationError("data", "chunks are bytes; encode text before storing")
    if isinstance(data, int):
        raise ValidationError("data", "expected a bytes-like object, got int", repr(data))
    try:
        return bytes(data)
    except TypeError as e:
        raise ValidationError(
            "data", f"expected a bytes-like object, got {type(data).__name__}"
        ) from e


class ChunkCollection:
    """
    Ordered, randomly addressable chunks stored one per store entry.

    Every call re-reads metadata from the store; nothing is cached between
    calls. Reads outside ``[0, count)`` return ``None``. ``set`` and
    ``insert`` raise IndexOutOfBoundsError on bad indices before touching
    the store.
    """

    def __init__(self, store: KeyValueStore, collection_id: str):
        """
        Bind a collection id to a store.

        Nothing is written until the first mutation.

        Args:
            store: Backing key-value store
            collection_id: Collection namespace (letters, digits, '_', '.', '-')
        """
        self.store = store
        self._id = validate_collection_id(collection_id)
        self._meta_store = MetadataStore(store)
        self._log = CollectionLoggerAdapter(logger, self._id)

    @classmethod
    def open(cls, store: KeyValueStore, collection_id: str) -> ChunkCollection:
        """Create or open a chunk collection."""
        return cls(store, collection_id)

    @property
    def id(self) -> str:
        return self._id

    # =========================================================================
    # Metadata
    # =========================================================================

    def meta(self) -> ChunkMeta:
        """Get metadata for this collection (zero default if never written)."""
        return self._meta_store.read(self._id)

    @property
    def count(self) -> int:
        return self.meta().count

    @property
    def total_bytes(self) -> int:
        return self.meta().total_bytes

    @property
    def version(self) -> int:
        return self.meta().version

    def is_empty(self) -> bool:
        return self.meta().is_empty()

    def ensure_version(self, expected: int) -> ChunkMeta:
        """Check that the stored version matches the one a caller read earlier.

        This is a read-and-compare, not compare-and-set: it detects that
        another invocation changed the collection, it does not lock it.

        Returns:
            Current metadata

        Raises:
            VersionConflictError: If the stored version differs
        """
        meta = self.meta()
        if meta.version != expected:
            raise VersionConflictError(self._id, expected, meta.version)
        return meta

    def _save_meta(self, meta: ChunkMeta) -> None:
        self._meta_store.write(self._id, meta)

    def _check_limits(self, meta: ChunkMeta) -> None:
        for field, value in meta.to_dict().items():
            if value > UINT32_MAX:
                raise StorageLimitExceededError(self._id, field, value)

    def _read_chunk(self, index: int) -> bytes | None:
        return self.store.get(chunk_key(self._id, index))

    def _write_chunk(self, index: int, data: bytes) -> None:
        self.store.set(chunk_key(self._id, index), data)

    # =========================================================================
    # Read Operations
    # =========================================================================

    def get(self, index: int) -> bytes | None:
        """Get a single chunk by index.

        Returns:
            Chunk bytes, or None if index is outside ``[0, count)``.
            A present empty chunk is ``b""``, never None.
        """
        if index < 0 or index >= self.count:
            return None
        return self._read_chunk(index)

    def get_range(self, start: int, count: int) -> list[bytes]:
        """Get up to count chunks starting at start.

        Returns the chunks of ``[start, start + count)`` that exist in the
        collection; indices outside it are omitted.
        """
        end = min(start + max(count, 0), self.count)
        result: list[bytes] = []
        for i in range(max(start, 0), end):
            chunk = self._read_chunk(i)
            if chunk is not None:
                result.append(chunk)
        return result

    def iter(self) -> reader.ChunkSequence:
        """Iterate over all chunks in index order.

        The chunk count is captured now; do not mutate while iterating.
        """
        return reader.ChunkSequence(self)

    def assemble(self) -> bytes:
        """Concatenate all chunks.

        Warning: holds the whole content in memory.
        """
        return reader.assemble(self)

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.iter())

    # =========================================================================
    # Write Operations
    # =========================================================================

    def push(self, data: BytesLike) -> int:
        """Append a chunk to the end.

        Returns:
            Index of the new chunk
        """
        data = _as_bytes(data)
        meta = self.meta()
        index = meta.count

        meta.count += 1
        meta.total_bytes += len(data)
        meta.version += 1
        self._check_limits(meta)

        self._write_chunk(index, data)
        self._save_meta(meta)

        self._log.debug(f"Pushed chunk {index} ({len(data)} bytes)")
        return index

    def set(self, index: int, data: BytesLike) -> None:
        """Replace the chunk at index.

        Raises:
            IndexOutOfBoundsError: If index is not in ``[0, count)``
        """
        data = _as_bytes(data)
        meta = self.meta()
        if index < 0 or index >= meta.count:
            raise IndexOutOfBoundsError("set", index, meta.count, self._id)

        old = self._read_chunk(index)
        if old is not None:
            meta.total_bytes -= len(old)
        meta.total_bytes += len(data)
        meta.version += 1
        self._check_limits(meta)

        self._write_chunk(index, data)
        self._save_meta(meta)

        self._log.debug(f"Replaced chunk {index} ({len(data)} bytes)")

    def insert(self, index: int, data: BytesLike) -> None:
        """Insert a chunk at index, shifting later chunks up by one.

        ``insert(count, data)`` is equivalent to ``push(data)``.

        Raises:
            IndexOutOfBoundsError: If index is not in ``[0, count]``
        """
        data = _as_bytes(data)
        meta = self.meta()
        if index < 0 or index > meta.count:
            raise IndexOutOfBoundsError("insert", index, meta.count, self._id)

        old_count = meta.count
        meta.count += 1
        meta.total_bytes += len(data)
        meta.version += 1
        self._check_limits(meta)

        # Move from the tail down so nothing is overwritten before it is read
        for i in range(old_count - 1, index - 1, -1):
            chunk = self._read_chunk(i)
            if chunk is not None:
                self._write_chunk(i + 1, chunk)

        self._write_chunk(index, data)
        self._save_meta(meta)

        self._log.debug(
            f"Inserted chunk {index} ({len(data)} bytes), shifted {old_count - index}"
        )

    def remove(self, index: int) -> bytes | None:
        """Remove the chunk at index, shifting later chunks down by one.

        Returns:
            The removed chunk, or None if index is outside ``[0, count)``
        """
        meta = self.meta()
        if index < 0 or index >= meta.count:
            return None

        removed = self._read_chunk(index)

        for i in range(index, meta.count - 1):
            chunk = self._read_chunk(i + 1)
            if chunk is not None:
                self._write_chunk(i, chunk)

        self.store.delete(chunk_key(self._id, meta.count - 1))

        if removed is not None:
            meta.total_bytes -= len(removed)
        meta.count -= 1
        meta.version += 1
        self._save_meta(meta)

        self._log.debug(f"Removed chunk {index}, shifted {meta.count - index}")
        return removed

    def clear(self) -> None:
        """Delete every chunk and the metadata record.

        The collection returns to its never-written state: version reads
        back as 0, not incremented.
        """
        meta = self.meta()
        for i in range(meta.count):
            self.store.delete(chunk_key(self._id, i))
        self._meta_store.delete(self._id)

        if meta.count:
            self._log.debug(f"Cleared {meta.count} chunks ({meta.total_bytes} bytes)")

    # =========================================================================
    # Bulk Operations
    # =========================================================================

    def write_chunked(self, content: BytesLike, chunk_size: int = bulk.DEFAULT_CHUNK_SIZE) -> int:
        """Replace the collection with content split into chunk_size pieces.

        Returns:
            Number of chunks written
        """
        return bulk.write_chunked(self, _as_bytes(content), chunk_size)

    def append(self, content: BytesLike, max_chunk_size: int = bulk.DEFAULT_CHUNK_SIZE) -> int:
        """Append content to the last chunk, or as a new chunk if it would not fit.

        Returns:
            Index of the chunk that received the content
        """
        return bulk.append(self, _as_bytes(content), max_chunk_size)

    def __repr__(self) -> str:
        return f"ChunkCollection(id={self._id!r}, store={type(self.store).__name__})"
