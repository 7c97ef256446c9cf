"""
Abstract base class for key-value store backends.

Chunk collections only ever issue point reads, writes and deletes.
All store implementations (memory, DuckDB, Cosmos) must implement this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from ..exceptions import EntryTooLargeError, StorageIOError


class KeyValueStore(ABC):
    """
    Point-access key-value store holding raw bytes.

    Implementations:
    - return ``None`` from :meth:`get` for absent keys (absence is not an error)
    - overwrite unconditionally in :meth:`set`
    - treat :meth:`delete` of an absent key as a no-op

    ``max_entry_size`` is the largest value the store accepts in one entry,
    or ``None`` when the store imposes no limit. Callers pick chunk sizes
    at or below it.
    """

    max_entry_size: int | None = None

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Read the value stored at key, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Write value at key, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Absent keys are ignored."""

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with prefix, sorted."""

    @property
    def supports_transactions(self) -> bool:
        """Whether :meth:`transaction` groups writes atomically."""
        return False

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Group the writes of one top-level invocation.

        Everything written inside the block is committed on normal exit and
        discarded if the block raises. Stores without transaction support
        raise StorageIOError.
        """
        raise StorageIOError(
            "transaction",
            cause=NotImplementedError(f"{type(self).__name__} does not support transactions"),
        )
        yield  # pragma: no cover

    def close(self) -> None:
        """Release backend resources."""

    def check_entry_size(self, key: str, value: bytes) -> None:
        """Raise EntryTooLargeError if value exceeds ``max_entry_size``."""
        if self.max_entry_size is not None and len(value) > self.max_entry_size:
            raise EntryTooLargeError(key, len(value), self.max_entry_size)

    def __enter__(self) -> KeyValueStore:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
