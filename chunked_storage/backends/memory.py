"""
In-memory store backend.

Dict-backed store for tests, caching layers and embedded use.
Values are copied to immutable ``bytes`` on write so callers cannot
mutate stored chunks through a retained ``bytearray``.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from ..exceptions import StorageIOError
from ..logging_utils import get_storage_logger
from .base import KeyValueStore

logger = get_storage_logger("memory")


class MemoryStore(KeyValueStore):
    """Key-value store held in a Python dict.

    Supports transactions by snapshotting the dict on entry and restoring
    it when the block raises. Transactions do not nest.
    """

    def __init__(self, max_entry_size: int | None = None):
        """
        Initialize an empty memory store.

        Args:
            max_entry_size: Optional per-entry size limit in bytes
        """
        self.max_entry_size = max_entry_size
        self._data: dict[str, bytes] = {}
        self._snapshot: dict[str, bytes] | None = None

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self.check_entry_size(key, value)
        self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    @property
    def supports_transactions(self) -> bool:
        return True

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._snapshot is not None:
            raise StorageIOError("transaction", cause=RuntimeError("Transactions do not nest"))

        self._snapshot = dict(self._data)
        try:
            yield
        except BaseException:
            logger.debug(f"Rolling back memory transaction ({len(self._snapshot)} entries)")
            self._data = self._snapshot
            raise
        finally:
            self._snapshot = None

    def keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with prefix, sorted."""
        return sorted(k for k in self._data if k.startswith(prefix))

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data
