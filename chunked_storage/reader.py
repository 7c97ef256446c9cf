"""
Sequential reads over a chunk collection.

ChunkSequence yields chunks lazily in index order; assemble() joins them.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from .logging_utils import get_storage_logger

if TYPE_CHECKING:
    from .collection import ChunkCollection

logger = get_storage_logger("reader")


class ChunkSequence:
    """Lazy, restartable view of a collection's chunks.

    The chunk count is read once when the sequence is created and fixes
    ``len()``. Each ``iter()`` starts again at index 0 and reads one chunk
    per step. Mutating the collection while iterating leaves the positional
    correspondence undefined.
    """

    def __init__(self, collection: ChunkCollection):
        self.collection = collection
        self._count = collection.count

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[bytes]:
        for index in range(self._count):
            chunk = self.collection._read_chunk(index)
            if chunk is None:
                # A gap means the collection changed underneath us
                logger.warning(
                    f"Chunk {index} of {self.collection.id} missing; "
                    f"stopping after {index} of {self._count} chunks"
                )
                return
            yield chunk

    def __repr__(self) -> str:
        return f"ChunkSequence(id={self.collection.id!r}, count={self._count})"


def assemble(collection: ChunkCollection) -> bytes:
    """Concatenate every chunk of a collection in index order.

    Warning: O(total_bytes) in both time and peak memory. Prefer iterating
    ChunkSequence for large collections.
    """
    return b"".join(ChunkSequence(collection))
