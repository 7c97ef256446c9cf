"""
Bulk writes for chunk collections.

This module handles:
- Splitting arbitrary content into fixed-size chunks (write_chunked)
- Appending to the tail chunk while it has room (append)

Stores cap the size of a single entry, so callers should pick chunk
sizes at or below the store's ``max_entry_size``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .exceptions import ValidationError
from .logging_utils import get_storage_logger

if TYPE_CHECKING:
    from .collection import ChunkCollection

logger = get_storage_logger("bulk")

# Conservative default chunk size, well under common document-store limits
DEFAULT_CHUNK_SIZE = 400_000  # 400KB per chunk


def split_content(content: bytes, chunk_size: int) -> list[bytes]:
    """Split content into consecutive chunk_size slices.

    Every slice is exactly chunk_size bytes except the last, which holds the
    remainder. Empty content yields no slices.

    Raises:
        ValidationError: If chunk_size is not positive
    """
    if chunk_size <= 0:
        raise ValidationError("chunk_size", "must be greater than zero", str(chunk_size))
    return [content[offset : offset + chunk_size] for offset in range(0, len(content), chunk_size)]


def write_chunked(collection: ChunkCollection, content: bytes, chunk_size: int) -> int:
    """Replace a collection's contents with content split into chunks.

    The collection is cleared first, so the final state depends only on
    content and chunk_size. The version restarts from zero and ends at the
    number of chunks written.

    Args:
        collection: Target collection
        content: Bytes to store
        chunk_size: Size of every chunk except possibly the last

    Returns:
        Number of chunks written

    Raises:
        ValidationError: If chunk_size is not positive
    """
    # Validate before clearing so a bad size leaves the collection untouched
    pieces = split_content(content, chunk_size)

    collection.clear()
    for piece in pieces:
        collection.push(piece)

    logger.debug(
        f"Wrote {len(content)} bytes to {collection.id} as {len(pieces)} chunks of {chunk_size}"
    )
    return len(pieces)


def append(collection: ChunkCollection, content: bytes, max_chunk_size: int) -> int:
    """Append content to the last chunk, or push it as a new chunk.

    Content is merged into the last chunk with a single ``set`` when the
    result fits in max_chunk_size; otherwise it is pushed whole. Content
    larger than max_chunk_size is never split: it becomes one oversized
    chunk and the caller is responsible for sizing it.

    Returns:
        Index of the chunk that received the content
    """
    meta = collection.meta()
    if meta.count == 0:
        return collection.push(content)

    last_index = meta.count - 1
    last = collection.get(last_index)
    if last is not None and len(last) + len(content) <= max_chunk_size:
        collection.set(last_index, last + content)
        return last_index

    if len(content) > max_chunk_size:
        logger.debug(
            f"Appending {len(content)} bytes to {collection.id} as one chunk "
            f"larger than max_chunk_size {max_chunk_size}"
        )
    return collection.push(content)
