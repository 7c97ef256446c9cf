"""Store key generation for chunk collections.

Centralizes the key format knowledge so callers never need to
construct store keys directly.

Metadata keys: meta:{collection_id}
Chunk keys:    chunk:{collection_id}:{index}

Indices are 0-based. Collection ids may not contain ``:``, so two
different ids never produce the same key and chunk keys never
collide with metadata keys.
"""

from __future__ import annotations

import re

from .exceptions import ValidationError

META_PREFIX = "meta"
CHUNK_PREFIX = "chunk"

MAX_COLLECTION_ID_LENGTH = 64

_COLLECTION_ID_RE = re.compile(r"[A-Za-z0-9_.\-]+")


def validate_collection_id(collection_id: str) -> str:
    """Check that a collection id is usable as a key namespace.

    Returns the id unchanged so it can be used inline.

    Raises:
        ValidationError: If the id is empty, too long, or has characters
            outside ``[A-Za-z0-9_.-]``.
    """
    if not isinstance(collection_id, str) or not collection_id:
        raise ValidationError("collection_id", "must be a non-empty string", repr(collection_id))
    if len(collection_id) > MAX_COLLECTION_ID_LENGTH:
        raise ValidationError(
            "collection_id",
            f"must be at most {MAX_COLLECTION_ID_LENGTH} characters",
            collection_id,
        )
    if not _COLLECTION_ID_RE.fullmatch(collection_id):
        raise ValidationError(
            "collection_id", "may only contain letters, digits, '_', '.' and '-'", collection_id
        )
    return collection_id


def meta_key(collection_id: str) -> str:
    """Generate the metadata key for a collection."""
    return f"{META_PREFIX}:{collection_id}"


def chunk_key(collection_id: str, index: int) -> str:
    """Generate the key of one chunk in a collection."""
    return f"{CHUNK_PREFIX}:{collection_id}:{index}"
