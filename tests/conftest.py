"""
Shared test configuration and fixtures.

Collections are tested against MemoryStore by default. The
``any_store`` fixture runs a test against every local backend.
"""

import pytest

from chunked_storage import ChunkCollection, MemoryStore
from chunked_storage.backends.duckdb import DuckDBStore, DuckDBStoreConfig


def chunks_of(collection: ChunkCollection) -> list[bytes | None]:
    """Read every chunk of a collection by index."""
    return [collection.get(i) for i in range(collection.count)]


def assert_consistent(collection: ChunkCollection) -> None:
    """Check metadata against the chunks actually stored."""
    meta = collection.meta()
    chunks = chunks_of(collection)

    assert all(chunk is not None for chunk in chunks), "gap inside [0, count)"
    assert meta.total_bytes == sum(len(c) for c in chunks)
    if meta.count == 0:
        assert meta.total_bytes == 0
    # Nothing stored past the tail
    assert collection._read_chunk(meta.count) is None


@pytest.fixture
def consistent():
    """Metadata/chunk consistency check, usable after every mutation."""
    return assert_consistent


@pytest.fixture
def read_all():
    """Reads every chunk of a collection by index."""
    return chunks_of


@pytest.fixture
def store() -> MemoryStore:
    """Fresh in-memory store."""
    return MemoryStore()


@pytest.fixture
def collection(store: MemoryStore) -> ChunkCollection:
    """Empty collection on a fresh in-memory store."""
    return ChunkCollection.open(store, "test")


@pytest.fixture
def duckdb_store():
    """Initialized in-memory DuckDB store."""
    store = DuckDBStore.create(DuckDBStoreConfig(db_path=":memory:"))
    yield store
    store.close()


@pytest.fixture(params=["memory", "duckdb"])
def any_store(request):
    """Each local backend in turn."""
    if request.param == "memory":
        yield MemoryStore()
    else:
        store = DuckDBStore.create(DuckDBStoreConfig(db_path=":memory:"))
        yield store
        store.close()
