"""
Tests for DuckDB store backend.

Uses real DuckDB (in-memory or temp file) for accurate testing.
"""

import pytest

from chunked_storage import (
    ChunkCollection,
    EntryTooLargeError,
    IndexOutOfBoundsError,
    StorageIOError,
    ValidationError,
)
from chunked_storage.backends.duckdb import DuckDBStore, DuckDBStoreConfig


class TestDuckDBInitialization:
    """Tests for DuckDB store initialization."""

    def test_create_with_defaults(self, monkeypatch):
        """Store creates with default configuration."""
        monkeypatch.delenv("CHUNKED_STORAGE_DUCKDB_PATH", raising=False)
        store = DuckDBStore.create()
        assert store._initialized is True
        store.close()

    def test_config_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CHUNKED_STORAGE_DUCKDB_PATH", str(tmp_path / "kv.duckdb"))
        monkeypatch.setenv("CHUNKED_STORAGE_DUCKDB_TABLE", "blobs")
        monkeypatch.setenv("CHUNKED_STORAGE_MAX_ENTRY_SIZE", "1024")

        config = DuckDBStoreConfig.from_env()

        assert config.db_path == str(tmp_path / "kv.duckdb")
        assert config.table == "blobs"
        assert config.max_entry_size == 1024

    def test_invalid_table_name_rejected(self):
        with pytest.raises(ValidationError):
            DuckDBStore(DuckDBStoreConfig(table="kv; DROP TABLE x"))

    def test_use_before_initialize_fails(self):
        store = DuckDBStore(DuckDBStoreConfig())

        with pytest.raises(StorageIOError):
            store.get("k")

    def test_initialize_is_idempotent(self, duckdb_store):
        duckdb_store.set("k", b"v")
        duckdb_store.initialize()

        assert duckdb_store.get("k") == b"v"


class TestDuckDBStoreOperations:
    """Point operations against a real table."""

    def test_get_absent(self, duckdb_store):
        assert duckdb_store.get("missing") is None

    def test_set_get_binary(self, duckdb_store):
        value = bytes(range(256))
        duckdb_store.set("k", value)

        assert duckdb_store.get("k") == value

    def test_empty_value_is_present(self, duckdb_store):
        duckdb_store.set("k", b"")

        assert duckdb_store.get("k") == b""

    def test_overwrite(self, duckdb_store):
        duckdb_store.set("k", b"one")
        duckdb_store.set("k", b"two")

        assert duckdb_store.get("k") == b"two"
        assert duckdb_store.keys() == ["k"]

    def test_delete_is_idempotent(self, duckdb_store):
        duckdb_store.set("k", b"v")
        duckdb_store.delete("k")
        duckdb_store.delete("k")

        assert duckdb_store.get("k") is None

    def test_keys_with_prefix(self, duckdb_store):
        for key in ("chunk:a:1", "chunk:a:0", "meta:a", "chunk:b:0"):
            duckdb_store.set(key, b"x")

        assert duckdb_store.keys("chunk:a:") == ["chunk:a:0", "chunk:a:1"]

    def test_entry_limit(self):
        store = DuckDBStore.create(DuckDBStoreConfig(max_entry_size=2))
        try:
            with pytest.raises(EntryTooLargeError):
                store.set("k", b"abc")
        finally:
            store.close()

    def test_persists_to_file(self, tmp_path):
        config = DuckDBStoreConfig(db_path=tmp_path / "chunks.duckdb")

        with DuckDBStore.create(config) as store:
            ChunkCollection.open(store, "doc").write_chunked(b"persisted content", 5)

        with DuckDBStore.create(config) as store:
            doc = ChunkCollection.open(store, "doc")
            assert doc.count == 4
            assert doc.assemble() == b"persisted content"


class TestDuckDBTransactions:
    """BEGIN/COMMIT/ROLLBACK around collection operations."""

    def test_commit(self, duckdb_store):
        doc = ChunkCollection.open(duckdb_store, "doc")

        with duckdb_store.transaction():
            doc.push(b"A")
            doc.push(b"B")

        assert doc.assemble() == b"AB"

    def test_rollback_restores_collection(self, duckdb_store):
        doc = ChunkCollection.open(duckdb_store, "doc")
        doc.write_chunked(b"ABCDEF", 2)

        with pytest.raises(RuntimeError):
            with duckdb_store.transaction():
                doc.write_chunked(b"XYZ", 1)
                raise RuntimeError("host aborted")

        assert doc.assemble() == b"ABCDEF"
        assert doc.version == 3

    def test_rollback_on_precondition_failure(self, duckdb_store):
        doc = ChunkCollection.open(duckdb_store, "doc")
        doc.push(b"A")

        with pytest.raises(IndexOutOfBoundsError):
            with duckdb_store.transaction():
                doc.push(b"B")
                doc.set(5, b"bad")

        assert list(doc) == [b"A"]

    def test_nested_transaction_rejected(self, duckdb_store):
        with duckdb_store.transaction():
            with pytest.raises(StorageIOError):
                with duckdb_store.transaction():
                    pass


class TestCollectionsOnAnyStore:
    """Core scenarios behave the same on every local backend."""

    def test_insert_and_remove(self, any_store, consistent):
        doc = ChunkCollection.open(any_store, "doc")
        doc.push(b"AB")
        doc.push(b"CD")

        doc.insert(1, b"XY")
        assert list(doc) == [b"AB", b"XY", b"CD"]
        assert doc.total_bytes == 6
        consistent(doc)

        assert doc.remove(0) == b"AB"
        assert list(doc) == [b"XY", b"CD"]
        consistent(doc)

    def test_clear_leaves_no_keys(self, any_store):
        doc = ChunkCollection.open(any_store, "doc")
        doc.write_chunked(b"0123456789", 3)

        doc.clear()

        assert any_store.keys() == []

    def test_append(self, any_store):
        doc = ChunkCollection.open(any_store, "doc")
        doc.push(b"AB")

        doc.append(b"Z", 3)
        doc.append(b"Q", 3)

        assert list(doc) == [b"ABZ", b"Q"]

    def test_remove_leaves_no_stray_tail(self, any_store):
        doc = ChunkCollection.open(any_store, "doc")
        doc.write_chunked(b"ABC", 1)

        doc.remove(0)

        assert any_store.keys("chunk:doc:") == ["chunk:doc:0", "chunk:doc:1"]
        assert any_store.keys("meta:") == ["meta:doc"]

    def test_nested_transaction_reported_alike(self, any_store):
        with any_store.transaction():
            with pytest.raises(StorageIOError) as exc_info:
                with any_store.transaction():
                    pass

        assert exc_info.value.operation == "transaction"
