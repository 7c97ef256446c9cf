"""
Tests for logger naming and collection log context.
"""

import logging

import pytest

from chunked_storage import ChunkCollection, MemoryStore
from chunked_storage.backends.duckdb import DuckDBStore, DuckDBStoreConfig
from chunked_storage.logging_utils import CollectionLoggerAdapter, get_storage_logger


class TestStorageLoggers:
    def test_component_logger_name(self):
        assert get_storage_logger("duckdb").name == "chunked_storage.duckdb"

    def test_component_loggers_share_root(self):
        root = logging.getLogger("chunked_storage")

        assert get_storage_logger("collection").parent is root

    def test_backend_logs_under_component_name(self, caplog):
        with caplog.at_level(logging.INFO, logger="chunked_storage.duckdb"):
            store = DuckDBStore.create(DuckDBStoreConfig())
            store.close()

        assert any(r.name == "chunked_storage.duckdb" for r in caplog.records)

    def test_memory_rollback_logged(self, caplog):
        store = MemoryStore()

        with caplog.at_level(logging.DEBUG, logger="chunked_storage.memory"):
            with pytest.raises(RuntimeError):
                with store.transaction():
                    store.set("k", b"v")
                    raise RuntimeError("abort")

        assert [r.name for r in caplog.records] == ["chunked_storage.memory"]
        assert "Rolling back" in caplog.records[0].getMessage()


class TestCollectionLoggerAdapter:
    def test_stamps_collection_id(self, caplog):
        adapter = CollectionLoggerAdapter(get_storage_logger("collection"), "doc")

        with caplog.at_level(logging.INFO, logger="chunked_storage.collection"):
            adapter.info("pushed")

        assert adapter.collection_id == "doc"
        assert caplog.records[0].collection_id == "doc"

    def test_keeps_caller_extra(self, caplog):
        adapter = CollectionLoggerAdapter(get_storage_logger("collection"), "doc")

        with caplog.at_level(logging.INFO, logger="chunked_storage.collection"):
            adapter.info("wrote", extra={"chunks": 3, "collection_id": "other"})

        record = caplog.records[0]
        assert record.chunks == 3
        assert record.collection_id == "doc"

    def test_collection_mutations_logged_with_id(self, caplog, store):
        doc = ChunkCollection.open(store, "logged")

        with caplog.at_level(logging.DEBUG, logger="chunked_storage.collection"):
            doc.push(b"abc")
            doc.remove(0)

        messages = [(r.collection_id, r.getMessage()) for r in caplog.records]
        assert messages[0] == ("logged", "Pushed chunk 0 (3 bytes)")
        assert messages[1][0] == "logged"
        assert messages[1][1].startswith("Removed chunk 0")
