"""
Cosmos DB store backend.

Stores each entry as one document in a single container:
- id: the store key
- partition_key: the collection id embedded in the key, so a collection's
  metadata and chunks share a logical partition
- value: base64-encoded bytes

Cosmos DB has a 2MB document size limit. Base64 inflates values by 4/3, so
entries are capped at MAX_ENTRY_SIZE raw bytes.
"""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from azure.cosmos import ContainerProxy, CosmosClient, PartitionKey
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError
from azure.identity import DefaultAzureCredential

from ..exceptions import AuthenticationError, StorageConnectionError, StorageIOError
from ..logging_utils import get_storage_logger
from .base import KeyValueStore

logger = get_storage_logger("cosmos")

MAX_DOCUMENT_SIZE = 2_000_000  # Cosmos DB hard limit per document
MAX_ENTRY_SIZE = 1_400_000  # raw bytes; leaves room for base64 and document fields

DEFAULT_DATABASE = "chunked-storage"
DEFAULT_CONTAINER = "entries"

# Auth methods
AUTH_KEY = "key"
AUTH_DEFAULT_CREDENTIAL = "default_credential"


@dataclass
class CosmosStoreConfig:
    """Configuration for Cosmos store.

    Attributes:
        endpoint: Cosmos DB account endpoint URL
        database_name: Name of the database
        container_name: Name of the container holding entries
        auth_method: Authentication method ('key' or 'default_credential')
        key: Cosmos DB account key (only needed if auth_method='key')
        max_entry_size: Largest raw value accepted per entry
    """

    endpoint: str
    database_name: str = DEFAULT_DATABASE
    container_name: str = DEFAULT_CONTAINER
    auth_method: str = AUTH_DEFAULT_CREDENTIAL
    key: str | None = None
    max_entry_size: int = MAX_ENTRY_SIZE

    @classmethod
    def from_env(cls) -> CosmosStoreConfig:
        """Create config from environment variables.

        Expected environment variables:
        - CHUNKED_STORAGE_COSMOS_ENDPOINT: Cosmos DB account endpoint
        - CHUNKED_STORAGE_COSMOS_DATABASE: Database name
        - CHUNKED_STORAGE_COSMOS_CONTAINER: Container name
        - CHUNKED_STORAGE_COSMOS_AUTH_METHOD: 'key' or 'default_credential' (default)
        - CHUNKED_STORAGE_COSMOS_KEY: Account key (only if auth_method='key')

        Raises:
            AuthenticationError: If required environment variables are missing
        """
        endpoint = os.environ.get("CHUNKED_STORAGE_COSMOS_ENDPOINT")
        auth_method = os.environ.get("CHUNKED_STORAGE_COSMOS_AUTH_METHOD", AUTH_DEFAULT_CREDENTIAL)
        key = os.environ.get("CHUNKED_STORAGE_COSMOS_KEY")

        if not endpoint:
            raise AuthenticationError(
                "cosmos", "CHUNKED_STORAGE_COSMOS_ENDPOINT environment variable not set"
            )

        if auth_method == AUTH_KEY and not key:
            raise AuthenticationError(
                "cosmos", "CHUNKED_STORAGE_COSMOS_KEY required when auth_method='key'"
            )

        return cls(
            endpoint=endpoint,
            database_name=os.environ.get("CHUNKED_STORAGE_COSMOS_DATABASE", DEFAULT_DATABASE),
            container_name=os.environ.get("CHUNKED_STORAGE_COSMOS_CONTAINER", DEFAULT_CONTAINER),
            auth_method=auth_method,
            key=key,
        )


def partition_for(key: str) -> str:
    """Partition key value for a store key.

    ``meta:{id}`` and ``chunk:{id}:{n}`` both map to ``{id}``; keys outside
    that scheme use the key itself.
    """
    parts = key.split(":")
    return parts[1] if len(parts) >= 2 and parts[1] else key


class CosmosStore(KeyValueStore):
    """Key-value store backed by an Azure Cosmos DB container.

    Container partition key: /partition_key

    Transactions are not supported; a failed multi-entry operation can leave
    a partially written collection.
    """

    def __init__(self, config: CosmosStoreConfig, container: ContainerProxy | None = None):
        """Initialize Cosmos store.

        Args:
            config: Cosmos configuration
            container: Already-opened container (skips client setup)
        """
        self.config = config
        self.max_entry_size = config.max_entry_size
        self._client: CosmosClient | None = None
        self._credential: DefaultAzureCredential | None = None
        self._container: ContainerProxy | None = container
        self._initialized = container is not None

    @classmethod
    def create(cls, config: CosmosStoreConfig | None = None) -> CosmosStore:
        """Create and initialize a CosmosStore instance.

        Args:
            config: Cosmos configuration (defaults to env vars)
        """
        if config is None:
            config = CosmosStoreConfig.from_env()

        store = cls(config)
        store.initialize()
        return store

    def initialize(self) -> None:
        """Initialize connection and ensure the container exists."""
        if self._initialized:
            return

        try:
            if self.config.auth_method == AUTH_KEY:
                self._client = CosmosClient(self.config.endpoint, credential=self.config.key)
            else:
                # Use DefaultAzureCredential for managed identity, etc.
                self._credential = DefaultAzureCredential()
                self._client = CosmosClient(self.config.endpoint, credential=self._credential)

            database = self._client.create_database_if_not_exists(id=self.config.database_name)
            self._container = database.create_container_if_not_exists(
                id=self.config.container_name,
                partition_key=PartitionKey(path="/partition_key"),
            )

            self._initialized = True
            logger.info(f"Cosmos store initialized: {self.config.endpoint}")

        except CosmosHttpResponseError as e:
            if e.status_code == 401 or e.status_code == 403:
                raise AuthenticationError(self.config.endpoint, str(e)) from e
            raise StorageConnectionError(self.config.endpoint, e) from e

    def close(self) -> None:
        """Close the connection."""
        if self._client:
            self._client.__exit__(None, None, None)
            self._client = None

        if self._credential:
            self._credential.close()
            self._credential = None

        self._container = None
        self._initialized = False

    def _get_container(self, operation: str) -> ContainerProxy:
        if not self._initialized or self._container is None:
            raise StorageIOError(operation, cause=RuntimeError("Storage not initialized"))
        return self._container

    def get(self, key: str) -> bytes | None:
        container = self._get_container("get")
        try:
            doc = container.read_item(item=key, partition_key=partition_for(key))
        except CosmosResourceNotFoundError:
            return None
        except CosmosHttpResponseError as e:
            raise StorageIOError("get", key, e) from e
        return base64.b64decode(doc["value"])

    def set(self, key: str, value: bytes) -> None:
        container = self._get_container("set")
        self.check_entry_size(key, value)

        doc: dict[str, Any] = {
            "id": key,
            "partition_key": partition_for(key),
            "value": base64.b64encode(value).decode("ascii"),
            "size_bytes": len(value),
            "_type": "kv_entry",
            "updated_at": datetime.now(UTC).isoformat(),
        }
        try:
            container.upsert_item(body=doc)
        except CosmosHttpResponseError as e:
            raise StorageIOError("set", key, e) from e

    def delete(self, key: str) -> None:
        container = self._get_container("delete")
        try:
            container.delete_item(item=key, partition_key=partition_for(key))
        except CosmosResourceNotFoundError:
            pass
        except CosmosHttpResponseError as e:
            raise StorageIOError("delete", key, e) from e

    def keys(self, prefix: str = "") -> list[str]:
        container = self._get_container("keys")
        try:
            items = container.query_items(
                query="SELECT c.id FROM c WHERE STARTSWITH(c.id, @prefix)",
                parameters=[{"name": "@prefix", "value": prefix}],
                enable_cross_partition_query=True,
            )
            return sorted(item["id"] for item in items)
        except CosmosHttpResponseError as e:
            raise StorageIOError("keys", prefix, e) from e
