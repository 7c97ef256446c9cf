"""
Custom exceptions for chunked storage.

Collections and store backends raise these exceptions
for consistent error handling across backends.

Reading past the end of a collection is not an error: ``get`` and
``remove`` return ``None`` for indices outside ``[0, count)``.
"""


class ChunkStorageError(Exception):
    """Base exception for all chunked storage errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class IndexOutOfBoundsError(ChunkStorageError):
    """Raised when a mutating operation targets an index outside the collection.

    ``set`` requires ``index < count``; ``insert`` requires ``index <= count``.
    """

    def __init__(self, operation: str, index: int, count: int, collection_id: str | None = None):
        details = {"operation": operation, "index": index, "count": count}
        if collection_id:
            details["collection_id"] = collection_id
        super().__init__(
            f"Index out of bounds for {operation}: index {index}, count {count}",
            details,
        )
        self.operation = operation
        self.index = index
        self.count = count
        self.collection_id = collection_id


class ValidationError(ChunkStorageError):
    """Raised when argument validation fails."""

    def __init__(self, field: str, reason: str, value: str | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = value
        super().__init__(f"Validation failed for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value


class VersionConflictError(ChunkStorageError):
    """Raised when a collection's stored version differs from the expected one."""

    def __init__(self, collection_id: str, expected: int, actual: int):
        details = {
            "collection_id": collection_id,
            "expected_version": expected,
            "actual_version": actual,
        }
        super().__init__(
            f"Version conflict in collection {collection_id}: expected {expected}, found {actual}",
            details,
        )
        self.collection_id = collection_id
        self.expected = expected
        self.actual = actual


class StorageLimitExceededError(ChunkStorageError):
    """Raised when a metadata counter would exceed its persisted width."""

    def __init__(self, collection_id: str, field: str, value: int):
        details = {"collection_id": collection_id, "field": field, "value": value}
        super().__init__(
            f"Collection {collection_id} would exceed the {field} limit: {value}",
            details,
        )
        self.collection_id = collection_id
        self.field = field
        self.value = value


class EntryTooLargeError(ChunkStorageError):
    """Raised by a store when a value exceeds its per-entry size limit."""

    def __init__(self, key: str, size_bytes: int, max_bytes: int):
        details = {
            "key": key,
            "size_bytes": size_bytes,
            "max_bytes": max_bytes,
        }
        super().__init__(
            f"Entry {key} exceeds maximum size: {size_bytes} > {max_bytes} bytes",
            details,
        )
        self.key = key
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes


class StorageIOError(ChunkStorageError):
    """Raised when a storage I/O operation fails."""

    def __init__(self, operation: str, path: str | None = None, cause: Exception | None = None):
        details = {"operation": operation}
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
        message = f"Storage I/O error during {operation}"
        if path:
            message += f": {path}"
        super().__init__(message, details)
        self.operation = operation
        self.path = path
        self.cause = cause


class StorageConnectionError(ChunkStorageError):
    """Raised when connection to remote storage fails.

    Note: Named StorageConnectionError to avoid shadowing the builtin ConnectionError.
    """

    def __init__(self, endpoint: str, cause: Exception | None = None):
        details = {"endpoint": endpoint}
        if cause:
            details["cause"] = str(cause)
        super().__init__(f"Connection failed to {endpoint}", details)
        self.endpoint = endpoint
        self.cause = cause


class AuthenticationError(ChunkStorageError):
    """Raised when authentication to remote storage fails."""

    def __init__(self, endpoint: str, reason: str | None = None):
        details = {"endpoint": endpoint}
        if reason:
            details["reason"] = reason
        super().__init__(f"Authentication failed for {endpoint}", details)
        self.endpoint = endpoint
        self.reason = reason
