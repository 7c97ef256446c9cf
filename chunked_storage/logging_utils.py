"""
Logger naming and collection context for chunk storage.

Every module logs under ``chunked_storage.<component>``, so hosts can tune
the engine (``collection``, ``bulk``, ``reader``, ``metadata``) separately
from the backends (``memory``, ``duckdb``, ``cosmos``). Collection loggers
attach ``collection_id`` to each record as an attribute that handlers and
formatters can filter or render.
"""

import logging
from collections.abc import MutableMapping
from typing import Any

ROOT_LOGGER_NAME = "chunked_storage"


def get_storage_logger(name: str) -> logging.Logger:
    """
    Get a logger for a storage component.

    Args:
        name: Component name (e.g., 'collection', 'duckdb')

    Returns:
        Logger named 'chunked_storage.{name}'
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class CollectionLoggerAdapter(logging.LoggerAdapter):
    """
    Stamps ``collection_id`` on every record a collection emits.

    Extra fields passed by the caller are kept; the collection id wins on
    conflict.
    """

    def __init__(self, logger: logging.Logger, collection_id: str):
        super().__init__(logger, {"collection_id": collection_id})

    @property
    def collection_id(self) -> str:
        return self.extra["collection_id"]

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs
