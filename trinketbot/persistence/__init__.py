"""Persistence layer for trinketbot records."""

from __future__ import annotations

import os
from typing import Optional

from ..config import TrinketConfig, load_config
from .inmemory import InMemoryDocumentStore
from .json_file import JsonFileDocumentStore
from .ledger import IsoLedger, SellerLedger
from .repository import DocumentStore
from .sqlite import SQLiteDocumentStore

_store_instance: DocumentStore | None = None


def get_store(
    database_url: Optional[str] = None, config: Optional[TrinketConfig] = None
) -> DocumentStore:
    """Factory function to obtain a document store.

    The backend is selected based on ``database_url`` which can be provided
    explicitly, via environment variable ``TRINKETBOT_DATABASE_URL`` or
    ``DATABASE_URL``, or from loaded configuration. When no database is
    configured, an in-memory store is returned.
    """

    global _store_instance
    if _store_instance is not None and database_url is None and config is None:
        return _store_instance

    config = config or load_config()
    database_url = (
        database_url
        or os.getenv("TRINKETBOT_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or getattr(config, "database_url", None)
    )

    if not database_url:
        _store_instance = InMemoryDocumentStore()
        return _store_instance

    if database_url.startswith("sqlite://"):
        path = database_url.replace("sqlite://", "", 1)
        _store_instance = SQLiteDocumentStore(path)
    elif database_url.startswith("file://"):
        _store_instance = JsonFileDocumentStore(database_url.replace("file://", "", 1))
    elif database_url.startswith("redis://") or database_url.startswith("rediss://"):
        from .redis import RedisDocumentStore

        _store_instance = RedisDocumentStore(database_url)
    else:
        raise ValueError(f"Unsupported database backend: {database_url}")

    return _store_instance


__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "IsoLedger",
    "JsonFileDocumentStore",
    "SQLiteDocumentStore",
    "SellerLedger",
    "get_store",
]
