"""In-memory implementation of the document store."""

from __future__ import annotations

import copy
from typing import Any, Dict

from .repository import DocumentStore


class InMemoryDocumentStore(DocumentStore):
    """Store documents in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts.
    """

    def __init__(self) -> None:
        self._documents: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Dict[str, Any]:
        return copy.deepcopy(self._documents.get(key, {}))

    def put(self, key: str, document: Dict[str, Any]) -> None:
        self._documents[key] = copy.deepcopy(document)
