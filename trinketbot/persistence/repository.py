"""Document store abstraction."""

from __future__ import annotations

from typing import Any, Dict, Protocol


class DocumentStore(Protocol):
    """Protocol for key → document persistence backends.

    Writes replace the whole document; callers read, mutate in memory and
    write the full mapping back.
    """

    def get(self, key: str) -> Dict[str, Any]:
        """Return the stored document, or an empty mapping."""

    def put(self, key: str, document: Dict[str, Any]) -> None:
        """Overwrite the document stored under ``key``."""
