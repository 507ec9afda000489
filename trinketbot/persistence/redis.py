"""Redis implementation of the document store."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

try:
    import redis
except ImportError:
    redis = None

from .repository import DocumentStore


class RedisDocumentStore(DocumentStore):
    """Keep each document as a JSON string under ``trinketbot:<key>``."""

    def __init__(self, url: str = "redis://localhost:6379/0", client: Optional[Any] = None) -> None:
        if redis is None and client is None:
            raise ImportError("redis package is required for RedisDocumentStore")

        self.url = url
        self._redis = client or redis.Redis.from_url(url, decode_responses=True)

    def get(self, key: str) -> Dict[str, Any]:
        raw = self._redis.get(f"trinketbot:{key}")
        if not raw:
            return {}
        return json.loads(raw)

    def put(self, key: str, document: Dict[str, Any]) -> None:
        self._redis.set(f"trinketbot:{key}", json.dumps(document))
