"""JSON-file implementation of the document store."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from .repository import DocumentStore

logger = logging.getLogger(__name__)


class JsonFileDocumentStore(DocumentStore):
    """One pretty-printed ``<key>.json`` file per document in a directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Dict[str, Any]:
        path = self._path(key)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            logger.error(f"Ignoring unreadable document {path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def put(self, key: str, document: Dict[str, Any]) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2)
        os.replace(tmp_path, path)
