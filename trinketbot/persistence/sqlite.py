"""SQLite implementation of the document store."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict

from .repository import DocumentStore


class SQLiteDocumentStore(DocumentStore):
    """Persist documents as JSON blobs in a single SQLite table."""

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS documents (
                key TEXT PRIMARY KEY,
                body TEXT NOT NULL
            )
            """
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    # Store API
    def get(self, key: str) -> Dict[str, Any]:
        cur = self._conn.cursor()
        cur.execute("SELECT body FROM documents WHERE key = ?", (key,))
        row = cur.fetchone()
        if row is None:
            return {}
        return json.loads(row["body"])

    def put(self, key: str, document: Dict[str, Any]) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            INSERT INTO documents (key, body) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET body = excluded.body
            """,
            (key, json.dumps(document)),
        )
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()
