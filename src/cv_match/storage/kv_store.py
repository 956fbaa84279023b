"""SQLite-backed string key-value store (all values are JSON-encoded strings)."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any

from cv_match.errors import StorageCorruption

DEFAULT_DB_PATH = Path.home() / ".cv-match" / "store.db"


class KeyValueStore:
    """Local key-value table shared by the account, history and preference stores."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def get(self, key: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)",
                (key, value),
            )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))


def decode_json(key: str, raw: str) -> Any:
    """Parse a stored value, raising StorageCorruption on malformed JSON."""
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise StorageCorruption(key, cause=e) from e
