"""Persisted key/value storage for the bearer credential."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Protocol

TOKEN_KEY = "fastmcp_access_token"
EXPIRY_KEY = "fastmcp_token_expiry"


class TokenStore(Protocol):
    """Minimal string key/value contract used by the token manager."""

    def get(self, key: str) -> str | None:
        """Return the stored value or None."""

    def set(self, key: str, value: str) -> None:
        """Insert or overwrite a value."""

    def delete(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""


class InMemoryTokenStore:
    """Process-local store used for tests and throwaway sessions."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class SqliteTokenStore:
    """SQLite-backed store that survives process restarts."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        _ensure_kv_table(self._path)

    def get(self, key: str) -> str | None:
        with sqlite3.connect(self._path) as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with sqlite3.connect(self._path) as conn:
            conn.execute(
                "INSERT INTO kv(key, value) VALUES(?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, value),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with sqlite3.connect(self._path) as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()


def _ensure_kv_table(db_path: Path) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
        )
        conn.commit()
