"""
Key-Value Store - the persistence seam behind the shared snapshot

Each entity collection is written as one JSON blob under one key
("expenses_v1", "cards_v1", ...). Any backend that can get and set strings
by key works; SQLite is used for on-disk state so the writer (CLI / app) and
the read-only widget can share one file.

Fun fact: a phone widget typically reads blobs like these from a shared
app-group preference file - a key-value store is the lowest common
denominator every platform offers!
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Protocol

from moneytracker.kernel.retry import retry_on_sqlite_lock


class KeyValueStore(Protocol):
    """Protocol for snapshot backends"""

    def get(self, key: str) -> str | None:
        """Return the blob stored under key, or None"""
        ...

    def set(self, key: str, value: str) -> None:
        """Store (replace) the blob under key"""
        ...

    def delete(self, key: str) -> None:
        """Remove key if present"""
        ...

    def keys(self) -> list[str]:
        """List stored keys"""
        ...


class InMemoryKeyValueStore:
    """Dictionary-backed store for tests and throwaway sessions"""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class SQLiteKeyValueStore:
    """
    SQLite-based key-value store

    Schema:
    - snapshot table: key, value (JSON text), updated_at
    """

    def __init__(self, db_path: str | Path, *, read_only: bool = False) -> None:
        """
        Args:
            db_path: Path to SQLite database file
            read_only: Open with mode=ro; the schema is assumed to exist and
                any write fails with sqlite3.OperationalError
        """
        self.db_path = Path(db_path)
        self.read_only = read_only
        if not read_only:
            self._initialize_schema()

    def _initialize_schema(self) -> None:
        """Create tables if they don't exist"""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS snapshot (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections"""
        if self.read_only:
            conn = sqlite3.connect(f"{self.db_path.resolve().as_uri()}?mode=ro", uri=True)
        else:
            conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    @retry_on_sqlite_lock()
    def get(self, key: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM snapshot WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None

    @retry_on_sqlite_lock()
    def set(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO snapshot (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
            """,
                (key, value, datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()

    @retry_on_sqlite_lock()
    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM snapshot WHERE key = ?", (key,))
            conn.commit()

    def keys(self) -> list[str]:
        with self._connect() as conn:
            cursor = conn.execute("SELECT key FROM snapshot ORDER BY key")
            return [row["key"] for row in cursor.fetchall()]

    def updated_at(self, key: str) -> datetime | None:
        """When key was last written, or None if absent"""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT updated_at FROM snapshot WHERE key = ?", (key,)
            ).fetchone()
            return datetime.fromisoformat(row["updated_at"]) if row else None
