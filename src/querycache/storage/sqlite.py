"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

SQLite-backed persistent key-value store.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path

from .base import (
    StorageBackend,
    StorageError,
    StorageQuotaExceededError,
    StorageUnavailableError,
)

logger = logging.getLogger("querycache.storage.sqlite")


class SQLiteStorage(StorageBackend):
    """
    File-backed store whose contents survive process restarts.

    Uses a single ``kv(key TEXT PRIMARY KEY, value TEXT)`` table. Rows from
    other applications may share the table; the engine filters by prefix.

    Args:
        path: Database file path, or ``":memory:"``.
        quota_bytes: Optional cap on the summed UTF-8 size of all keys and
            values in the table.
    """

    backend_id: str = "sqlite"

    def __init__(self, path: str | Path, *, quota_bytes: int | None = None) -> None:
        if quota_bytes is not None and quota_bytes < 0:
            raise ValueError("quota_bytes must be >= 0")
        self.path = str(path)
        self._quota_bytes = quota_bytes
        self._lock = threading.RLock()
        if self.path != ":memory:":
            Path(self.path).resolve().parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn: sqlite3.Connection | None = sqlite3.connect(
                self.path, timeout=30.0, check_same_thread=False
            )
            self._conn.execute("PRAGMA busy_timeout = 30000;")
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StorageUnavailableError(f"Cannot open SQLite store at {self.path}: {exc}") from exc

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageUnavailableError("SQLite store is closed")
        return self._conn

    @staticmethod
    def _is_full(exc: sqlite3.Error) -> bool:
        code = getattr(exc, "sqlite_errorcode", None)
        if code is not None:
            return code == sqlite3.SQLITE_FULL
        return "full" in str(exc).lower()

    @staticmethod
    def _utf8_size(*parts: str) -> int:
        try:
            return sum(len(part.encode("utf-8")) for part in parts)
        except UnicodeEncodeError as exc:
            raise StorageError(f"Text is not valid UTF-8: {exc}") from exc

    def get(self, key: str) -> str | None:
        self._utf8_size(key)
        with self._lock:
            try:
                row = self._connection().execute(
                    "SELECT value FROM kv WHERE key = ?", (key,)
                ).fetchone()
            except sqlite3.Error as exc:
                raise StorageUnavailableError(f"SQLite read failed: {exc}") from exc
        return None if row is None else row[0]

    def _used_bytes_excluding(self, conn: sqlite3.Connection, key: str) -> int:
        row = conn.execute(
            "SELECT COALESCE(SUM(LENGTH(CAST(key AS BLOB)) + LENGTH(CAST(value AS BLOB))), 0)"
            " FROM kv WHERE key != ?",
            (key,),
        ).fetchone()
        return int(row[0])

    def set(self, key: str, value: str) -> None:
        size = self._utf8_size(key, value)
        with self._lock:
            conn = self._connection()
            try:
                if self._quota_bytes is not None:
                    if self._used_bytes_excluding(conn, key) + size > self._quota_bytes:
                        raise StorageQuotaExceededError(
                            f"Write of '{key}' exceeds quota of {self._quota_bytes} bytes"
                        )
                conn.execute(
                    "INSERT INTO kv (key, value) VALUES (?, ?)"
                    " ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
                conn.commit()
            except sqlite3.Error as exc:
                conn.rollback()
                if self._is_full(exc):
                    raise StorageQuotaExceededError(f"SQLite store is full: {exc}") from exc
                raise StorageUnavailableError(f"SQLite write failed: {exc}") from exc

    def remove(self, key: str) -> None:
        self._utf8_size(key)
        with self._lock:
            conn = self._connection()
            try:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                conn.commit()
            except sqlite3.Error as exc:
                conn.rollback()
                raise StorageUnavailableError(f"SQLite delete failed: {exc}") from exc

    def list_keys(self, prefix: str = "") -> list[str]:
        self._utf8_size(prefix)
        with self._lock:
            try:
                rows = self._connection().execute(
                    "SELECT key FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
                    (len(prefix), prefix),
                ).fetchall()
            except sqlite3.Error as exc:
                raise StorageUnavailableError(f"SQLite scan failed: {exc}") from exc
        return [row[0] for row in rows]

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.debug("Closed SQLite store at %s", self.path)

    def __enter__(self) -> "SQLiteStorage":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
