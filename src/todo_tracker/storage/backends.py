# src/todo_tracker/storage/backends.py

"""
Key-value backends for TaskStore.

All backends implement core.ports.KeyValueBackend:
- get(key) -> str | None
- set(key, value)     (single-key write is atomic)
- remove(key)         (idempotent)

Capacity failures are raised as StorageQuotaError; everything else is left
to propagate so the store can wrap it as a read/write error.
"""

from __future__ import annotations

import contextlib
import errno
import logging
import os
import re
import sqlite3
import threading
from pathlib import Path

from ..core.errors import StorageQuotaError

logger = logging.getLogger(__name__)

_QUOTA_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}
_FILE_KEY_RE = re.compile(r"[A-Za-z0-9_][A-Za-z0-9_.-]*")


class MemoryBackend:
    """
    In-process backend with an optional capacity ceiling.

    Behaves like browser local storage: the sum of all stored key/value sizes
    (in UTF-16 code units, approximated by character count) may not exceed
    capacity_bytes.
    """

    def __init__(self, capacity_bytes: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._capacity = capacity_bytes
        self._lock = threading.Lock()

    def _used_without(self, key: str) -> int:
        return sum(len(k) + len(v) for k, v in self._data.items() if k != key)

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            if self._capacity is not None:
                needed = self._used_without(key) + len(key) + len(value)
                if needed > self._capacity:
                    raise StorageQuotaError(
                        f"Storage quota exceeded ({needed} > {self._capacity})"
                    )
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class JsonFileBackend:
    """
    One file per key under `directory`.

    Writes go to a temp file first and are swapped in with os.replace,
    so readers never see a half-written value.

    Keys become file names as-is, so only letters, digits, "_", "." and "-"
    are accepted (and no leading dot). Anything else raises ValueError.
    """

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)
        self._dir.mkdir(parents=True, exist_ok=True)
        logger.info("JsonFileBackend ready dir=%s", self._dir)

    def _path(self, key: str) -> Path:
        if not _FILE_KEY_RE.fullmatch(key):
            raise ValueError(f"Key not usable as a file name: {key!r}")
        return self._dir / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text("utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            tmp.write_text(value, "utf-8")
            os.replace(tmp, path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink()
            if e.errno in _QUOTA_ERRNOS:
                raise StorageQuotaError(f"No space left for {path}") from e
            raise

    def remove(self, key: str) -> None:
        with contextlib.suppress(FileNotFoundError):
            self._path(key).unlink()


class SQLiteBackend:
    """
    SQLite key-value table.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SQLiteBackend ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _is_full(exc: sqlite3.Error) -> bool:
        code = getattr(exc, "sqlite_errorcode", None)
        if code is not None and code == getattr(sqlite3, "SQLITE_FULL", 13):
            return True
        return "full" in str(exc).lower()

    # ---- KeyValueBackend ----

    def get(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("INSERT OR REPLACE INTO kv(key, value) VALUES (?, ?)", (key, value))
            conn.commit()
        except sqlite3.OperationalError as e:
            if self._is_full(e):
                raise StorageQuotaError(f"SQLite database is full: {self._db_path}") from e
            raise
        finally:
            conn.close()

    def remove(self, key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()
