# src/taskchat/storage/kv_store.py

from __future__ import annotations

import contextlib
import copy
import json
import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class SqliteKeyValueStore:
    """
    SQLite-backed JSON key/value store, partitioned by namespace (one per user key).

    Thread-safety:
    - each method opens its own SQLite connection
    - a put() is a single UPSERT, so readers never observe a half-written value
    """

    def __init__(self, db_path: str | Path = "taskchat.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("KeyValueStore ready db=%s", self._db_path)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    namespace TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL,
                    PRIMARY KEY (namespace, key)
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def get(self, namespace: str, key: str) -> Any | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT value FROM kv WHERE namespace = ? AND key = ?",
                (namespace, key),
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return None
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError:
            logger.exception("Corrupt JSON for namespace=%s key=%s; treating as absent.", namespace, key)
            return None

    def put(self, namespace: str, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv (namespace, key, value, updated_at) VALUES (?, ?, ?, ?)
                ON CONFLICT(namespace, key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (namespace, key, payload, time.time()),
            )
            conn.commit()
        finally:
            conn.close()

    def scoped(self, namespace: str) -> ScopedStore:
        return ScopedStore(self, namespace)


class MemoryKeyValueStore:
    """In-process store with the same contract; values are deep-copied in and out."""

    def __init__(self) -> None:
        self._data: dict[tuple[str, str], Any] = {}
        self._lock = threading.Lock()

    def get(self, namespace: str, key: str) -> Any | None:
        with self._lock:
            if (namespace, key) not in self._data:
                return None
            return copy.deepcopy(self._data[(namespace, key)])

    def put(self, namespace: str, key: str, value: Any) -> None:
        with self._lock:
            self._data[(namespace, key)] = copy.deepcopy(value)

    def scoped(self, namespace: str) -> ScopedStore:
        return ScopedStore(self, namespace)


class ScopedStore:
    """KeyValueStore view bound to one namespace."""

    def __init__(self, backend: SqliteKeyValueStore | MemoryKeyValueStore, namespace: str) -> None:
        self._backend = backend
        self.namespace = namespace

    def get(self, key: str) -> Any | None:
        return self._backend.get(self.namespace, key)

    def put(self, key: str, value: Any) -> None:
        self._backend.put(self.namespace, key, value)
