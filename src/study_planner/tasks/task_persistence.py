# src/study_planner/tasks/task_persistence.py

from __future__ import annotations

import contextlib
import logging
import os
import sqlite3
import time
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_KEY = "study_planner.tasks"


class SqliteTaskPersistence:
    """
    SQLite key-value blob store.

    One row per key; the task collection is saved as a single JSON blob under `key`.
    Schema is created if missing.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3", *, key: str = DEFAULT_KEY) -> None:
        if not key:
            raise ValueError("key is required")
        self._db_path = Path(db_path)
        self._key = key
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SqliteTaskPersistence ready db=%s key=%s", self._db_path, self._key)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def save(self, blob: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv(key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (self._key, blob, time.time()),
            )
            conn.commit()
            logger.debug("Saved %d bytes under key=%s", len(blob), self._key)
        finally:
            conn.close()

    def load(self) -> str | None:
        conn = self._get_conn()
        try:
            cur = conn.execute("SELECT value FROM kv WHERE key = ?", (self._key,))
            row = cur.fetchone()
            return str(row[0]) if row else None
        finally:
            conn.close()


class JsonFileTaskPersistence:
    """
    Plain JSON file store.

    Writes go to a temp file first and are moved into place with os.replace(), so a
    crash mid-write never leaves a truncated file behind.
    """

    def __init__(self, path: str | Path = "tasks.json") -> None:
        self._path = Path(path)

    def save(self, blob: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(blob, "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(OSError):
            # Best-effort: keep personal data private on disk.
            os.chmod(self._path, 0o600)
        logger.debug("Saved %d bytes to %s", len(blob), self._path)

    def load(self) -> str | None:
        if not self._path.exists():
            return None
        return self._path.read_text("utf-8")
