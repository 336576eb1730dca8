import logging
import sqlite3
from collections.abc import Callable
from pathlib import Path

from clipstack.config import DB_PATH

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS settings (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now', 'localtime'))
);
"""

ErrorHook = Callable[[str, str, Exception], None]


def log_storage_error(operation: str, key: str, exc: Exception) -> None:
    logger.error("Settings %s failed for %r", operation, key, exc_info=exc)


class SettingsStore:
    """Key-value settings slots in a local sqlite database.

    Reads and writes never raise sqlite errors; failures are handed to
    ``on_error`` (operation, key, exception) and reported as a miss or a
    failed write.
    """

    def __init__(self, db_path: str | Path | None = None, on_error: ErrorHook | None = None):
        self._db_path = str(db_path) if db_path else str(DB_PATH)
        self._on_error = on_error or log_storage_error
        try:
            self._conn = self._connect(self._db_path)
        except sqlite3.DatabaseError as exc:
            self._on_error("open", self._db_path, exc)
            self._conn = self._recover()

    @staticmethod
    def _connect(path: str) -> sqlite3.Connection:
        conn = sqlite3.connect(path)
        try:
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(SCHEMA)
            conn.commit()
        except sqlite3.DatabaseError:
            conn.close()
            raise
        return conn

    def _recover(self) -> sqlite3.Connection:
        """Move an unreadable database aside and start a fresh one.

        Falls back to an in-memory database if the file cannot be replaced,
        so the app keeps running with an empty history.
        """
        if self._db_path != ":memory:":
            path = Path(self._db_path)
            backup = path.with_name(path.name + ".corrupt")
            try:
                path.replace(backup)
                logger.warning("Moved unreadable settings database to %s", backup)
                return self._connect(self._db_path)
            except (OSError, sqlite3.DatabaseError) as exc:
                self._on_error("open", self._db_path, exc)
        logger.warning("Using in-memory settings; history will not be saved")
        return self._connect(":memory:")

    def init_db(self) -> None:
        self._conn.executescript(SCHEMA)
        self._conn.commit()

    def get(self, key: str) -> str | None:
        try:
            row = self._conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            self._on_error("read", key, exc)
            return None
        return row["value"] if row else None

    def set(self, key: str, value: str) -> bool:
        try:
            self._conn.execute(
                """INSERT INTO settings (key, value, updated_at)
                   VALUES (?, ?, strftime('%Y-%m-%dT%H:%M:%S', 'now', 'localtime'))
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at""",
                (key, value),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            self._on_error("write", key, exc)
            return False
        return True

    def delete(self, key: str) -> bool:
        try:
            self._conn.execute("DELETE FROM settings WHERE key = ?", (key,))
            self._conn.commit()
        except sqlite3.Error as exc:
            self._on_error("delete", key, exc)
            return False
        return True

    def keys(self) -> list[str]:
        rows = self._conn.execute("SELECT key FROM settings ORDER BY key").fetchall()
        return [r["key"] for r in rows]

    def close(self) -> None:
        self._conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
