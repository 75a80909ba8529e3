import json
import sqlite3
import time
from typing import Any

from database.connection import get_db
from services.errors import PersistenceError
from utils.logger import get_logger

logger = get_logger("kv_store")

_MAX_ATTEMPTS = 5


class KeyValueStore:
    """
    get/set/remove over the kv_store table.
    Every write goes straight to disk; a connection is opened per call.
    """

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        conn = None
        try:
            conn, self.db_path = get_db(data_dir)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Storage init failed: {type(e).__name__}: {e}")
            raise PersistenceError(f"Storage is unavailable: {e}") from e
        finally:
            if conn:
                conn.close()

    def _connect(self):
        try:
            conn, _ = get_db(self.data_dir)
            return conn
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Storage connection failed: {type(e).__name__}: {e}")
            raise PersistenceError(f"Storage is unavailable: {e}") from e

    def _write(self, sql: str, params: tuple):
        conn = self._connect()
        try:
            for attempt in range(_MAX_ATTEMPTS):
                try:
                    conn.execute(sql, params)
                    conn.commit()
                    return
                except sqlite3.OperationalError as e:
                    if attempt < _MAX_ATTEMPTS - 1 and "locked" in str(e).lower():
                        logger.warning(f"Database locked, retry {attempt + 1}/{_MAX_ATTEMPTS}")
                        time.sleep(0.1)
                        continue
                    conn.rollback()
                    raise PersistenceError(f"Failed to write to storage: {e}") from e
                except sqlite3.Error as e:
                    conn.rollback()
                    raise PersistenceError(f"Failed to write to storage: {e}") from e
        finally:
            conn.close()

    def get(self, key: str, default: str = None) -> str:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read from storage: {e}") from e
        finally:
            conn.close()
        return default if row is None else row[0]

    def set(self, key: str, value: str):
        self._write(
            """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
               ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at""",
            (key, value, time.time()),
        )
        logger.debug(f"kv set: {key}")

    def remove(self, key: str):
        self._write("DELETE FROM kv_store WHERE key = ?", (key,))
        logger.debug(f"kv remove: {key}")

    def get_json(self, key: str, default: Any = None) -> Any:
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Corrupt JSON under key '{key}', using default: {e}")
            return default

    def set_json(self, key: str, value: Any):
        self.set(key, json.dumps(value, ensure_ascii=False))
