import sqlite3
import os

from utils.logger import get_logger

logger = get_logger("database")

DB_FILE_NAME = "extforge.db"


def _get_existing_columns(cursor, table_name: str) -> set:
    """Column names currently present, via PRAGMA."""
    cursor.execute(f"PRAGMA table_info({table_name})")
    return {row[1] for row in cursor.fetchall()}


def _ensure_column(cursor, table_name: str, column_name: str, column_def: str, existing_columns: set):
    """Add a column when an older database file lacks it."""
    if column_name not in existing_columns:
        try:
            cursor.execute(f"ALTER TABLE {table_name} ADD COLUMN {column_name} {column_def}")
            logger.info(f"DB Schema Updated: Added '{column_name}' column to '{table_name}'.")
        except sqlite3.Error as e:
            logger.warning(f"Failed to add {column_name} column: {e}")


def get_db(data_dir: str):
    """
    Open the settings/projects database and return (connection, db_path).
    Also responsible for initializing the schema.
    """
    os.makedirs(data_dir, exist_ok=True)
    db_path = os.path.join(data_dir, DB_FILE_NAME)
    conn = sqlite3.connect(db_path, timeout=5)
    c = conn.cursor()
    c.execute("PRAGMA journal_mode=WAL")

    # Single key-value table; values are JSON or plain strings
    c.execute('''CREATE TABLE IF NOT EXISTS kv_store
                 (key TEXT PRIMARY KEY,
                  value TEXT,
                  updated_at REAL)''')

    existing_cols = _get_existing_columns(c, "kv_store")
    _ensure_column(c, "kv_store", "updated_at", "REAL", existing_cols)

    conn.commit()
    return conn, db_path
