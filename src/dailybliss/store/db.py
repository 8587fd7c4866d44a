"""SQLite database for dailybliss.

Holds a small key-value table (``defaults``) for serialized app state and,
via migrations, the notification center's pending requests.
"""

from __future__ import annotations

import sqlite3
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ..paths import get_data_dir


def get_db_path() -> Path:
    """Get the path to the dailybliss database, following XDG conventions."""
    return get_data_dir() / "dailybliss.db"


def _init_schema(conn: sqlite3.Connection) -> None:
    """Initialize the database schema.

    This creates the baseline schema (version 0). Migrations bring it up to date.
    Keep this as the original schema to ensure migrations work on fresh databases.
    """
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS defaults (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at REAL NOT NULL
        );
    """)
    conn.commit()


@contextmanager
def connect(db_path: Path | None = None) -> Iterator[sqlite3.Connection]:
    """Context manager for database connections."""
    from . import migrations

    if db_path is None:
        db_path = get_db_path()

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    _init_schema(conn)
    migrations.run_migrations(conn)

    try:
        yield conn
    finally:
        conn.close()


# --- Key-value store ---


def get_value(conn: sqlite3.Connection, key: str) -> str | None:
    """Get the stored value for a key, or None if unset."""
    row = conn.execute("SELECT value FROM defaults WHERE key = ?", (key,)).fetchone()
    return row["value"] if row else None


def set_value(conn: sqlite3.Connection, key: str, value: str) -> None:
    """Store a value, replacing any previous one."""
    conn.execute(
        """
        INSERT INTO defaults (key, value, updated_at) VALUES (?, ?, ?)
        ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """,
        (key, value, time.time()),
    )
    conn.commit()


def delete_value(conn: sqlite3.Connection, key: str) -> bool:
    """Remove a key. Returns True if it existed."""
    cursor = conn.execute("DELETE FROM defaults WHERE key = ?", (key,))
    conn.commit()
    return cursor.rowcount > 0
