"""Add the pending_requests table used by the notification center.

Each row is a registered trigger waiting to fire, keyed by the same
identifier the saved notification list uses.
"""

import sqlite3

VERSION = 1
DESCRIPTION = "Add pending_requests table"


def migrate(conn: sqlite3.Connection) -> None:
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS pending_requests (
            identifier TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            body TEXT NOT NULL,
            sound INTEGER NOT NULL DEFAULT 1,
            trigger TEXT NOT NULL,
            repeats INTEGER NOT NULL DEFAULT 0,
            next_fire_at REAL NOT NULL,
            created_at REAL NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_pending_next_fire ON pending_requests(next_fire_at);
    """)
