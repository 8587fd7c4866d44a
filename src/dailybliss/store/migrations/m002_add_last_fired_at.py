"""Add last_fired_at column to pending_requests.

Lets `dailybliss pending` show when a repeating request last went off.
"""

import sqlite3

VERSION = 2
DESCRIPTION = "Add last_fired_at to pending_requests"


def migrate(conn: sqlite3.Connection) -> None:
    """Add last_fired_at column with NULL default for existing rows."""
    conn.execute("ALTER TABLE pending_requests ADD COLUMN last_fired_at REAL")
