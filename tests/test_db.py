"""Tests for dailybliss.store.db module."""

import tempfile
from pathlib import Path

from dailybliss.store import db
from dailybliss.store import migrations


def test_connect_creates_schema():
    """connect() should create the defaults table and migrate to the latest version."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        with db.connect(db_path) as conn:
            tables = {
                row["name"]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            }
            assert "defaults" in tables
            assert "pending_requests" in tables

            latest = migrations.discover_migrations()[-1][0]
            assert migrations.get_current_version(conn) == latest


def test_migrations_add_last_fired_at():
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        with db.connect(db_path) as conn:
            columns = {row["name"] for row in conn.execute("PRAGMA table_info(pending_requests)")}
            assert "last_fired_at" in columns


def test_migrations_run_once():
    """Reconnecting to a migrated database applies nothing new."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        with db.connect(db_path):
            pass
        with db.connect(db_path) as conn:
            assert migrations.run_migrations(conn) == []


def test_set_and_get_value():
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        with db.connect(db_path) as conn:
            assert db.get_value(conn, "SavedNotifications") is None

            db.set_value(conn, "SavedNotifications", "[]")
            assert db.get_value(conn, "SavedNotifications") == "[]"

            db.set_value(conn, "SavedNotifications", '[{"a": 1}]')
            assert db.get_value(conn, "SavedNotifications") == '[{"a": 1}]'

            count = conn.execute("SELECT COUNT(*) FROM defaults").fetchone()[0]
            assert count == 1


def test_value_persists_across_connections():
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        with db.connect(db_path) as conn:
            db.set_value(conn, "BadgeCount", "3")
        with db.connect(db_path) as conn:
            assert db.get_value(conn, "BadgeCount") == "3"


def test_delete_value():
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        with db.connect(db_path) as conn:
            db.set_value(conn, "AuthorizationStatus", "authorized")
            assert db.delete_value(conn, "AuthorizationStatus") is True
            assert db.get_value(conn, "AuthorizationStatus") is None
            assert db.delete_value(conn, "AuthorizationStatus") is False
