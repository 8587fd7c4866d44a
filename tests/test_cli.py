"""Tests for the dailybliss command line."""

import pytest

from dailybliss import cli
from dailybliss.config import Config
from dailybliss.controller import NotificationController


@pytest.fixture(autouse=True)
def isolated(monkeypatch, db_path, backend):
    """Point every controller the CLI builds at a temp database and fake backend."""

    def make_controller():
        return NotificationController(db_path=db_path, config=Config(), backend=backend)

    monkeypatch.setattr(cli, "_controller", make_controller)
    return make_controller


def test_add_and_list(capsys):
    cli.main(["add", "Water", "Drink a glass", "--at", "15:00"])
    out = capsys.readouterr().out
    assert "Scheduled [" in out
    assert "at 15:00 (every day)" in out
    assert "permission is not enabled" in out

    cli.main(["list", "-v"])
    out = capsys.readouterr().out
    assert "15:00 | daily | scheduled | Water" in out
    assert "Drink a glass" in out


def test_add_once(capsys):
    cli.main(["add", "Call", "Dentist", "--at", "9:00am", "--once"])
    assert "at 09:00 (once)" in capsys.readouterr().out


def test_add_rejects_bad_time(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["add", "Water", "Drink", "--at", "25:00"])
    assert exc.value.code == 1
    assert "Error:" in capsys.readouterr().err


def test_add_rejects_empty_body(capsys):
    with pytest.raises(SystemExit):
        cli.main(["add", "Water", "  ", "--at", "10:00"])
    assert "Body is required" in capsys.readouterr().err


def test_list_empty(capsys):
    cli.main(["list"])
    assert "No scheduled notifications." in capsys.readouterr().out


def test_delete_by_prefix(capsys, isolated):
    cli.main(["add", "Water", "Drink", "--at", "15:00"])
    capsys.readouterr()
    item = isolated().notifications[0]

    cli.main(["delete", item.identifier[:6].lower()])
    assert f"Deleted {item.identifier[:8]}" in capsys.readouterr().out

    controller = isolated()
    assert controller.notifications == ()
    assert controller.center.pending_requests() == []


def test_delete_unknown(capsys):
    with pytest.raises(SystemExit):
        cli.main(["delete", "ffff"])
    assert "No notification matching" in capsys.readouterr().err


def test_disable_enable(capsys, isolated):
    cli.main(["add", "Water", "Drink", "--at", "15:00"])
    identifier = isolated().notifications[0].identifier

    cli.main(["disable", identifier])
    assert not isolated().is_scheduled(identifier)

    cli.main(["enable", identifier])
    assert isolated().is_scheduled(identifier)
    assert "Enabled [" in capsys.readouterr().out


def test_clear(capsys, isolated):
    cli.main(["add", "A", "a", "--at", "08:00"])
    cli.main(["add", "B", "b", "--at", "09:00"])
    capsys.readouterr()

    cli.main(["clear"])
    assert "Cancelled all notifications (2)" in capsys.readouterr().out
    assert isolated().notifications == ()


def test_permission_request_and_status(capsys):
    cli.main(["permission", "request"])
    assert "granted" in capsys.readouterr().out

    cli.main(["permission", "status"])
    assert "Notification permission: enabled (authorized, backend fake)" in capsys.readouterr().out


def test_permission_request_denied(capsys, backend):
    backend.is_available = False
    with pytest.raises(SystemExit) as exc:
        cli.main(["permission", "request"])
    assert exc.value.code == 1


def test_pending_lists_requests(capsys):
    cli.main(["add", "Water", "Drink", "--at", "15:00"])
    capsys.readouterr()

    cli.main(["pending"])
    out = capsys.readouterr().out
    assert "daily at 15:00 | Water" in out


def test_run_once(capsys):
    cli.main(["run", "--once"])
    assert "Delivered 0 notification(s)" in capsys.readouterr().out


def test_config_path(capsys, monkeypatch, tmp_path):
    monkeypatch.setattr(cli, "get_config_path", lambda: tmp_path / "config.toml")
    cli.main(["config", "path"])
    assert capsys.readouterr().out.strip() == str(tmp_path / "config.toml")
