"""Tests for the dailybliss TUI, driven through Textual's test pilot."""

import asyncio
from datetime import datetime, timedelta
from unittest.mock import patch

from textual.widgets import Button, DataTable, Input, Static, Switch

from dailybliss.center import NotificationRequest, ScheduleError, TimeIntervalTrigger
from dailybliss.controller import NotificationController
from dailybliss.tui.app import (
    MSG_CANCELLED_ALL,
    MSG_PERMISSION_FAILED,
    MSG_PERMISSION_GRANTED,
    MSG_SCHEDULE_FAILED,
    MSG_SCHEDULED,
    DailyBlissApp,
)
from dailybliss.tui.screens import AlertScreen


def _app(db_path, config, backend):
    return DailyBlissApp(db_path=db_path, config=config, backend=backend)


def _fill_form(app, title, body, at="15:00"):
    app.query_one("#title_input", Input).value = title
    app.query_one("#body_input", Input).value = body
    app.query_one("#time_input", Input).value = at


def test_add_button_disabled_until_title_and_body(db_path, config, backend):
    async def scenario():
        app = _app(db_path, config, backend)
        async with app.run_test() as pilot:
            button = app.query_one("#add_button", Button)
            assert button.disabled

            app.query_one("#title_input", Input).value = "Water"
            await pilot.pause()
            assert button.disabled

            app.query_one("#body_input", Input).value = "Drink"
            await pilot.pause()
            assert not button.disabled

    asyncio.run(scenario())


def test_add_notification_updates_list_and_alerts(db_path, config, backend):
    async def scenario():
        app = _app(db_path, config, backend)
        async with app.run_test() as pilot:
            table = app.query_one("#notifications_table", DataTable)
            assert table.row_count == 0
            assert app.query_one("#empty_label", Static).display

            _fill_form(app, "Water", "Drink a glass")
            app.query_one("#repeat_switch", Switch).value = False
            await pilot.pause()
            app.action_add()
            await pilot.pause()

            assert isinstance(app.screen, AlertScreen)
            assert app.screen.alert_message == MSG_SCHEDULED
            await pilot.press("escape")
            await pilot.pause()
            assert not isinstance(app.screen, AlertScreen)

            items = app.controller.notifications
            assert len(items) == 1
            assert items[0].title == "Water"
            assert items[0].is_repeat is False
            assert app.controller.is_scheduled(items[0].identifier)

            assert table.row_count == 1
            assert not app.query_one("#empty_label", Static).display
            # Form is cleared for the next entry
            assert app.query_one("#title_input", Input).value == ""
            assert app.query_one("#body_input", Input).value == ""

    asyncio.run(scenario())


def test_bad_time_shows_alert_and_adds_nothing(db_path, config, backend):
    async def scenario():
        app = _app(db_path, config, backend)
        async with app.run_test() as pilot:
            _fill_form(app, "Water", "Drink", at="quarter past")
            await pilot.pause()
            app.action_add()
            await pilot.pause()

            assert isinstance(app.screen, AlertScreen)
            assert "Invalid time" in app.screen.alert_message
            assert app.controller.notifications == ()

    asyncio.run(scenario())


def test_delete_and_toggle_selected_row(db_path, config, backend):
    async def scenario():
        app = _app(db_path, config, backend)
        async with app.run_test() as pilot:
            first = app.controller.add_notification("First", "one", datetime.now().time())
            app.controller.add_notification("Second", "two", datetime.now().time())
            await pilot.pause()

            table = app.query_one("#notifications_table", DataTable)
            assert table.row_count == 2
            table.move_cursor(row=0)

            app.action_toggle()
            await pilot.pause()
            assert app.controller.store.get(first.identifier).is_enabled is False
            assert not app.controller.is_scheduled(first.identifier)

            app.action_delete()
            await pilot.pause()
            assert [i.title for i in app.controller.notifications] == ["Second"]
            assert table.row_count == 1

    asyncio.run(scenario())


def test_cancel_all(db_path, config, backend):
    async def scenario():
        app = _app(db_path, config, backend)
        async with app.run_test() as pilot:
            app.controller.add_notification("A", "a", datetime.now().time())
            app.controller.add_notification("B", "b", datetime.now().time())
            await pilot.pause()

            app.action_cancel_all()
            await pilot.pause()

            assert app.controller.notifications == ()
            assert app.controller.center.pending_requests() == []
            assert isinstance(app.screen, AlertScreen)
            assert app.screen.alert_message == MSG_CANCELLED_ALL
            assert app.query_one("#cancel_all", Button).disabled

    asyncio.run(scenario())


def test_permission_section_hidden_once_authorized(db_path, config, backend):
    async def scenario():
        app = _app(db_path, config, backend)
        async with app.run_test() as pilot:
            assert app.query_one("#request_permission", Button).display

            app.action_request_permission()
            for _ in range(50):
                await pilot.pause(0.05)
                if isinstance(app.screen, AlertScreen):
                    break

            assert isinstance(app.screen, AlertScreen)
            assert app.screen.alert_message == MSG_PERMISSION_GRANTED
            assert not app.query_one("#request_permission", Button).display
            assert app.controller.check_status()

    asyncio.run(scenario())


def test_mount_clears_badge(db_path, config, backend):
    async def scenario():
        app = _app(db_path, config, backend)
        app.controller.center.set_badge_count(4)
        async with app.run_test() as pilot:
            await pilot.pause()
            assert app.controller.center.badge_count() == 0

    asyncio.run(scenario())


def test_due_notification_delivered_on_poll(db_path, config, backend):
    async def scenario():
        app = _app(db_path, config, backend)
        async with app.run_test() as pilot:
            app.controller.request_permission()
            app.controller.center.add(
                NotificationRequest("DUE", "Stretch", "Stand up", TimeIntervalTrigger(60)),
                now=datetime.now() - timedelta(minutes=5),
            )
            presented = []
            app._present = presented.append

            app._deliver_due()
            await pilot.pause()

            assert [r.identifier for r in presented] == ["DUE"]
            assert backend.posted == [("Stretch", "Stand up", True)]
            assert app.controller.center.badge_count() == 1

    asyncio.run(scenario())


def test_due_notification_shows_toast_and_rings_bell(db_path, config, backend):
    async def scenario():
        app = _app(db_path, config, backend)
        async with app.run_test() as pilot:
            app.controller.request_permission()
            app.controller.center.add(
                NotificationRequest("DUE", "Stretch", "Stand up", TimeIntervalTrigger(60)),
                now=datetime.now() - timedelta(minutes=5),
            )

            with patch.object(app, "bell") as mock_bell:
                app._deliver_due()
                await pilot.pause()

            toasts = [(n.title, n.message) for n in app._notifications]
            assert ("Stretch", "Stand up") in toasts
            mock_bell.assert_called_once()

    asyncio.run(scenario())


def test_schedule_failure_on_add_shows_alert(db_path, config, backend):
    async def scenario():
        app = _app(db_path, config, backend)
        async with app.run_test() as pilot:
            _fill_form(app, "Water", "Drink")
            await pilot.pause()

            with patch.object(
                app.controller.center, "add", side_effect=ScheduleError("rejected")
            ):
                app.action_add()
                await pilot.pause()

            assert isinstance(app.screen, AlertScreen)
            assert app.screen.alert_message == MSG_SCHEDULE_FAILED
            assert app.controller.notifications == ()
            # Form keeps what was typed so the user can retry
            assert app.query_one("#title_input", Input).value == "Water"

    asyncio.run(scenario())


def test_schedule_failure_on_toggle_shows_alert(db_path, config, backend):
    async def scenario():
        app = _app(db_path, config, backend)
        async with app.run_test() as pilot:
            item = app.controller.add_notification("Water", "Drink", datetime.now().time())
            app.controller.set_enabled(item.identifier, False)
            await pilot.pause()
            app.query_one("#notifications_table", DataTable).move_cursor(row=0)

            with patch.object(
                app.controller.center, "add", side_effect=ScheduleError("rejected")
            ):
                app.action_toggle()
                await pilot.pause()

            assert isinstance(app.screen, AlertScreen)
            assert app.screen.alert_message == MSG_SCHEDULE_FAILED
            assert app.controller.store.get(item.identifier).is_enabled is False

    asyncio.run(scenario())


def test_permission_denied_shows_alert(db_path, config, backend):
    backend.is_available = False

    async def scenario():
        app = _app(db_path, config, backend)
        async with app.run_test() as pilot:
            app.action_request_permission()
            for _ in range(50):
                await pilot.pause(0.05)
                if isinstance(app.screen, AlertScreen):
                    break

            assert isinstance(app.screen, AlertScreen)
            assert app.screen.alert_message == MSG_PERMISSION_FAILED
            assert app.query_one("#request_permission", Button).display
            assert not app.controller.check_status()

    asyncio.run(scenario())


def test_poll_picks_up_entries_added_elsewhere(db_path, config, backend):
    async def scenario():
        app = _app(db_path, config, backend)
        async with app.run_test() as pilot:
            other = NotificationController(db_path=db_path, config=config, backend=backend)
            other.add_notification("From CLI", "added in a shell", datetime.now().time())

            app._deliver_due()
            await pilot.pause()

            table = app.query_one("#notifications_table", DataTable)
            assert table.row_count == 1
            assert [i.title for i in app.controller.notifications] == ["From CLI"]

    asyncio.run(scenario())
