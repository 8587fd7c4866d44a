"""Main dailybliss TUI application."""

import contextlib
import threading
from datetime import datetime
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Button, DataTable, Footer, Header, Input, Label, Static, Switch

from ..center import AuthorizationError, NotificationRequest, NotifierBackend, ScheduleError
from ..config import Config
from ..controller import NotificationController
from ..log import get_logger
from ..store import format_time_of_day, parse_time_of_day
from .screens import AlertScreen
from .utils import repeat_label, set_terminal_title, state_indicator, styled_cell

MSG_SCHEDULED = "Notification scheduled"
MSG_CANCELLED_ALL = "All notifications cancelled"
MSG_PERMISSION_GRANTED = "Notification permission granted!"
MSG_PERMISSION_FAILED = "Notification permission request failed!"
MSG_SCHEDULE_FAILED = "Failed to schedule notification!"

_log = get_logger("tui")


def _build_bindings(keys: str, action: str, label: str, show: bool = True) -> list[Binding]:
    """Build Binding objects for all keys mapped to an action.

    Args:
        keys: String of characters, each is a key binding
        action: The action name (without 'action_' prefix)
        label: Human-readable label for the action
        show: Whether to show in footer (only first key will be shown)

    Returns:
        List of Binding objects
    """
    if not keys:
        return []

    bindings = []
    # First key gets the visible binding
    bindings.append(Binding(keys[0], action, label, show=show))

    # Additional keys get hidden bindings
    for key in keys[1:]:
        bindings.append(Binding(key, action, label, show=False))

    return bindings


class DailyBlissApp(App):
    """dailybliss TUI - schedule daily and one-off notifications."""

    CSS = """
    #body {
        height: 1fr;
        padding: 0 1;
    }

    .section-title {
        margin-top: 1;
        color: $text-muted;
        text-style: bold;
    }

    #time_row {
        height: auto;
    }

    #time_row Label {
        padding: 1 1 0 0;
    }

    #time_input {
        width: 12;
    }

    #repeat_label {
        margin-left: 2;
    }

    #notifications_table {
        height: auto;
        max-height: 16;
    }

    #empty_label {
        color: $text-muted;
        text-style: italic;
    }

    #status {
        height: 1;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        db_path: Path | None = None,
        config: Config | None = None,
        backend: NotifierBackend | None = None,
    ) -> None:
        super().__init__()
        self.controller = NotificationController(db_path=db_path, config=config, backend=backend)
        self.config = self.controller.config
        self._permission_granted = False
        self._unsubscribe = None
        self._setup_keybindings()
        # Enable ANSI colors for terminal transparency support
        if self.config.tui.transparent:
            self.ansi_color = True

    def _setup_keybindings(self) -> None:
        """Build keybindings from config."""
        kb = self.config.tui.keybindings

        for b in _build_bindings(kb.quit, "quit", "Quit"):
            self.bind(b.key, b.action, description=b.description, show=b.show)

        for b in _build_bindings(kb.focus_form, "focus_form", "New"):
            self.bind(b.key, b.action, description=b.description, show=b.show)

        for b in _build_bindings(kb.delete, "delete", "Delete"):
            self.bind(b.key, b.action, description=b.description, show=b.show)

        for b in _build_bindings(kb.toggle, "toggle", "On/Off"):
            self.bind(b.key, b.action, description=b.description, show=b.show)

        for b in _build_bindings(kb.request_permission, "request_permission", "Permission"):
            self.bind(b.key, b.action, description=b.description, show=False)

        for b in _build_bindings(kb.cancel_all, "cancel_all", "Cancel All", show=False):
            self.bind(b.key, b.action, description=b.description, show=b.show)

        for b in _build_bindings(kb.refresh, "refresh", "Refresh", show=False):
            self.bind(b.key, b.action, description=b.description, show=b.show)

        # Arrow key alternatives (if configured)
        if len(kb.up_down) == 2:
            up, down = kb.up_down
            self.bind(up, "cursor_up", description="Up", show=False)
            self.bind(down, "cursor_down", description="Down", show=False)

    def compose(self) -> ComposeResult:
        yield Header()
        with VerticalScroll(id="body"):
            yield Static("Notification permission", id="permission_title", classes="section-title")
            yield Button("Request notification permission", id="request_permission")

            yield Static("Notification status", classes="section-title")
            yield Static("", id="permission_status")

            yield Static("Add notification", classes="section-title")
            yield Input(placeholder="Notification title", id="title_input")
            yield Input(placeholder="Notification body", id="body_input")
            with Horizontal(id="time_row"):
                yield Label("Time")
                yield Input(
                    value=format_time_of_day(datetime.now().time()),
                    placeholder="HH:MM",
                    id="time_input",
                )
                yield Label("Repeat daily", id="repeat_label")
                yield Switch(value=self.config.tui.default_repeat, id="repeat_switch")
            yield Button("Add notification", id="add_button", variant="primary", disabled=True)

            yield Static("Scheduled notifications", classes="section-title")
            yield Static("No scheduled notifications", id="empty_label")
            yield DataTable(id="notifications_table")

            yield Button("Cancel all notifications", id="cancel_all", variant="error")
        yield Static("", id="status")
        yield Footer()

    def on_mount(self) -> None:
        self.title = "dailybliss"
        self.sub_title = "scheduled notifications"

        if self.config.tui.transparent:
            self.screen.styles.background = "transparent"
            self.query_one("#notifications_table", DataTable).styles.background = "transparent"

        table = self.query_one("#notifications_table", DataTable)
        table.cursor_type = "row"
        table.add_column("Time", width=8)
        table.add_column("", width=1)  # State indicator
        table.add_column("Title", width=20)
        table.add_column("Body", width=36)
        table.add_column("Repeat", width=6)

        # Opening the app clears the badge
        self.controller.center.set_badge_count(0)

        self._unsubscribe = self.controller.store.subscribe(self._refresh_list)
        self.check_notification_status()
        self._refresh_list()
        self.set_interval(self.config.delivery.poll_interval, self._deliver_due)
        # Kick Footer to pick up dynamically-bound keys
        self.refresh_bindings()

    def on_unmount(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()

    # --- Rendering ---

    def check_notification_status(self) -> None:
        self._permission_granted = self.controller.check_status()
        self.query_one("#permission_status", Static).update(
            "Notification permission: enabled"
            if self._permission_granted
            else "Notification permission: not enabled"
        )
        # Only offer the request while permission is missing
        self.query_one("#permission_title", Static).display = not self._permission_granted
        self.query_one("#request_permission", Button).display = not self._permission_granted

    def _refresh_list(self) -> None:
        table = self.query_one("#notifications_table", DataTable)
        current_row = table.cursor_coordinate.row if table.row_count > 0 else 0
        table.clear()

        items = self.controller.notifications
        pending = {p.identifier for p in self.controller.center.pending_requests()}
        clock = self.config.tui.clock

        for item in items:
            table.add_row(
                styled_cell(format_time_of_day(item.time, clock), item.is_enabled),
                state_indicator(item, item.identifier in pending),
                styled_cell(item.title, item.is_enabled),
                styled_cell(item.body, item.is_enabled),
                repeat_label(item),
                key=item.identifier,
            )

        if table.row_count > 0:
            table.move_cursor(row=min(current_row, table.row_count - 1))

        self.query_one("#empty_label", Static).display = not items
        table.display = bool(items)
        self.query_one("#cancel_all", Button).disabled = not items

        scheduled = sum(1 for item in items if item.identifier in pending)
        badge = self.controller.center.badge_count()
        status = f"{len(items)} saved, {scheduled} scheduled"
        if badge:
            status += f"  |  {badge} delivered"
        self.query_one("#status", Static).update(status)

    def _alert(self, message: str) -> None:
        self.push_screen(AlertScreen(message))

    def _selected_identifier(self) -> str | None:
        table = self.query_one("#notifications_table", DataTable)
        if table.row_count == 0:
            return None
        with contextlib.suppress(Exception):
            row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
            return row_key.value if row_key else None
        return None

    def _update_add_button(self) -> None:
        title = self.query_one("#title_input", Input).value
        body = self.query_one("#body_input", Input).value
        self.query_one("#add_button", Button).disabled = not (title.strip() and body.strip())

    # --- Events ---

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id in ("title_input", "body_input"):
            self._update_add_button()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id in ("title_input", "body_input", "time_input"):
            if not self.query_one("#add_button", Button).disabled:
                self.action_add()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "add_button":
            self.action_add()
        elif button_id == "cancel_all":
            self.action_cancel_all()
        elif button_id == "request_permission":
            self.action_request_permission()

    # --- Actions ---

    def action_add(self) -> None:
        title_input = self.query_one("#title_input", Input)
        body_input = self.query_one("#body_input", Input)
        time_input = self.query_one("#time_input", Input)
        is_repeat = self.query_one("#repeat_switch", Switch).value

        try:
            time_of_day = parse_time_of_day(time_input.value)
        except ValueError as e:
            self._alert(str(e))
            return

        try:
            self.controller.add_notification(
                title_input.value, body_input.value, time_of_day, is_repeat=is_repeat
            )
        except ValueError as e:
            self._alert(str(e))
            return
        except ScheduleError as e:
            _log.error("schedule failed: %s", e)
            self._alert(MSG_SCHEDULE_FAILED)
            return

        title_input.value = ""
        body_input.value = ""
        self._update_add_button()
        self._alert(MSG_SCHEDULED)

    def action_delete(self) -> None:
        identifier = self._selected_identifier()
        if identifier:
            self.controller.delete_notification(identifier)

    def action_toggle(self) -> None:
        identifier = self._selected_identifier()
        if not identifier:
            return
        try:
            item = self.controller.toggle(identifier)
        except ScheduleError as e:
            _log.error("reschedule failed: %s", e)
            self._alert(MSG_SCHEDULE_FAILED)
            return
        self.notify(f"{item.title}: {'on' if item.is_enabled else 'off'}")

    def action_cancel_all(self) -> None:
        self.controller.cancel_all()
        self._alert(MSG_CANCELLED_ALL)

    def action_request_permission(self) -> None:
        """Ask for permission off the UI thread; the result comes back via call_from_thread."""

        def request() -> None:
            error = None
            try:
                granted = self.controller.request_permission()
            except AuthorizationError as e:
                granted, error = False, str(e)
            self.call_from_thread(self._permission_result, granted, error)

        threading.Thread(target=request, daemon=True).start()

    def _permission_result(self, granted: bool, error: str | None) -> None:
        if error:
            _log.error("permission request failed: %s", error)
        self.check_notification_status()
        self._alert(MSG_PERMISSION_GRANTED if granted else MSG_PERMISSION_FAILED)

    def action_focus_form(self) -> None:
        self.query_one("#title_input", Input).focus()

    def action_refresh(self) -> None:
        self.check_notification_status()
        if not self.controller.store.refresh():
            self._refresh_list()

    def action_cursor_up(self) -> None:
        self.query_one("#notifications_table", DataTable).action_cursor_up()

    def action_cursor_down(self) -> None:
        self.query_one("#notifications_table", DataTable).action_cursor_down()

    # --- Delivery ---

    def _present(self, request: NotificationRequest) -> None:
        """Show a notification that fires while the app is in front."""
        self.notify(request.body, title=request.title, timeout=8)
        if request.sound:
            self.bell()

    def _deliver_due(self) -> None:
        try:
            # Pick up entries added or changed by the CLI while the app is open
            changed = self.controller.store.refresh()
            delivered = self.controller.center.deliver_due(present=self._present)
        except Exception as e:
            _log.error("delivery failed: %s", e, exc_info=True)
            return
        if delivered and not changed:
            self._refresh_list()


def main() -> None:
    set_terminal_title("dailybliss")
    app = DailyBlissApp()
    app.run()
