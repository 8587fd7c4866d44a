"""Modal screens for the TUI."""

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label


class AlertScreen(ModalScreen[None]):
    """Modal alert with a single OK button."""

    CSS = """
    AlertScreen {
        align: center middle;
    }

    AlertScreen > Vertical {
        width: 60;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    AlertScreen Label {
        width: 100%;
        text-align: center;
        padding-bottom: 1;
    }

    AlertScreen #alert-title {
        text-style: bold;
    }

    AlertScreen Button {
        width: 100%;
    }
    """

    BINDINGS = [
        ("escape", "dismiss_alert", "OK"),
    ]

    def __init__(self, message: str, title: str = "Notification") -> None:
        super().__init__()
        self.alert_title = title
        self.alert_message = message

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label(self.alert_title, id="alert-title")
            yield Label(self.alert_message, id="alert-message")
            yield Button("OK", id="alert-ok", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#alert-ok", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(None)

    def action_dismiss_alert(self) -> None:
        self.dismiss(None)
