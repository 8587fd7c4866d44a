"""TUI utilities and helpers."""

import sys

from rich.text import Text

from ..store import NotificationItem


def set_terminal_title(title: str) -> None:
    """Set the terminal/pane title via OSC escape sequence."""
    # OSC 0 sets both icon name and window title
    sys.stdout.write(f"\033]0;{title}\007")
    sys.stdout.flush()


def styled_cell(value: str, is_enabled: bool) -> Text:
    """Style a cell value based on whether the notification is enabled."""
    if is_enabled:
        return Text(value, style="bold")

    return Text(value, style="dim")


def repeat_label(item: NotificationItem) -> Text:
    if item.is_repeat:
        return Text("Daily", style="blue" if item.is_enabled else "dim blue")
    return Text("Once", style="" if item.is_enabled else "dim")


def state_indicator(item: NotificationItem, is_scheduled: bool) -> Text:
    """● waiting to fire, ✓ one-shot that already fired, ○ turned off."""
    if not item.is_enabled:
        return Text("○", style="dim")
    if is_scheduled:
        return Text("●", style="bold cyan")
    return Text("✓", style="green")
