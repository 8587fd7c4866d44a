"""dailybliss TUI package."""

from .app import DailyBlissApp, main
from .utils import set_terminal_title

__all__ = ["DailyBlissApp", "main", "set_terminal_title"]
