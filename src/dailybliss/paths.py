"""Path utilities for dailybliss."""

from pathlib import Path


def get_data_dir() -> Path:
    """Get the directory for dailybliss data.

    Uses XDG data directory: ~/.local/share/dailybliss/
    """
    data_dir = Path.home() / ".local" / "share" / "dailybliss"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_config_dir() -> Path:
    """Get the directory holding config.toml (not created here)."""
    return Path.home() / ".config" / "dailybliss"
