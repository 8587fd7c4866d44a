"""Configuration management for dailybliss."""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .paths import get_config_dir


def get_config_path() -> Path:
    """Get the path to the dailybliss config file."""
    return get_config_dir() / "config.toml"


def get_default_config() -> str:
    """Return the default config file contents."""
    return """\
# dailybliss configuration

[notifier]
# How notifications reach the desktop.
# Options: "auto", "plyer" (native desktop notifications), "none"
backend = "auto"
sound = true

[delivery]
# Seconds between checks for due notifications (TUI and `dailybliss run`)
poll_interval = 15.0

[tui]
transparent = false
# "24h" or "12h"
clock = "24h"
# Initial state of the "Repeat daily" switch
default_repeat = true

[tui.keybindings]
quit = "q"
delete = "d"
toggle = "e"
"""


@dataclass
class NotifierConfig:
    """Configuration for desktop notification delivery."""

    backend: str = "auto"  # "auto", "plyer", "none"
    sound: bool = True


@dataclass
class DeliveryConfig:
    """Configuration for the delivery loop."""

    poll_interval: float = 15.0


@dataclass
class KeybindingsConfig:
    """Configuration for TUI keybindings.

    Each command field is a string where each character is a valid key binding.
    For example, quit="qQ" means both 'q' and 'Q' will quit.

    The up_down field is a 2-character string: up, down.
    For vim: "kj". Empty string means use default arrow keys only.
    """

    quit: str = "q"
    delete: str = "d"
    toggle: str = "e"
    cancel_all: str = "X"
    request_permission: str = "p"
    refresh: str = "g"
    focus_form: str = "n"
    up_down: str = ""  # 2-char string: up, down (e.g., "kj" for vim)


@dataclass
class TuiConfig:
    """Configuration for the TUI."""

    transparent: bool = False  # Use ANSI colors for terminal transparency
    clock: str = "24h"  # "24h" or "12h"
    default_repeat: bool = True
    keybindings: KeybindingsConfig = field(default_factory=KeybindingsConfig)


@dataclass
class Config:
    """dailybliss configuration."""

    notifier: NotifierConfig = field(default_factory=NotifierConfig)
    delivery: DeliveryConfig = field(default_factory=DeliveryConfig)
    tui: TuiConfig = field(default_factory=TuiConfig)


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from file, or return defaults."""
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        return Config()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        # Log warning but return defaults
        print(f"Warning: Could not load config from {config_path}: {e}")
        return Config()

    return _parse_config(data)


def _parse_config(data: dict[str, Any]) -> Config:
    """Parse config dict into Config object."""
    notifier_data = data.get("notifier", {})
    notifier = NotifierConfig(
        backend=notifier_data.get("backend", "auto"),
        sound=notifier_data.get("sound", True),
    )

    delivery_data = data.get("delivery", {})
    delivery = DeliveryConfig(
        poll_interval=float(delivery_data.get("poll_interval", 15.0)),
    )

    tui_data = data.get("tui", {})
    keybindings_data = tui_data.get("keybindings", {})
    # Use dataclass defaults for any unspecified keybindings
    defaults = KeybindingsConfig()
    keybindings = KeybindingsConfig(
        **{
            field: keybindings_data.get(field, getattr(defaults, field))
            for field in defaults.__dataclass_fields__
        }
    )
    tui = TuiConfig(
        transparent=tui_data.get("transparent", False),
        clock=tui_data.get("clock", "24h"),
        default_repeat=tui_data.get("default_repeat", True),
        keybindings=keybindings,
    )

    return Config(notifier=notifier, delivery=delivery, tui=tui)


def ensure_config_exists() -> Path:
    """Ensure the config file exists, creating with defaults if needed."""
    config_path = get_config_path()

    if not config_path.exists():
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(get_default_config())

    return config_path
