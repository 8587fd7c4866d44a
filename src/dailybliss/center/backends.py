"""Desktop notifier backends.

Each backend knows how to put a banner on screen. plyer picks the native
notification API for the current platform (Notification Center, libnotify,
Windows toasts).
"""

from __future__ import annotations

import sys
from typing import Protocol

from plyer import notification as plyer_notification

from ..log import get_logger

_log = get_logger("center.backends")

APP_NAME = "dailybliss"

# Platforms plyer ships a desktop notification implementation for
_PLYER_PLATFORMS = ("darwin", "linux", "win32")


class BackendError(Exception):
    """Raised when a backend fails to post a notification."""


class NotifierBackend(Protocol):
    name: str

    def available(self) -> bool:
        """Whether this backend can post notifications on this machine."""
        ...

    def post(self, title: str, body: str, sound: bool = True) -> None:
        """Show a notification. Raises BackendError on failure."""
        ...


class PlyerBackend:
    """Native desktop notifications via plyer."""

    name = "plyer"

    def __init__(self, timeout: int = 10) -> None:
        self.timeout = timeout

    def available(self) -> bool:
        return sys.platform.startswith(_PLYER_PLATFORMS)

    def post(self, title: str, body: str, sound: bool = True) -> None:
        # plyer has no sound option; the platform plays its default
        try:
            plyer_notification.notify(
                title=title,
                message=body,
                app_name=APP_NAME,
                timeout=self.timeout,
            )
        except (OSError, RuntimeError) as e:
            # NotImplementedError (no platform implementation) is a RuntimeError
            raise BackendError(f"plyer failed: {e or type(e).__name__}") from e


class NullBackend:
    """Posts nothing. Used where no desktop notifier exists."""

    name = "none"

    def available(self) -> bool:
        return False

    def post(self, title: str, body: str, sound: bool = True) -> None:
        _log.info("no notifier backend, dropping: %s", title)


_BACKENDS: dict[str, type] = {
    PlyerBackend.name: PlyerBackend,
    NullBackend.name: NullBackend,
}


def detect_backend() -> NotifierBackend:
    """Pick the best backend for this machine."""
    candidate = PlyerBackend()
    if candidate.available():
        return candidate
    _log.info("no desktop notifier for platform %s", sys.platform)
    return NullBackend()


def get_backend(name: str = "auto") -> NotifierBackend:
    """Get a backend by name ("auto" detects one)."""
    if name == "auto":
        return detect_backend()
    try:
        return _BACKENDS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown notifier backend {name!r} (choose from auto, {', '.join(_BACKENDS)})"
        ) from None
