"""Delivery loop for due notifications.

`dailybliss run` drives run_forever() in the foreground; anything else that
wants background delivery can start the daemon thread instead.
"""

from __future__ import annotations

import threading
import time
from datetime import datetime

from ..log import get_logger
from .center import NotificationCenter, NotificationRequest

_log = get_logger("center.delivery")


def deliver_once(
    center: NotificationCenter, now: datetime | None = None
) -> list[NotificationRequest]:
    """Deliver whatever is due right now."""
    return center.deliver_due(now)


def run_forever(
    center: NotificationCenter,
    poll_interval: float = 15.0,
    stop: threading.Event | None = None,
) -> None:
    """Poll for due requests until interrupted (or until stop is set)."""
    _log.info("delivery loop started (every %.1fs, backend %s)", poll_interval, center.backend.name)
    try:
        while stop is None or not stop.is_set():
            try:
                delivered = deliver_once(center)
                if delivered:
                    _log.info("delivered %d notification(s)", len(delivered))
            except Exception as e:
                _log.error("error: %s", e, exc_info=True)

            if stop is not None:
                stop.wait(poll_interval)
            else:
                time.sleep(poll_interval)
    except KeyboardInterrupt:
        pass
    _log.info("delivery loop stopped")


_delivery_thread: threading.Thread | None = None


def start_delivery_thread(
    center: NotificationCenter,
    poll_interval: float = 15.0,
    stop: threading.Event | None = None,
) -> threading.Thread:
    """Start the delivery daemon thread (no-op if it's already running)."""
    global _delivery_thread

    if _delivery_thread is not None and _delivery_thread.is_alive():
        return _delivery_thread

    _delivery_thread = threading.Thread(
        target=run_forever,
        args=(center, poll_interval, stop),
        daemon=True,
    )
    _delivery_thread.start()
    return _delivery_thread
