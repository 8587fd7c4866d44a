"""Local notification center: triggers, pending requests and desktop delivery."""

from .backends import (
    BackendError,
    NotifierBackend,
    NullBackend,
    PlyerBackend,
    detect_backend,
    get_backend,
)
from .center import (
    AuthorizationError,
    AuthorizationStatus,
    NotificationCenter,
    NotificationRequest,
    PendingRequest,
    ScheduleError,
)
from .delivery import deliver_once, run_forever, start_delivery_thread
from .triggers import (
    CalendarTrigger,
    TimeIntervalTrigger,
    Trigger,
    next_trigger_date,
    trigger_for,
    trigger_from_dict,
)

__all__ = [
    # Center
    "NotificationCenter",
    "NotificationRequest",
    "PendingRequest",
    "AuthorizationStatus",
    "AuthorizationError",
    "ScheduleError",
    # Triggers
    "CalendarTrigger",
    "TimeIntervalTrigger",
    "Trigger",
    "next_trigger_date",
    "trigger_for",
    "trigger_from_dict",
    # Backends
    "BackendError",
    "NotifierBackend",
    "NullBackend",
    "PlyerBackend",
    "detect_backend",
    "get_backend",
    # Delivery
    "deliver_once",
    "run_forever",
    "start_delivery_thread",
]
