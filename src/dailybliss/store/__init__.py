"""Persistence for dailybliss: SQLite key-value store and the saved notification list."""

from .db import connect, delete_value, get_db_path, get_value, set_value
from .items import (
    SAVED_NOTIFICATIONS_KEY,
    NotificationItem,
    NotificationStore,
    decode_items,
    encode_items,
    format_time_of_day,
    new_identifier,
    parse_time_of_day,
)

__all__ = [
    # Types
    "NotificationItem",
    "NotificationStore",
    # Database
    "connect",
    "get_db_path",
    "get_value",
    "set_value",
    "delete_value",
    # Helpers
    "SAVED_NOTIFICATIONS_KEY",
    "decode_items",
    "encode_items",
    "format_time_of_day",
    "new_identifier",
    "parse_time_of_day",
]
