"""Saved notification list.

The whole list is serialized to JSON and kept under a single key in the
key-value table, rewritten after every change.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field, replace
from datetime import time
from pathlib import Path
from typing import Any

from ..log import get_logger
from . import db

SAVED_NOTIFICATIONS_KEY = "SavedNotifications"

_log = get_logger("store")


def new_identifier() -> str:
    return str(uuid.uuid4()).upper()


def parse_time_of_day(value: str) -> time:
    """Parse "HH:MM" (24h) or "H:MMam"/"H:MM pm" into a time.

    Raises ValueError for anything else.
    """
    text = value.strip().lower().replace(" ", "")
    suffix = None
    if text.endswith(("am", "pm")):
        suffix = text[-2:]
        text = text[:-2]

    hour_str, sep, minute_str = text.partition(":")
    if not sep or not hour_str.isdigit() or not minute_str.isdigit() or len(minute_str) != 2:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")

    hour, minute = int(hour_str), int(minute_str)
    if suffix:
        if not 1 <= hour <= 12:
            raise ValueError(f"Invalid time {value!r}, hour must be 1-12 with am/pm")
        hour = hour % 12 + (12 if suffix == "pm" else 0)

    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid time {value!r}, out of range")
    return time(hour, minute)


def format_time_of_day(value: time, clock: str = "24h") -> str:
    if clock == "12h":
        hour = value.hour % 12 or 12
        return f"{hour}:{value.minute:02d} {'AM' if value.hour < 12 else 'PM'}"
    return f"{value.hour:02d}:{value.minute:02d}"


@dataclass(frozen=True)
class NotificationItem:
    """A user-defined scheduled reminder."""

    title: str
    body: str
    time: time
    is_repeat: bool = True
    is_enabled: bool = True
    identifier: str = field(default_factory=new_identifier)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["time"] = format_time_of_day(self.time)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NotificationItem:
        return cls(
            identifier=data["identifier"],
            title=data["title"],
            body=data["body"],
            time=parse_time_of_day(data["time"]),
            is_repeat=bool(data.get("is_repeat", True)),
            is_enabled=bool(data.get("is_enabled", True)),
        )

    @property
    def short_id(self) -> str:
        return self.identifier[:8]


def encode_items(items: list[NotificationItem]) -> str:
    return json.dumps([item.to_dict() for item in items])


def decode_items(payload: str) -> list[NotificationItem]:
    """Decode a serialized list. Raises ValueError on malformed data."""
    try:
        raw = json.loads(payload)
        if not isinstance(raw, list):
            raise ValueError("saved notifications is not a list")
        items = [NotificationItem.from_dict(entry) for entry in raw]
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Could not decode saved notifications: {e}") from e
    _check_unique(items)
    return items


def _check_unique(items: list[NotificationItem]) -> None:
    identifiers = [item.identifier for item in items]
    if len(set(identifiers)) != len(identifiers):
        raise ValueError("Duplicate notification identifiers")


class NotificationStore:
    """Notification list cached in memory and saved on every mutation.

    Several processes share one database (the TUI, CLI commands, the
    delivery daemon), so each mutation reloads the saved list under a write
    lock, edits it and writes it back. Call refresh() to pick up changes made
    elsewhere without mutating.

    Observers registered with subscribe() are called after each change,
    so a view can re-render from ``notifications``.
    """

    def __init__(self, db_path: Path | None = None, *, autoload: bool = True) -> None:
        self.db_path = db_path
        self._items: list[NotificationItem] = []
        self._observers: list[Callable[[], None]] = []
        if autoload:
            self.load()

    @property
    def notifications(self) -> tuple[NotificationItem, ...]:
        return tuple(self._items)

    def __iter__(self) -> Iterator[NotificationItem]:
        return iter(tuple(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register an observer. Returns a function that unsubscribes it."""
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    # --- Persistence ---

    def _read(self, conn: sqlite3.Connection) -> list[NotificationItem]:
        payload = db.get_value(conn, SAVED_NOTIFICATIONS_KEY)
        if payload is None:
            return []
        try:
            return decode_items(payload)
        except ValueError as e:
            _log.warning("ignoring saved notifications: %s", e)
            return []

    def load(self) -> None:
        """Replace the in-memory list with what's saved (empty if nothing usable)."""
        with db.connect(self.db_path) as conn:
            self._items = self._read(conn)

    def refresh(self) -> bool:
        """Reload the saved list, notifying observers if it changed."""
        before = self._items
        self.load()
        if self._items == before:
            return False
        self._notify()
        return True

    @contextmanager
    def _editing(self) -> Iterator[list[NotificationItem]]:
        """Yield the latest saved list for editing, then save it.

        Nothing is written if the block raises.
        """
        with db.connect(self.db_path) as conn:
            conn.execute("BEGIN IMMEDIATE")
            items = self._read(conn)
            yield items
            db.set_value(conn, SAVED_NOTIFICATIONS_KEY, encode_items(items))
        self._items = items
        _log.debug("saved %d notifications", len(items))
        self._notify()

    def _notify(self) -> None:
        for callback in list(self._observers):
            callback()

    # --- Queries ---

    def get(self, identifier: str) -> NotificationItem | None:
        for item in self._items:
            if item.identifier == identifier:
                return item
        return None

    def resolve(self, prefix: str) -> NotificationItem:
        """Find the single item whose identifier starts with prefix (case-insensitive).

        Raises LookupError when nothing or more than one item matches.
        """
        needle = prefix.strip().upper()
        if not needle:
            raise LookupError("Empty identifier")

        exact = self.get(needle)
        if exact:
            return exact

        matches = [item for item in self._items if item.identifier.startswith(needle)]
        if not matches:
            raise LookupError(f"No notification matching {prefix!r}")
        if len(matches) > 1:
            raise LookupError(f"Identifier {prefix!r} is ambiguous ({len(matches)} matches)")
        return matches[0]

    # --- Mutations ---

    def append(self, item: NotificationItem) -> None:
        with self._editing() as items:
            if any(existing.identifier == item.identifier for existing in items):
                raise ValueError(f"Duplicate notification identifier {item.identifier}")
            items.append(item)

    def update(self, identifier: str, **changes: Any) -> NotificationItem:
        """Replace fields on an item. Raises KeyError if it doesn't exist."""
        with self._editing() as items:
            for index, item in enumerate(items):
                if item.identifier == identifier:
                    updated = replace(item, **changes)
                    items[index] = updated
                    break
            else:
                raise KeyError(identifier)
        return updated

    def remove(self, identifier: str) -> bool:
        with self._editing() as items:
            before = len(items)
            items[:] = [item for item in items if item.identifier != identifier]
            removed = len(items) != before
        return removed

    def clear(self) -> int:
        """Empty the list. Returns how many entries were removed."""
        with self._editing() as items:
            count = len(items)
            items.clear()
        return count

    def replace(self, new_items: list[NotificationItem]) -> None:
        _check_unique(new_items)
        with self._editing() as items:
            items[:] = new_items
