"""Local notification center.

Keeps pending notification requests in the dailybliss database and fires
them through a desktop backend when their trigger comes due. Requests are
keyed by identifier; adding a request with an existing identifier replaces it.
"""

from __future__ import annotations

import json
import sqlite3
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from pathlib import Path

from ..log import get_logger
from ..store import db
from .backends import BackendError, NotifierBackend, detect_backend
from .triggers import Trigger, trigger_from_dict

AUTHORIZATION_KEY = "AuthorizationStatus"
BADGE_KEY = "BadgeCount"

_log = get_logger("center")


class ScheduleError(Exception):
    """Raised when a notification request can't be registered."""


class AuthorizationError(Exception):
    """Raised when asking for notification permission fails outright."""


class AuthorizationStatus(StrEnum):
    NOT_DETERMINED = "not_determined"
    AUTHORIZED = "authorized"
    DENIED = "denied"


@dataclass(frozen=True)
class NotificationRequest:
    """Content plus trigger, registered under an identifier."""

    identifier: str
    title: str
    body: str
    trigger: Trigger
    sound: bool = True


@dataclass(frozen=True)
class PendingRequest:
    """A registered request and its scheduling state."""

    request: NotificationRequest
    next_fire_at: float
    created_at: float
    last_fired_at: float | None = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> PendingRequest:
        request = NotificationRequest(
            identifier=row["identifier"],
            title=row["title"],
            body=row["body"],
            trigger=trigger_from_dict(json.loads(row["trigger"])),
            sound=bool(row["sound"]),
        )
        return cls(
            request=request,
            next_fire_at=row["next_fire_at"],
            created_at=row["created_at"],
            last_fired_at=row["last_fired_at"],
        )

    @property
    def identifier(self) -> str:
        return self.request.identifier

    @property
    def next_fire_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.next_fire_at)


class NotificationCenter:
    """Authorization, pending requests and delivery for local notifications."""

    def __init__(self, db_path: Path | None = None, backend: NotifierBackend | None = None) -> None:
        self.db_path = db_path
        self.backend = backend if backend is not None else detect_backend()

    # --- Authorization ---

    def authorization_status(self) -> AuthorizationStatus:
        with db.connect(self.db_path) as conn:
            value = db.get_value(conn, AUTHORIZATION_KEY)
        if value is None:
            return AuthorizationStatus.NOT_DETERMINED
        try:
            return AuthorizationStatus(value)
        except ValueError:
            _log.warning("unknown authorization status %r, treating as not determined", value)
            return AuthorizationStatus.NOT_DETERMINED

    def request_authorization(self) -> bool:
        """Ask for permission to post notifications.

        The first request decides; later calls return the stored decision.
        Returns True when notifications are authorized.
        """
        status = self.authorization_status()
        if status is not AuthorizationStatus.NOT_DETERMINED:
            return status is AuthorizationStatus.AUTHORIZED

        try:
            granted = self.backend.available()
        except OSError as e:
            raise AuthorizationError(f"Could not probe {self.backend.name}: {e}") from e

        status = AuthorizationStatus.AUTHORIZED if granted else AuthorizationStatus.DENIED
        with db.connect(self.db_path) as conn:
            db.set_value(conn, AUTHORIZATION_KEY, status.value)
        _log.info("authorization %s (backend %s)", status.value, self.backend.name)
        return granted

    def reset_authorization(self) -> None:
        with db.connect(self.db_path) as conn:
            db.delete_value(conn, AUTHORIZATION_KEY)
        _log.info("authorization reset")

    # --- Badge ---

    def badge_count(self) -> int:
        with db.connect(self.db_path) as conn:
            value = db.get_value(conn, BADGE_KEY)
        return int(value) if value and value.isdigit() else 0

    def set_badge_count(self, count: int) -> None:
        with db.connect(self.db_path) as conn:
            db.set_value(conn, BADGE_KEY, str(max(count, 0)))

    # --- Pending requests ---

    def add(self, request: NotificationRequest, now: datetime | None = None) -> PendingRequest:
        """Register a request, replacing any pending one with the same identifier."""
        now = now or datetime.now()
        try:
            next_fire_at = request.trigger.next_fire_after(now).timestamp()
        except (ValueError, OverflowError) as e:
            raise ScheduleError(f"Invalid trigger for {request.identifier}: {e}") from e

        created_at = time.time()
        try:
            with db.connect(self.db_path) as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO pending_requests
                        (identifier, title, body, sound, trigger, repeats, next_fire_at, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        request.identifier,
                        request.title,
                        request.body,
                        int(request.sound),
                        json.dumps(request.trigger.to_dict()),
                        int(request.trigger.repeats),
                        next_fire_at,
                        created_at,
                    ),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise ScheduleError(f"Could not store request {request.identifier}: {e}") from e

        _log.info(
            "scheduled %s (%s), next at %s",
            request.identifier,
            request.trigger.describe(),
            datetime.fromtimestamp(next_fire_at).isoformat(timespec="seconds"),
        )
        return PendingRequest(request=request, next_fire_at=next_fire_at, created_at=created_at)

    def remove_pending(self, identifiers: Iterable[str]) -> int:
        """Remove pending requests by identifier. Unknown identifiers are ignored."""
        ids = list(identifiers)
        if not ids:
            return 0
        placeholders = ", ".join("?" for _ in ids)
        with db.connect(self.db_path) as conn:
            cursor = conn.execute(
                f"DELETE FROM pending_requests WHERE identifier IN ({placeholders})",
                ids,
            )
            conn.commit()
        _log.info("removed %d pending request(s)", cursor.rowcount)
        return cursor.rowcount

    def remove_all_pending(self) -> int:
        with db.connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM pending_requests")
            conn.commit()
        _log.info("removed all pending requests (%d)", cursor.rowcount)
        return cursor.rowcount

    def pending_requests(self) -> list[PendingRequest]:
        """All pending requests, soonest first."""
        with db.connect(self.db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM pending_requests ORDER BY next_fire_at ASC"
            ).fetchall()
        return [PendingRequest.from_row(row) for row in rows]

    def get_pending(self, identifier: str) -> PendingRequest | None:
        with db.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM pending_requests WHERE identifier = ?",
                (identifier,),
            ).fetchone()
        return PendingRequest.from_row(row) if row else None

    def due_requests(self, now: datetime | None = None) -> list[PendingRequest]:
        now = now or datetime.now()
        with db.connect(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT * FROM pending_requests
                WHERE next_fire_at <= ?
                ORDER BY next_fire_at ASC
                """,
                (now.timestamp(),),
            ).fetchall()
        return [PendingRequest.from_row(row) for row in rows]

    # --- Delivery ---

    def _claim(self, pending: PendingRequest, now: datetime) -> bool:
        """Advance or remove a due request; False if someone else already did.

        The row is matched on its current next_fire_at so two delivery loops
        sharing a database never fire the same occurrence twice.
        """
        request = pending.request
        with db.connect(self.db_path) as conn:
            if request.trigger.repeats:
                next_fire_at = request.trigger.next_fire_after(now).timestamp()
                cursor = conn.execute(
                    """
                    UPDATE pending_requests
                    SET next_fire_at = ?, last_fired_at = ?
                    WHERE identifier = ? AND next_fire_at = ?
                    """,
                    (next_fire_at, now.timestamp(), request.identifier, pending.next_fire_at),
                )
            else:
                cursor = conn.execute(
                    "DELETE FROM pending_requests WHERE identifier = ? AND next_fire_at = ?",
                    (request.identifier, pending.next_fire_at),
                )
            conn.commit()
        return cursor.rowcount == 1

    def deliver_due(
        self,
        now: datetime | None = None,
        present: Callable[[NotificationRequest], None] | None = None,
    ) -> list[NotificationRequest]:
        """Fire every request whose time has come.

        A request that was due several times while nothing was running fires
        once, then moves to its next occurrence. Without authorization the
        schedule still advances but nothing is shown.

        Returns the requests that were shown.
        """
        now = now or datetime.now()
        due = self.due_requests(now)
        if not due:
            return []

        authorized = self.authorization_status() is AuthorizationStatus.AUTHORIZED
        delivered = []

        for pending in due:
            if not self._claim(pending, now):
                continue

            request = pending.request
            if not authorized:
                _log.info("not authorized, suppressed %s", request.identifier)
                continue

            try:
                self.backend.post(request.title, request.body, sound=request.sound)
            except BackendError as e:
                _log.error("post failed for %s: %s", request.identifier, e)

            if present is not None:
                present(request)

            delivered.append(request)
            _log.info("delivered %s: %s", request.identifier, request.title)

        if delivered:
            self.set_badge_count(self.badge_count() + len(delivered))

        return delivered
