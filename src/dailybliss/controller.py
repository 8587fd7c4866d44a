"""Operations behind the dailybliss screen.

NotificationController keeps the saved list and the notification center in
step: every entry in the list that is enabled has a pending request under
the same identifier.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, time
from pathlib import Path

from .center import (
    AuthorizationStatus,
    NotificationCenter,
    NotificationRequest,
    NotifierBackend,
    ScheduleError,
    get_backend,
    trigger_for,
)
from .config import Config, load_config
from .log import get_logger
from .store import NotificationItem, NotificationStore, new_identifier

_log = get_logger("controller")


class NotificationController:
    def __init__(
        self,
        db_path: Path | None = None,
        config: Config | None = None,
        backend: NotifierBackend | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config or load_config()
        if backend is None:
            backend = get_backend(self.config.notifier.backend)
        self.store = NotificationStore(db_path)
        self.center = NotificationCenter(db_path, backend)
        self._clock = clock or datetime.now

    @property
    def notifications(self) -> tuple[NotificationItem, ...]:
        return self.store.notifications

    def now(self) -> datetime:
        return self._clock()

    # --- Permission ---

    def check_status(self) -> bool:
        """True when notifications are authorized."""
        return self.center.authorization_status() is AuthorizationStatus.AUTHORIZED

    def request_permission(self) -> bool:
        return self.center.request_authorization()

    # --- Scheduling ---

    def _schedule(self, item: NotificationItem) -> None:
        now = self.now()
        try:
            trigger = trigger_for(item, now)
        except ValueError as e:
            raise ScheduleError(str(e)) from e

        request = NotificationRequest(
            identifier=item.identifier,
            title=item.title,
            body=item.body,
            trigger=trigger,
            sound=self.config.notifier.sound,
        )
        self.center.add(request, now=now)

    def add_notification(
        self,
        title: str,
        body: str,
        time_of_day: time,
        is_repeat: bool = True,
    ) -> NotificationItem:
        """Schedule a new notification and save it.

        Raises ValueError for an empty title or body, ScheduleError if the
        center rejects the request (the list is left unchanged).
        """
        title = title.strip()
        body = body.strip()
        if not title:
            raise ValueError("Title is required")
        if not body:
            raise ValueError("Body is required")

        item = NotificationItem(
            identifier=new_identifier(),
            title=title,
            body=body,
            time=time_of_day.replace(second=0, microsecond=0),
            is_repeat=is_repeat,
            is_enabled=True,
        )
        self._schedule(item)
        self.store.append(item)
        _log.info("added %s: %s", item.identifier, item.title)
        return item

    def delete_notification(self, identifier: str) -> bool:
        """Cancel the pending request and drop the entry. Returns False if unknown."""
        self.center.remove_pending([identifier])
        removed = self.store.remove(identifier)
        if removed:
            _log.info("deleted %s", identifier)
        return removed

    def cancel_all(self) -> int:
        """Cancel every pending request and empty the list. Returns entries removed."""
        self.center.remove_all_pending()
        count = self.store.clear()
        _log.info("cancelled all (%d)", count)
        return count

    def set_enabled(self, identifier: str, enabled: bool) -> NotificationItem:
        """Turn an entry on (rescheduling from now) or off (cancelling its request).

        Raises KeyError for an unknown identifier.
        """
        self.store.refresh()
        item = self.store.get(identifier)
        if item is None:
            raise KeyError(identifier)

        if enabled:
            self._schedule(item)
        else:
            self.center.remove_pending([identifier])

        return self.store.update(identifier, is_enabled=enabled)

    def toggle(self, identifier: str) -> NotificationItem:
        self.store.refresh()
        item = self.store.get(identifier)
        if item is None:
            raise KeyError(identifier)
        return self.set_enabled(identifier, not item.is_enabled)

    def is_scheduled(self, identifier: str) -> bool:
        return self.center.get_pending(identifier) is not None

    def resolve(self, prefix: str) -> NotificationItem:
        return self.store.resolve(prefix)

    def resync(self) -> list[NotificationItem]:
        """Re-register enabled daily entries that have no pending request.

        One-shot entries are left alone: once they've fired their request is
        gone on purpose.
        """
        pending = {p.identifier for p in self.center.pending_requests()}
        rescheduled = []
        for item in self.store:
            if item.is_enabled and item.is_repeat and item.identifier not in pending:
                self._schedule(item)
                rescheduled.append(item)
        if rescheduled:
            _log.info("resynced %d notification(s)", len(rescheduled))
        return rescheduled
