"""Notification triggers and next-fire-time arithmetic."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..store.items import NotificationItem

# Shortest period a repeating interval trigger may use
MIN_REPEAT_INTERVAL = 60.0


def next_trigger_date(time_of_day: time, now: datetime) -> datetime:
    """Return today at time_of_day (seconds zeroed), or tomorrow if that isn't after now."""
    today = datetime.combine(now.date(), time(time_of_day.hour, time_of_day.minute))
    if today <= now:
        return today + timedelta(days=1)
    return today


@dataclass(frozen=True)
class CalendarTrigger:
    """Fires when the wall clock reaches hour:minute."""

    hour: int
    minute: int
    repeats: bool = True

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour must be 0-23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute must be 0-59, got {self.minute}")

    def next_fire_after(self, now: datetime) -> datetime:
        return next_trigger_date(time(self.hour, self.minute), now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "calendar",
            "hour": self.hour,
            "minute": self.minute,
            "repeats": self.repeats,
        }

    def describe(self) -> str:
        when = f"{self.hour:02d}:{self.minute:02d}"
        return f"daily at {when}" if self.repeats else f"at {when}"


@dataclass(frozen=True)
class TimeIntervalTrigger:
    """Fires a fixed number of seconds after registration."""

    interval: float
    repeats: bool = False

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError(f"time interval must be greater than 0, got {self.interval}")
        if self.repeats and self.interval < MIN_REPEAT_INTERVAL:
            raise ValueError(
                f"time interval must be at least {MIN_REPEAT_INTERVAL:.0f}s if repeating"
            )

    def next_fire_after(self, now: datetime) -> datetime:
        return now + timedelta(seconds=self.interval)

    def to_dict(self) -> dict[str, Any]:
        return {"type": "interval", "interval": self.interval, "repeats": self.repeats}

    def describe(self) -> str:
        prefix = "every" if self.repeats else "in"
        return f"{prefix} {int(self.interval)}s"


Trigger = CalendarTrigger | TimeIntervalTrigger


def trigger_from_dict(data: dict[str, Any]) -> Trigger:
    kind = data.get("type")
    if kind == "calendar":
        return CalendarTrigger(
            hour=int(data["hour"]),
            minute=int(data["minute"]),
            repeats=bool(data.get("repeats", True)),
        )
    if kind == "interval":
        return TimeIntervalTrigger(
            interval=float(data["interval"]),
            repeats=bool(data.get("repeats", False)),
        )
    raise ValueError(f"Unknown trigger type: {kind!r}")


def trigger_for(item: NotificationItem, now: datetime) -> Trigger:
    """Build the trigger for a saved item.

    Daily items match hour:minute every day. One-shot items fire once after
    the interval until the next occurrence of their time of day.
    """
    if item.is_repeat:
        return CalendarTrigger(hour=item.time.hour, minute=item.time.minute, repeats=True)

    fire_at = next_trigger_date(item.time, now)
    return TimeIntervalTrigger(interval=(fire_at - now).total_seconds(), repeats=False)
