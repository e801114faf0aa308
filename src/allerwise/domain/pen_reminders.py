"""Domain models for adrenaline pen reminders."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class PenReminderResponse:
    """A user's answer to the daily "are you carrying your pen?" reminder."""

    id: str
    date: date
    pen_carried: bool
    responded_at: datetime
    created_at: datetime


@dataclass(frozen=True)
class PenCalendarMarkers:
    """Dates grouped by answer for calendar display."""

    carried: list[date]
    not_carried: list[date]


def pen_reminder_id(day: date) -> str:
    """Return the per-day identifier for a reminder response."""
    return f"pen_reminder_{day.isoformat()}"
