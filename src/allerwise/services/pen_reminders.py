"""Daily adrenaline pen reminder responses."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from uuid import UUID

from allerwise.domain.pen_reminders import (
    PenCalendarMarkers,
    PenReminderResponse,
    pen_reminder_id,
)


class PenReminderRepository(Protocol):
    """Persistence interface for pen reminder responses."""

    def upsert_response(self, user_id: UUID, response: PenReminderResponse) -> None:
        """Create or overwrite the response for its day."""

    def list_responses(self, user_id: UUID) -> list[PenReminderResponse]:
        """Return all responses for a user."""


@dataclass
class PenReminderService:
    """Records daily answers and summarises pen-carrying compliance."""

    repository: PenReminderRepository

    def record_response(
        self, user_id: UUID, pen_carried: bool, today: date | None = None
    ) -> PenReminderResponse:
        """Store today's answer, replacing an earlier answer for the same day."""
        now = datetime.now(tz=UTC)
        day = today or now.date()
        response = PenReminderResponse(
            id=pen_reminder_id(day),
            date=day,
            pen_carried=pen_carried,
            responded_at=now,
            created_at=now,
        )
        self.repository.upsert_response(user_id, response)
        return response

    def list_responses(self, user_id: UUID) -> list[PenReminderResponse]:
        """Return responses, newest day first."""
        return sorted(
            self.repository.list_responses(user_id),
            key=lambda response: response.date,
            reverse=True,
        )

    def get_response_for_date(
        self, user_id: UUID, day: date
    ) -> PenReminderResponse | None:
        for response in self.repository.list_responses(user_id):
            if response.date == day:
                return response
        return None

    def has_response_for_date(self, user_id: UUID, day: date) -> bool:
        return self.get_response_for_date(user_id, day) is not None

    def calendar_markers(self, user_id: UUID) -> PenCalendarMarkers:
        """Split answered days into carried and not-carried groups."""
        responses = self.list_responses(user_id)
        return PenCalendarMarkers(
            carried=[response.date for response in responses if response.pen_carried],
            not_carried=[
                response.date for response in responses if not response.pen_carried
            ],
        )

    def recent_responses(
        self, user_id: UUID, days: int = 7, today: date | None = None
    ) -> list[PenReminderResponse]:
        cutoff = (today or datetime.now(tz=UTC).date()) - timedelta(days=days)
        return [
            response
            for response in self.list_responses(user_id)
            if response.date > cutoff
        ]

    def monthly_compliance_rate(self, user_id: UUID, today: date | None = None) -> float:
        """Share of answered days in the last 30 where the pen was carried."""
        responses = self.recent_responses(user_id, days=30, today=today)
        if not responses:
            return 0.0
        carried = sum(1 for response in responses if response.pen_carried)
        return carried / len(responses)
