"""Supabase-backed pen reminder repository."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from allerwise.domain.pen_reminders import PenReminderResponse
from allerwise.services.pen_reminders import PenReminderRepository


@dataclass
class SupabasePenReminderRepository(PenReminderRepository):
    """Supabase implementation for daily pen reminder answers."""

    client: Client

    def upsert_response(self, user_id: UUID, response: PenReminderResponse) -> None:
        self.client.table("pen_reminder_responses").upsert(
            {
                "user_id": str(user_id),
                "response_id": response.id,
                "response_date": response.date.isoformat(),
                "pen_carried": response.pen_carried,
                "responded_at": response.responded_at.isoformat(),
                "created_at": response.created_at.isoformat(),
            },
            on_conflict="user_id,response_id",
        ).execute()

    def list_responses(self, user_id: UUID) -> list[PenReminderResponse]:
        response = (
            self.client.table("pen_reminder_responses")
            .select("response_id, response_date, pen_carried, responded_at, created_at")
            .eq("user_id", str(user_id))
            .order("response_date", desc=True)
            .execute()
        )
        return [
            PenReminderResponse(
                id=str(row["response_id"]),
                date=date.fromisoformat(str(row["response_date"])),
                pen_carried=bool(row["pen_carried"]),
                responded_at=datetime.fromisoformat(str(row["responded_at"])),
                created_at=datetime.fromisoformat(str(row["created_at"])),
            )
            for row in response.data or []
        ]
