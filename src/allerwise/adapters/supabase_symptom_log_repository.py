"""Supabase-backed symptom log repository."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from allerwise.domain.symptoms import SymptomLog
from allerwise.services.symptoms import SymptomLogRepository

_COLUMNS = (
    "log_id, log_date, symptoms, notes, took_medication, severity, "
    "created_at, updated_at"
)


@dataclass
class SupabaseSymptomLogRepository(SymptomLogRepository):
    """One row per user and day, keyed by the day's log id."""

    client: Client

    def upsert_log(self, user_id: UUID, log: SymptomLog) -> None:
        self.client.table("symptom_logs").upsert(
            {
                "user_id": str(user_id),
                "log_id": log.id,
                "log_date": log.date.isoformat(),
                "symptoms": log.symptoms,
                "notes": log.notes,
                "took_medication": log.took_medication,
                "severity": log.severity,
                "created_at": log.created_at.isoformat(),
                "updated_at": log.updated_at.isoformat() if log.updated_at else None,
            },
            on_conflict="user_id,log_id",
        ).execute()

    def get_log(self, user_id: UUID, log_id: str) -> SymptomLog | None:
        response = (
            self.client.table("symptom_logs")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("log_id", log_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_log(response.data[0])

    def list_logs(self, user_id: UUID) -> list[SymptomLog]:
        response = (
            self.client.table("symptom_logs")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .order("log_date", desc=True)
            .execute()
        )
        return [_row_to_log(row) for row in response.data or []]

    def delete_log(self, user_id: UUID, log_id: str) -> None:
        self.client.table("symptom_logs").delete().eq("user_id", str(user_id)).eq(
            "log_id", log_id
        ).execute()


def _row_to_log(row: dict[str, object]) -> SymptomLog:
    updated_at = row.get("updated_at")
    return SymptomLog(
        id=str(row["log_id"]),
        date=date.fromisoformat(str(row["log_date"])),
        symptoms=list(row.get("symptoms") or []),
        notes=str(row.get("notes") or ""),
        took_medication=bool(row.get("took_medication")),
        severity=str(row.get("severity") or "none"),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(updated_at)) if updated_at else None,
    )
