"""Supabase-backed training session repository."""

from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from allerwise.domain.conversations import (
    ConversationMessage,
    ConversationState,
    TrainingOutcome,
    TrainingSession,
)
from allerwise.services.training import ACTIVE, TrainingSessionRepository

_COLUMNS = (
    "id, user_id, scenario, status, current_speaker, messages_json, state_json, "
    "outcome_json, created_at"
)


@dataclass
class SupabaseTrainingSessionRepository(TrainingSessionRepository):
    """Stores conversations with their history and state as JSON columns."""

    client: Client

    def create_session(
        self,
        user_id: UUID,
        scenario: str,
        current_speaker: str,
        messages: list[ConversationMessage],
    ) -> TrainingSession:
        """Create a session row and return it."""
        response = (
            self.client.table("training_sessions")
            .insert(
                {
                    "user_id": str(user_id),
                    "scenario": scenario,
                    "status": ACTIVE,
                    "current_speaker": current_speaker,
                    "messages_json": [_message_to_json(m) for m in messages],
                    "state_json": asdict(ConversationState()),
                    "outcome_json": None,
                    "created_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create training session")
        return _row_to_session(response.data[0])

    def get_session(self, session_id: UUID) -> TrainingSession | None:
        """Return a session by id, if present."""
        response = (
            self.client.table("training_sessions")
            .select(_COLUMNS)
            .eq("id", str(session_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_session(response.data[0])

    def update_session(self, session: TrainingSession) -> None:
        """Overwrite status, history, state and outcome."""
        self.client.table("training_sessions").update(
            {
                "status": session.status,
                "current_speaker": session.current_speaker,
                "messages_json": [_message_to_json(m) for m in session.messages],
                "state_json": asdict(session.state),
                "outcome_json": asdict(session.outcome) if session.outcome else None,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).eq("id", str(session.id)).execute()

    def list_sessions(
        self, user_id: UUID, scenario: str | None = None
    ) -> list[TrainingSession]:
        """Return the user's sessions, newest first."""
        query = (
            self.client.table("training_sessions")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
        )
        if scenario is not None:
            query = query.eq("scenario", scenario)
        response = query.order("created_at", desc=True).execute()
        return [_row_to_session(row) for row in response.data or []]


def _message_to_json(message: ConversationMessage) -> dict[str, str]:
    return {
        "speaker": message.speaker,
        "content": message.content,
        "timestamp": message.timestamp.isoformat(),
    }


def _row_to_session(row: dict[str, object]) -> TrainingSession:
    outcome = row.get("outcome_json")
    created_at = row.get("created_at")
    return TrainingSession(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        scenario=str(row["scenario"]),
        status=str(row["status"]),
        current_speaker=str(row["current_speaker"]),
        messages=[
            ConversationMessage(
                speaker=item["speaker"],
                content=item["content"],
                timestamp=datetime.fromisoformat(item["timestamp"]),
            )
            for item in row.get("messages_json") or []
        ],
        state=ConversationState(**(row.get("state_json") or {})),
        outcome=TrainingOutcome(**outcome) if outcome else None,
        started_at=datetime.fromisoformat(str(created_at)) if created_at else None,
    )
