"""Pydantic request models and response payload helpers."""

import datetime
from dataclasses import asdict
from uuid import UUID

from pydantic import BaseModel, Field

from allerwise.domain.conversations import (
    ConversationMessage,
    ScenarioProgress,
    TrainingSession,
)
from allerwise.domain.models import UserRecord
from allerwise.domain.pen_reminders import PenReminderResponse
from allerwise.domain.scans import ScanHistoryEntry
from allerwise.domain.symptoms import SymptomLog


class RegisterUserRequest(BaseModel):
    """Profile creation payload."""

    email: str = Field(min_length=3)
    name: str | None = None


class AllergiesRequest(BaseModel):
    """Allergen selection payload."""

    allergies: list[str]


class MedicalInfoRequest(BaseModel):
    """Free-form medical info payload."""

    medical_info: dict[str, object]


class ScanRequest(BaseModel):
    """Barcode scan payload."""

    barcode: str


class SymptomLogRequest(BaseModel):
    """Daily symptom log payload."""

    date: datetime.date
    symptoms: list[str] = Field(default_factory=list)
    notes: str = ""
    took_medication: bool = False
    severity: str = "none"


class SymptomLogUpdateRequest(BaseModel):
    """Partial symptom log update payload."""

    symptoms: list[str] | None = None
    notes: str | None = None
    took_medication: bool | None = None
    severity: str | None = None


class PenReminderRequest(BaseModel):
    """Daily pen reminder answer."""

    pen_carried: bool


class StartTrainingRequest(BaseModel):
    """Training session creation payload."""

    user_id: UUID
    scenario: str | None = None


class TrainingMessageRequest(BaseModel):
    """User turn in a training session."""

    text: str


class SpeechRequest(BaseModel):
    """Line to be spoken by a character."""

    speaker: str
    text: str


def user_payload(user: UserRecord) -> dict[str, object]:
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "allergies": list(user.allergies),
        "medical_info": user.medical_info,
    }


def scan_entry_payload(entry: ScanHistoryEntry) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "created_at": entry.created_at.isoformat(),
        "scan_result": entry.scan_result.to_document(),
    }


def symptom_log_payload(log: SymptomLog) -> dict[str, object]:
    return {
        "id": log.id,
        "date": log.date.isoformat(),
        "symptoms": list(log.symptoms),
        "notes": log.notes,
        "took_medication": log.took_medication,
        "severity": log.severity,
        "severity_level": log.severity_level,
        "created_at": log.created_at.isoformat(),
        "updated_at": log.updated_at.isoformat() if log.updated_at else None,
    }


def pen_response_payload(response: PenReminderResponse) -> dict[str, object]:
    return {
        "id": response.id,
        "date": response.date.isoformat(),
        "pen_carried": response.pen_carried,
        "responded_at": response.responded_at.isoformat(),
    }


def message_payload(message: ConversationMessage) -> dict[str, object]:
    return {
        "speaker": message.speaker,
        "role": message.role,
        "content": message.content,
        "timestamp": message.timestamp.isoformat(),
    }


def training_session_payload(session: TrainingSession) -> dict[str, object]:
    return {
        "id": str(session.id),
        "user_id": str(session.user_id),
        "scenario": session.scenario,
        "status": session.status,
        "current_speaker": session.current_speaker,
        "messages": [message_payload(message) for message in session.messages],
        "state": asdict(session.state),
        "outcome": asdict(session.outcome) if session.outcome else None,
        "started_at": _isoformat(session.started_at),
    }


def training_summary_payload(session: TrainingSession) -> dict[str, object]:
    """Session listing entry without the message history."""
    return {
        "id": str(session.id),
        "scenario": session.scenario,
        "status": session.status,
        "stage": session.state.stage,
        "turns": sum(1 for message in session.messages if message.is_user),
        "outcome": asdict(session.outcome) if session.outcome else None,
        "score": session.outcome.score if session.outcome else None,
        "started_at": _isoformat(session.started_at),
    }


def scenario_progress_payload(progress: ScenarioProgress) -> dict[str, object]:
    return {
        "scenario": progress.scenario,
        "attempts": progress.attempts,
        "completed": progress.completed,
        "best_score": progress.best_score,
        "improvement": progress.improvement,
        "latest_outcome": (
            asdict(progress.latest_outcome) if progress.latest_outcome else None
        ),
        "last_attempt": _isoformat(progress.last_attempt),
    }


def _isoformat(value: datetime.datetime | None) -> str | None:
    return value.isoformat() if value else None
