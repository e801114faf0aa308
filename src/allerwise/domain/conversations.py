"""Domain models for conversational training sessions."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

USER_SPEAKER = "user"


@dataclass(frozen=True)
class CharacterProfile:
    """Simulated friend taking part in a training scenario."""

    name: str
    voice: str
    personality: str


@dataclass(frozen=True)
class ConversationMessage:
    """One turn in a training conversation."""

    speaker: str
    content: str
    timestamp: datetime

    @property
    def role(self) -> str:
        return "user" if self.speaker == USER_SPEAKER else "assistant"

    @property
    def is_user(self) -> bool:
        return self.speaker == USER_SPEAKER


@dataclass(frozen=True)
class ConversationState:
    """How much of the allergy narrative the user has disclosed so far."""

    allergy_explained: bool = False
    severity_explained: bool = False
    symptoms_explained: bool = False
    stage: int = 1


@dataclass(frozen=True)
class TrainingOutcome:
    """Coarse summary of a finished training session."""

    mentioned_allergy: bool
    refused_unsafe_food: bool
    explained_severity: bool
    mentioned_severe_symptoms: bool

    @property
    def score(self) -> int:
        """Number of the four disclosure goals the user reached."""
        return sum(
            (
                self.mentioned_allergy,
                self.refused_unsafe_food,
                self.explained_severity,
                self.mentioned_severe_symptoms,
            )
        )


@dataclass(frozen=True)
class TrainingSession:
    """Persisted state of one training conversation."""

    id: UUID
    user_id: UUID
    scenario: str
    status: str
    current_speaker: str
    messages: list[ConversationMessage] = field(default_factory=list)
    state: ConversationState = field(default_factory=ConversationState)
    outcome: TrainingOutcome | None = None
    started_at: datetime | None = None


@dataclass(frozen=True)
class ScenarioProgress:
    """Per-scenario summary of a user's training attempts."""

    scenario: str
    attempts: int
    completed: int
    best_score: int
    improvement: int
    latest_outcome: TrainingOutcome | None
    last_attempt: datetime | None
