"""Role-play training sessions with simulated friends."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from allerwise.domain.conversations import (
    USER_SPEAKER,
    ConversationMessage,
    ConversationState,
    ScenarioProgress,
    TrainingSession,
)
from allerwise.errors import InvalidInputError, NotFoundError
from allerwise.services.conversation import (
    advance_state,
    build_redo_prompt,
    build_system_prompt,
    fallback_line,
    next_speaker,
    redo_reason,
    training_outcome,
)
from allerwise.services.scenarios import (
    FRIEND_ROTATION,
    SCENARIOS,
    Scenario,
    get_scenario,
)
from allerwise.services.users import UserService

ACTIVE = "ACTIVE"
COMPLETED = "COMPLETED"

_logger = logging.getLogger(__name__)


class DialogueClient(Protocol):
    """Interface for chat completions."""

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        user_input: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        """Return the assistant reply text."""


class SpeechClient(Protocol):
    """Interface for text-to-speech."""

    async def synthesize(self, *, model: str, text: str, voice: str) -> bytes:
        """Return encoded audio for the text."""


class TrainingSessionRepository(Protocol):
    """Persistence interface for training sessions."""

    def create_session(
        self,
        user_id: UUID,
        scenario: str,
        current_speaker: str,
        messages: list[ConversationMessage],
    ) -> TrainingSession:
        """Create an active session and return it."""

    def get_session(self, session_id: UUID) -> TrainingSession | None:
        """Return a session by id, if present."""

    def update_session(self, session: TrainingSession) -> None:
        """Overwrite the stored session."""

    def list_sessions(
        self, user_id: UUID, scenario: str | None = None
    ) -> list[TrainingSession]:
        """Return the user's sessions, newest first."""


@dataclass
class TrainingService:
    """Drives a training conversation turn by turn."""

    repository: TrainingSessionRepository
    dialogue_client: DialogueClient
    speech_client: SpeechClient
    user_service: UserService
    model: str = "gpt-3.5-turbo"
    tts_model: str = "tts-1"
    max_tokens: int = 300
    temperature: float = 0.2

    def start_session(self, user_id: UUID, scenario_key: str | None) -> TrainingSession:
        """Create a session seeded with the scenario's opening lines."""
        scenario = get_scenario(scenario_key)
        created = self.repository.create_session(
            user_id,
            scenario.key,
            current_speaker=FRIEND_ROTATION[0],
            messages=_opening_messages(scenario),
        )
        _logger.info("Started %s training session %s", scenario.key, created.id)
        return created

    def get_session(self, session_id: UUID) -> TrainingSession:
        session = self.repository.get_session(session_id)
        if session is None:
            raise NotFoundError(f"Training session {session_id} not found")
        return session

    async def process_user_input(
        self, session_id: UUID, text: str
    ) -> ConversationMessage | None:
        """Record the user's turn and return the next character's reply.

        Blank input is ignored and returns ``None``.
        """
        session = self.get_session(session_id)
        if session.status != ACTIVE:
            raise InvalidInputError("This training session has already finished")
        user_input = text.strip()
        if not user_input:
            return None

        scenario = get_scenario(session.scenario)
        state = advance_state(session.state, user_input, session.messages)
        messages = [
            *session.messages,
            ConversationMessage(
                speaker=USER_SPEAKER, content=user_input, timestamp=_now()
            ),
        ]
        speaker = session.current_speaker
        reply_text = await self._generate_reply(
            session, scenario, state, messages, user_input
        )
        reply = ConversationMessage(speaker=speaker, content=reply_text, timestamp=_now())
        self.repository.update_session(
            replace(
                session,
                messages=[*messages, reply],
                state=state,
                current_speaker=next_speaker(speaker, state.stage),
            )
        )
        return reply

    def finish_session(self, session_id: UUID) -> TrainingSession:
        """Score the conversation and mark the session completed."""
        session = self.get_session(session_id)
        finished = replace(
            session, status=COMPLETED, outcome=training_outcome(session.messages)
        )
        self.repository.update_session(finished)
        _logger.info("Finished training session %s: %s", session_id, finished.outcome)
        return finished

    def reset_session(self, session_id: UUID) -> TrainingSession:
        """Restart the conversation from the scenario's opening lines."""
        session = self.get_session(session_id)
        scenario = get_scenario(session.scenario)
        restarted = replace(
            session,
            status=ACTIVE,
            current_speaker=FRIEND_ROTATION[0],
            messages=_opening_messages(scenario),
            state=ConversationState(),
            outcome=None,
        )
        self.repository.update_session(restarted)
        return restarted

    def list_sessions(
        self, user_id: UUID, scenario_key: str | None = None
    ) -> list[TrainingSession]:
        """Return the user's sessions, newest first, optionally for one scenario."""
        if scenario_key is not None and scenario_key not in SCENARIOS:
            raise InvalidInputError(f"Unknown scenario: {scenario_key}")
        return self.repository.list_sessions(user_id, scenario_key)

    def progress(self, user_id: UUID) -> list[ScenarioProgress]:
        """Summarise attempts and scores per scenario, most recent first."""
        grouped: dict[str, list[TrainingSession]] = {}
        for session in self.repository.list_sessions(user_id):
            grouped.setdefault(session.scenario, []).append(session)
        return [
            _scenario_progress(scenario, sessions)
            for scenario, sessions in grouped.items()
        ]

    async def synthesize_line(
        self, session_id: UUID, speaker: str, text: str
    ) -> bytes | None:
        """Return spoken audio for a character line, or ``None`` on failure."""
        session = self.get_session(session_id)
        character = get_scenario(session.scenario).characters.get(speaker)
        if character is None:
            raise InvalidInputError(f"Unknown speaker: {speaker}")
        if not text.strip():
            return None
        try:
            return await self.speech_client.synthesize(
                model=self.tts_model, text=text, voice=character.voice
            )
        except Exception:
            _logger.exception("Speech synthesis failed for %s", speaker)
            return None

    async def _generate_reply(  # noqa: PLR0913
        self,
        session: TrainingSession,
        scenario: Scenario,
        state: ConversationState,
        messages: list[ConversationMessage],
        user_input: str,
    ) -> str:
        speaker = session.current_speaker
        character = scenario.characters.get(speaker)
        if character is None:
            return fallback_line(state.stage, speaker)

        user = await self.user_service.load_user(session.user_id)
        allergens = list(user.allergies) if user else []
        system_prompt = build_system_prompt(
            character,
            speaker,
            scenario,
            state,
            messages,
            user_input,
            allergens,
        )
        try:
            reply = (await self._complete(system_prompt, user_input)).strip()
        except Exception:
            _logger.exception("Dialogue generation failed for session %s", session.id)
            return fallback_line(state.stage, speaker)
        if not reply:
            return fallback_line(state.stage, speaker)

        reason = redo_reason(reply, state, messages)
        if reason is None:
            return reply
        _logger.info("Regenerating reply for session %s: %s", session.id, reason)
        try:
            retry = (
                await self._complete(build_redo_prompt(character, reason), user_input)
            ).strip()
        except Exception:
            _logger.exception("Dialogue regeneration failed for session %s", session.id)
            return reply
        return retry or reply

    async def _complete(self, system_prompt: str, user_input: str) -> str:
        return await self.dialogue_client.complete(
            model=self.model,
            system_prompt=system_prompt,
            user_input=user_input,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )


def _scenario_progress(
    scenario: str, sessions: list[TrainingSession]
) -> ScenarioProgress:
    scores = [
        session.outcome.score
        for session in sessions
        if session.status == COMPLETED and session.outcome is not None
    ]
    latest = next(
        (session.outcome for session in sessions if session.outcome is not None),
        None,
    )
    return ScenarioProgress(
        scenario=scenario,
        attempts=len(sessions),
        completed=len(scores),
        best_score=max(scores, default=0),
        # newest first: compare the latest score with the first one
        improvement=scores[0] - scores[-1] if len(scores) > 1 else 0,
        latest_outcome=latest,
        last_attempt=sessions[0].started_at,
    )


def _opening_messages(scenario: Scenario) -> list[ConversationMessage]:
    now = _now()
    return [
        ConversationMessage(speaker=speaker, content=content, timestamp=now)
        for speaker, content in scenario.opening_lines
    ]


def _now() -> datetime:
    return datetime.now(tz=UTC)
