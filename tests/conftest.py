"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from allerwise.adapters.openfoodfacts_client import ProductClient
from allerwise.config import Settings
from allerwise.containers import AppContainer
from allerwise.domain.conversations import ConversationMessage, TrainingSession
from allerwise.domain.models import UserRecord
from allerwise.domain.pen_reminders import PenReminderResponse
from allerwise.domain.scans import ProductScanResult, ScanHistoryEntry
from allerwise.domain.symptoms import SymptomLog
from allerwise.services.allergies import AllergyProfileService
from allerwise.services.cache import InMemoryCache
from allerwise.services.pen_reminders import PenReminderRepository, PenReminderService
from allerwise.services.product_scan import ProductScanService, ScanHistoryRepository
from allerwise.services.symptoms import SymptomLogRepository, SymptomLogService
from allerwise.services.training import (
    ACTIVE,
    DialogueClient,
    SpeechClient,
    TrainingService,
    TrainingSessionRepository,
)
from allerwise.services.users import UserRepository, UserService


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[UUID, UserRecord] = field(default_factory=dict)

    def add(self, allergies: list[str] | None = None) -> UserRecord:
        user = UserRecord(
            id=uuid4(),
            name="sam",
            email="sam@example.com",
            allergies=list(allergies or []),
            medical_info=None,
        )
        self.users[user.id] = user
        return user

    def get_user(self, user_id: UUID) -> UserRecord | None:
        return self.users.get(user_id)

    def create_user(self, name: str, email: str) -> UserRecord:
        user = UserRecord(
            id=uuid4(), name=name, email=email, allergies=[], medical_info=None
        )
        self.users[user.id] = user
        return user

    def update_allergies(self, user_id: UUID, allergies: list[str]) -> UserRecord:
        user = replace(self.users[user_id], allergies=list(allergies))
        self.users[user_id] = user
        return user

    def update_medical_info(
        self, user_id: UUID, medical_info: dict[str, object]
    ) -> UserRecord:
        user = replace(self.users[user_id], medical_info=medical_info)
        self.users[user_id] = user
        return user


@dataclass
class InMemoryScanHistoryRepository(ScanHistoryRepository):
    """In-memory scan history for tests."""

    entries: list[ScanHistoryEntry] = field(default_factory=list)
    fail: bool = False

    def add_entry(
        self, user_id: UUID, scan_result: ProductScanResult, created_at: datetime
    ) -> ScanHistoryEntry:
        if self.fail:
            raise RuntimeError("history unavailable")
        entry = ScanHistoryEntry(
            id=uuid4(), user_id=user_id, scan_result=scan_result, created_at=created_at
        )
        self.entries.append(entry)
        return entry

    def list_entries(self, user_id: UUID, limit: int) -> list[ScanHistoryEntry]:
        owned = [entry for entry in self.entries if entry.user_id == user_id]
        owned.sort(key=lambda entry: entry.created_at, reverse=True)
        return owned[:limit]

    def delete_entry(self, entry_id: UUID) -> None:
        self.entries = [entry for entry in self.entries if entry.id != entry_id]

    def clear(self, user_id: UUID) -> None:
        self.entries = [entry for entry in self.entries if entry.user_id != user_id]


@dataclass
class InMemorySymptomLogRepository(SymptomLogRepository):
    """In-memory symptom logs keyed by user and log id."""

    logs: dict[tuple[UUID, str], SymptomLog] = field(default_factory=dict)

    def upsert_log(self, user_id: UUID, log: SymptomLog) -> None:
        self.logs[(user_id, log.id)] = log

    def get_log(self, user_id: UUID, log_id: str) -> SymptomLog | None:
        return self.logs.get((user_id, log_id))

    def list_logs(self, user_id: UUID) -> list[SymptomLog]:
        return [log for (owner, _), log in self.logs.items() if owner == user_id]

    def delete_log(self, user_id: UUID, log_id: str) -> None:
        self.logs.pop((user_id, log_id), None)


@dataclass
class InMemoryPenReminderRepository(PenReminderRepository):
    """In-memory pen reminder answers keyed by user and day id."""

    responses: dict[tuple[UUID, str], PenReminderResponse] = field(
        default_factory=dict
    )

    def upsert_response(self, user_id: UUID, response: PenReminderResponse) -> None:
        self.responses[(user_id, response.id)] = response

    def list_responses(self, user_id: UUID) -> list[PenReminderResponse]:
        return [
            response
            for (owner, _), response in self.responses.items()
            if owner == user_id
        ]


@dataclass
class InMemoryTrainingSessionRepository(TrainingSessionRepository):
    """In-memory training sessions for tests."""

    sessions: dict[UUID, TrainingSession] = field(default_factory=dict)

    def create_session(
        self,
        user_id: UUID,
        scenario: str,
        current_speaker: str,
        messages: list[ConversationMessage],
    ) -> TrainingSession:
        session = TrainingSession(
            id=uuid4(),
            user_id=user_id,
            scenario=scenario,
            status=ACTIVE,
            current_speaker=current_speaker,
            messages=list(messages),
            started_at=datetime.now(tz=UTC),
        )
        self.sessions[session.id] = session
        return session

    def get_session(self, session_id: UUID) -> TrainingSession | None:
        return self.sessions.get(session_id)

    def update_session(self, session: TrainingSession) -> None:
        self.sessions[session.id] = session

    def list_sessions(
        self, user_id: UUID, scenario: str | None = None
    ) -> list[TrainingSession]:
        owned = [
            session
            for session in reversed(self.sessions.values())
            if session.user_id == user_id
            and (scenario is None or session.scenario == scenario)
        ]
        return sorted(owned, key=lambda session: session.started_at, reverse=True)


@dataclass
class FakeProductClient(ProductClient):
    """Product client returning canned products by barcode."""

    products: dict[str, dict[str, object]] = field(default_factory=dict)
    errors: list[Exception] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)

    async def fetch_product(self, barcode: str) -> dict[str, object] | None:
        self.calls.append(barcode)
        if self.errors:
            raise self.errors.pop(0)
        return self.products.get(barcode)


@dataclass
class FakeDialogueClient(DialogueClient):
    """Dialogue client replaying queued replies."""

    replies: list[str] = field(default_factory=list)
    error: Exception | None = None
    prompts: list[str] = field(default_factory=list)

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        user_input: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        self.prompts.append(system_prompt)
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else ""


@dataclass
class FakeSpeechClient(SpeechClient):
    """Speech client returning fixed audio bytes."""

    audio: bytes = b"ID3fake"
    error: Exception | None = None
    voices: list[str] = field(default_factory=list)

    async def synthesize(self, *, model: str, text: str, voice: str) -> bytes:
        self.voices.append(voice)
        if self.error is not None:
            raise self.error
        return self.audio


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        api_token="api-token",
        openai_api_key="openai-key",
    )


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def user_service(user_repository: InMemoryUserRepository) -> UserService:
    return UserService(user_repository, retry_delay_seconds=0)


@pytest.fixture
def product_client() -> FakeProductClient:
    return FakeProductClient()


@pytest.fixture
def dialogue_client() -> FakeDialogueClient:
    return FakeDialogueClient()


@pytest.fixture
def speech_client() -> FakeSpeechClient:
    return FakeSpeechClient()


@pytest.fixture
def scan_history_repository() -> InMemoryScanHistoryRepository:
    return InMemoryScanHistoryRepository()


@pytest.fixture
def product_scan_service(
    product_client: FakeProductClient,
    scan_history_repository: InMemoryScanHistoryRepository,
    user_service: UserService,
) -> ProductScanService:
    return ProductScanService(
        product_client=product_client,
        history_repository=scan_history_repository,
        user_service=user_service,
        cache=InMemoryCache(),
        retry_delay_seconds=0,
    )


@pytest.fixture
def training_service(
    dialogue_client: FakeDialogueClient,
    speech_client: FakeSpeechClient,
    user_service: UserService,
) -> TrainingService:
    return TrainingService(
        repository=InMemoryTrainingSessionRepository(),
        dialogue_client=dialogue_client,
        speech_client=speech_client,
        user_service=user_service,
    )


@pytest.fixture
def container(
    settings: Settings,
    user_service: UserService,
    product_scan_service: ProductScanService,
    training_service: TrainingService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        user_service=user_service,
        allergy_service=AllergyProfileService(user_service),
        product_scan_service=product_scan_service,
        symptom_log_service=SymptomLogService(InMemorySymptomLogRepository()),
        pen_reminder_service=PenReminderService(InMemoryPenReminderRepository()),
        training_service=training_service,
        close_resources=close_resources,
    )
