"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from allerwise.adapters.openai_dialogue_client import OpenAIDialogueClient
from allerwise.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from allerwise.adapters.supabase_pen_reminder_repository import (
    SupabasePenReminderRepository,
)
from allerwise.adapters.supabase_scan_history_repository import (
    SupabaseScanHistoryRepository,
)
from allerwise.adapters.supabase_symptom_log_repository import (
    SupabaseSymptomLogRepository,
)
from allerwise.adapters.supabase_training_session_repository import (
    SupabaseTrainingSessionRepository,
)
from allerwise.adapters.supabase_user_repository import SupabaseUserRepository
from allerwise.config import Settings
from allerwise.services.allergies import AllergyProfileService
from allerwise.services.cache import InMemoryCache
from allerwise.services.pen_reminders import PenReminderService
from allerwise.services.product_scan import ProductScanService
from allerwise.services.symptoms import SymptomLogService
from allerwise.services.training import TrainingService
from allerwise.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_service: UserService
    allergy_service: AllergyProfileService
    product_scan_service: ProductScanService
    symptom_log_service: SymptomLogService
    pen_reminder_service: PenReminderService
    training_service: TrainingService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    user_service = UserService(SupabaseUserRepository(supabase_client))
    product_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.openfoodfacts_base_url,
        user_agent=resolved_settings.openfoodfacts_user_agent,
    )
    product_scan_service = ProductScanService(
        product_client=product_client,
        history_repository=SupabaseScanHistoryRepository(supabase_client),
        user_service=user_service,
        cache=InMemoryCache(),
    )
    openai_client = OpenAIDialogueClient.create(resolved_settings.openai_api_key)
    training_service = TrainingService(
        repository=SupabaseTrainingSessionRepository(supabase_client),
        dialogue_client=openai_client,
        speech_client=openai_client,
        user_service=user_service,
        model=resolved_settings.openai_model,
        tts_model=resolved_settings.openai_tts_model,
    )

    async def close_resources() -> None:
        await product_client.close()
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        user_service=user_service,
        allergy_service=AllergyProfileService(user_service),
        product_scan_service=product_scan_service,
        symptom_log_service=SymptomLogService(
            SupabaseSymptomLogRepository(supabase_client)
        ),
        pen_reminder_service=PenReminderService(
            SupabasePenReminderRepository(supabase_client)
        ),
        training_service=training_service,
        close_resources=close_resources,
    )
