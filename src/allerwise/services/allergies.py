"""Allergen profile selection and persistence."""

import logging
from dataclasses import dataclass
from uuid import UUID

from allerwise.domain.allergens import MAJOR_ALLERGENS
from allerwise.domain.models import UserRecord
from allerwise.errors import InvalidInputError, NotFoundError
from allerwise.services.users import UserService

_logger = logging.getLogger(__name__)


def filter_allergens(query: str | None) -> list[str]:
    """Return vocabulary entries containing the query, case-insensitively."""
    needle = (query or "").strip().lower()
    return [allergen for allergen in MAJOR_ALLERGENS if needle in allergen.lower()]


def normalize_selection(allergens: list[str]) -> list[str]:
    """Map labels onto the vocabulary spelling and drop duplicates."""
    canonical = {allergen.lower(): allergen for allergen in MAJOR_ALLERGENS}
    selected: list[str] = []
    unknown: list[str] = []
    for raw in allergens:
        label = canonical.get(raw.strip().lower())
        if label is None:
            unknown.append(raw)
            continue
        if label not in selected:
            selected.append(label)
    if unknown:
        raise InvalidInputError(f"Unknown allergens: {', '.join(unknown)}")
    return selected


@dataclass
class AllergyProfileService:
    """Reads and updates the allergen list on a user's profile."""

    user_service: UserService

    async def get_allergies(self, user_id: UUID) -> list[str]:
        """Return the saved allergens, or an empty list for unknown users."""
        user = await self.user_service.load_user(user_id)
        return list(user.allergies) if user else []

    async def save_allergies(self, user_id: UUID, allergens: list[str]) -> UserRecord:
        """Validate and persist a new allergen selection."""
        selection = normalize_selection(allergens)
        user = await self.user_service.load_user(user_id)
        if user is None:
            raise NotFoundError("No authenticated user found")
        updated = self.user_service.repository.update_allergies(user.id, selection)
        _logger.info("Saved %s allergens for user %s", len(selection), user.id)
        return updated

    async def update_medical_info(
        self, user_id: UUID, medical_info: dict[str, object]
    ) -> UserRecord:
        """Persist the free-form medical info block for a user."""
        user = await self.user_service.load_user(user_id)
        if user is None:
            raise NotFoundError("No authenticated user found")
        return self.user_service.repository.update_medical_info(user.id, medical_info)
