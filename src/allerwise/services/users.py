"""User-related business logic."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from allerwise.domain.models import UserRecord

_logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return the user profile, if present."""

    def create_user(self, name: str, email: str) -> UserRecord:
        """Create and return a new user profile."""

    def update_allergies(self, user_id: UUID, allergies: list[str]) -> UserRecord:
        """Replace the user's allergen list and return the updated profile."""

    def update_medical_info(
        self, user_id: UUID, medical_info: dict[str, object]
    ) -> UserRecord:
        """Replace the user's medical info and return the updated profile."""


@dataclass
class UserService:
    """Application service for user lifecycle actions."""

    repository: UserRepository
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.5

    def register(self, email: str, name: str | None = None) -> UserRecord:
        """Create a profile, deriving the display name from the email if needed."""
        email = email.strip()
        display_name = (name or "").strip() or email.split("@", maxsplit=1)[0]
        return self.repository.create_user(display_name, email)

    async def load_user(self, user_id: UUID) -> UserRecord | None:
        """Return the user, re-reading briefly if the profile is not there yet."""
        attempt = 0
        while True:
            user = self.repository.get_user(user_id)
            if user is not None or attempt >= self.retry_attempts:
                return user
            attempt += 1
            _logger.info(
                "User profile %s not available, retrying (%s/%s)",
                user_id,
                attempt,
                self.retry_attempts,
            )
            await asyncio.sleep(self.retry_delay_seconds)
