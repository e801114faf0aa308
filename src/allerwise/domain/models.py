"""Domain models for AllerWise users."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class UserRecord:
    """Represents a user profile stored in the database."""

    id: UUID
    name: str
    email: str
    allergies: list[str]
    medical_info: dict[str, object] | None
    created_at: datetime | None = None
    updated_at: datetime | None = None
