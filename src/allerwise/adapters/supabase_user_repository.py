"""Supabase-backed user repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from allerwise.domain.models import UserRecord
from allerwise.services.users import UserRepository

_COLUMNS = "id, name, email, allergies, medical_info, created_at, updated_at"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user profiles."""

    client: Client

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return the user profile, if present."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_user(response.data[0])

    def create_user(self, name: str, email: str) -> UserRecord:
        """Create a new user row with an empty allergen profile."""
        now = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table("users")
            .insert(
                {
                    "name": name,
                    "email": email,
                    "allergies": [],
                    "medical_info": None,
                    "created_at": now,
                    "updated_at": now,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _row_to_user(response.data[0])

    def update_allergies(self, user_id: UUID, allergies: list[str]) -> UserRecord:
        """Replace the allergen list and return the updated profile."""
        return self._update(user_id, {"allergies": allergies})

    def update_medical_info(
        self, user_id: UUID, medical_info: dict[str, object]
    ) -> UserRecord:
        """Replace the medical info and return the updated profile."""
        return self._update(user_id, {"medical_info": medical_info})

    def _update(self, user_id: UUID, values: dict[str, object]) -> UserRecord:
        response = (
            self.client.table("users")
            .update({**values, "updated_at": datetime.now(tz=UTC).isoformat()})
            .eq("id", str(user_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update user {user_id}")
        return _row_to_user(response.data[0])


def _row_to_user(row: dict[str, object]) -> UserRecord:
    return UserRecord(
        id=UUID(str(row["id"])),
        name=str(row.get("name") or ""),
        email=str(row.get("email") or ""),
        allergies=list(row.get("allergies") or []),
        medical_info=row.get("medical_info"),
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )


def _parse_timestamp(value: object) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value))
