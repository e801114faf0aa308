"""Tests for user service."""

import asyncio
from dataclasses import dataclass
from uuid import uuid4

from allerwise.domain.models import UserRecord
from allerwise.services.users import UserService
from tests.conftest import InMemoryUserRepository


@dataclass
class _LateUserRepository(InMemoryUserRepository):
    """Repository whose profile only appears on the second read."""

    reads: int = 0
    pending: UserRecord | None = None

    def get_user(self, user_id):  # type: ignore[no-untyped-def]
        self.reads += 1
        if self.reads > 1 and self.pending is not None:
            return self.pending
        return None


def test_register_derives_name_from_email() -> None:
    repository = InMemoryUserRepository()
    service = UserService(repository)

    user = service.register(" jo@example.com ")

    assert user.name == "jo"
    assert user.email == "jo@example.com"
    assert user.allergies == []


def test_register_prefers_given_name() -> None:
    service = UserService(InMemoryUserRepository())

    user = service.register(" jo@example.com", name="  Jo Smith ")

    assert user.name == "Jo Smith"
    assert user.email == "jo@example.com"


def test_load_user_retries_once() -> None:
    pending = UserRecord(
        id=uuid4(), name="jo", email="jo@example.com", allergies=[], medical_info=None
    )
    repository = _LateUserRepository(pending=pending)
    service = UserService(repository, retry_delay_seconds=0)

    user = asyncio.run(service.load_user(pending.id))

    assert user == pending
    assert repository.reads == 2


def test_load_user_gives_up_after_retry() -> None:
    repository = InMemoryUserRepository()
    service = UserService(repository, retry_delay_seconds=0)

    assert asyncio.run(service.load_user(uuid4())) is None
