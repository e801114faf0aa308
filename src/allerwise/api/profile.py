"""User profile and allergen endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, status

from allerwise.api.auth import require_api_token
from allerwise.api.models import (
    AllergiesRequest,
    MedicalInfoRequest,
    RegisterUserRequest,
    user_payload,
)
from allerwise.domain.symptoms import COMMON_SYMPTOMS
from allerwise.services.allergies import filter_allergens

if TYPE_CHECKING:
    from allerwise.containers import AppContainer

router = APIRouter(tags=["profile"], dependencies=[Depends(require_api_token)])


@router.get("/allergens")
async def list_allergens(query: str | None = None) -> dict[str, object]:
    """Return the allergen vocabulary filtered by an optional query."""
    return {"allergens": filter_allergens(query)}


@router.get("/symptoms")
async def list_symptoms() -> dict[str, object]:
    """Return the symptom vocabulary offered when logging a day."""
    return {"symptoms": list(COMMON_SYMPTOMS)}


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def register_user(
    payload: RegisterUserRequest, request: Request
) -> dict[str, object]:
    """Create a profile with an empty allergen list."""
    container: AppContainer = request.app.state.container
    user = container.user_service.register(payload.email, payload.name)
    return user_payload(user)


@router.get("/users/{user_id}/allergies")
async def get_allergies(user_id: UUID, request: Request) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return {"allergies": await container.allergy_service.get_allergies(user_id)}


@router.put("/users/{user_id}/allergies")
async def save_allergies(
    user_id: UUID, payload: AllergiesRequest, request: Request
) -> dict[str, object]:
    """Replace the user's allergen selection."""
    container: AppContainer = request.app.state.container
    user = await container.allergy_service.save_allergies(user_id, payload.allergies)
    return user_payload(user)


@router.put("/users/{user_id}/medical-info")
async def update_medical_info(
    user_id: UUID, payload: MedicalInfoRequest, request: Request
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    user = await container.allergy_service.update_medical_info(
        user_id, payload.medical_info
    )
    return user_payload(user)
