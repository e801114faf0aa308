"""Conversation training endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, Response, status

from allerwise.api.auth import require_api_token
from allerwise.api.models import (
    SpeechRequest,
    StartTrainingRequest,
    TrainingMessageRequest,
    message_payload,
    scenario_progress_payload,
    training_session_payload,
    training_summary_payload,
)
from allerwise.services.conversation import stage_description

if TYPE_CHECKING:
    from allerwise.containers import AppContainer

router = APIRouter(
    prefix="/training/sessions",
    tags=["training"],
    dependencies=[Depends(require_api_token)],
)

user_router = APIRouter(
    prefix="/users/{user_id}/training",
    tags=["training"],
    dependencies=[Depends(require_api_token)],
)


@router.post("", status_code=status.HTTP_201_CREATED)
async def start_session(
    payload: StartTrainingRequest, request: Request
) -> dict[str, object]:
    """Start a scenario with its opening lines."""
    container: AppContainer = request.app.state.container
    session = container.training_service.start_session(
        payload.user_id, payload.scenario
    )
    return training_session_payload(session)


@router.get("/{session_id}")
async def get_session(session_id: UUID, request: Request) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return training_session_payload(container.training_service.get_session(session_id))


@router.post("/{session_id}/messages")
async def send_message(
    session_id: UUID, payload: TrainingMessageRequest, request: Request
) -> dict[str, object]:
    """Send the user's turn and return the character's reply."""
    container: AppContainer = request.app.state.container
    service = container.training_service
    reply = await service.process_user_input(session_id, payload.text)
    session = service.get_session(session_id)
    return {
        "reply": message_payload(reply) if reply else None,
        "stage": session.state.stage,
        "stage_description": stage_description(session.state.stage),
        "next_speaker": session.current_speaker,
    }


@router.post("/{session_id}/reset")
async def reset_session(session_id: UUID, request: Request) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    session = container.training_service.reset_session(session_id)
    return training_session_payload(session)


@router.post("/{session_id}/finish")
async def finish_session(session_id: UUID, request: Request) -> dict[str, object]:
    """Score the conversation and close the session."""
    container: AppContainer = request.app.state.container
    session = container.training_service.finish_session(session_id)
    return training_session_payload(session)


@router.post("/{session_id}/speech")
async def synthesize_speech(
    session_id: UUID, payload: SpeechRequest, request: Request
) -> Response:
    """Return mp3 audio for a character line, or 204 when none is available."""
    container: AppContainer = request.app.state.container
    audio = await container.training_service.synthesize_line(
        session_id, payload.speaker, payload.text
    )
    if audio is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return Response(content=audio, media_type="audio/mpeg")


@user_router.get("/sessions")
async def list_sessions(
    user_id: UUID, request: Request, scenario: str | None = None
) -> dict[str, object]:
    """List the user's training sessions, newest first."""
    container: AppContainer = request.app.state.container
    sessions = container.training_service.list_sessions(user_id, scenario)
    return {"sessions": [training_summary_payload(session) for session in sessions]}


@user_router.get("/progress")
async def get_progress(user_id: UUID, request: Request) -> dict[str, object]:
    """Summarise attempts and scores per scenario."""
    container: AppContainer = request.app.state.container
    progress = container.training_service.progress(user_id)
    return {"scenarios": [scenario_progress_payload(item) for item in progress]}
