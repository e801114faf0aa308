"""Symptom log and pen reminder endpoints."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, Response, status

from allerwise.api.auth import require_api_token
from allerwise.api.models import (
    PenReminderRequest,
    SymptomLogRequest,
    SymptomLogUpdateRequest,
    pen_response_payload,
    symptom_log_payload,
)

if TYPE_CHECKING:
    from allerwise.containers import AppContainer

router = APIRouter(
    prefix="/users/{user_id}",
    tags=["logs"],
    dependencies=[Depends(require_api_token)],
)


@router.get("/symptom-logs")
async def list_symptom_logs(
    user_id: UUID, request: Request, days: int | None = None
) -> dict[str, object]:
    """Return symptom logs, optionally only the last ``days`` days."""
    container: AppContainer = request.app.state.container
    service = container.symptom_log_service
    logs = (
        service.recent_logs(user_id, days=days) if days else service.list_logs(user_id)
    )
    return {"logs": [symptom_log_payload(log) for log in logs]}


@router.post("/symptom-logs")
async def save_symptom_log(
    user_id: UUID, payload: SymptomLogRequest, request: Request
) -> dict[str, object]:
    """Save the log for a day, replacing any earlier log for that day."""
    container: AppContainer = request.app.state.container
    log = container.symptom_log_service.save_log(
        user_id,
        payload.date,
        symptoms=payload.symptoms,
        notes=payload.notes,
        took_medication=payload.took_medication,
        severity=payload.severity,
    )
    return symptom_log_payload(log)


@router.patch("/symptom-logs/{log_id}")
async def update_symptom_log(
    user_id: UUID, log_id: str, payload: SymptomLogUpdateRequest, request: Request
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    changes = payload.model_dump(exclude_none=True)
    log = container.symptom_log_service.update_log(user_id, log_id, **changes)
    return symptom_log_payload(log)


@router.delete("/symptom-logs/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_symptom_log(user_id: UUID, log_id: str, request: Request) -> Response:
    container: AppContainer = request.app.state.container
    container.symptom_log_service.delete_log(user_id, log_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/symptom-logs/stats")
async def symptom_log_stats(user_id: UUID, request: Request) -> dict[str, object]:
    """Return symptom, severity and medication counts plus logged dates."""
    container: AppContainer = request.app.state.container
    service = container.symptom_log_service
    return {
        "symptoms": service.symptom_stats(user_id),
        "severity": service.severity_stats(user_id),
        "medication": service.medication_stats(user_id),
        "logged_dates": [day.isoformat() for day in service.dates_with_logs(user_id)],
    }


@router.post("/pen-reminders")
async def record_pen_reminder(
    user_id: UUID, payload: PenReminderRequest, request: Request
) -> dict[str, object]:
    """Record today's answer to the pen reminder."""
    container: AppContainer = request.app.state.container
    response = container.pen_reminder_service.record_response(
        user_id, payload.pen_carried
    )
    return pen_response_payload(response)


@router.get("/pen-reminders")
async def list_pen_reminders(
    user_id: UUID, request: Request, days: int | None = None
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    service = container.pen_reminder_service
    responses = (
        service.recent_responses(user_id, days=days)
        if days
        else service.list_responses(user_id)
    )
    return {"responses": [pen_response_payload(item) for item in responses]}


@router.get("/pen-reminders/summary")
async def pen_reminder_summary(user_id: UUID, request: Request) -> dict[str, object]:
    """Return compliance rate and calendar markers."""
    container: AppContainer = request.app.state.container
    service = container.pen_reminder_service
    markers = service.calendar_markers(user_id)
    return {
        "monthly_compliance_rate": service.monthly_compliance_rate(user_id),
        "answered_today": service.has_response_for_date(
            user_id, datetime.now(tz=UTC).date()
        ),
        "carried": [day.isoformat() for day in markers.carried],
        "not_carried": [day.isoformat() for day in markers.not_carried],
    }
