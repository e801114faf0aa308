"""Barcode scan and scan history endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request, Response, status

from allerwise.api.auth import require_api_token
from allerwise.api.models import ScanRequest, scan_entry_payload

if TYPE_CHECKING:
    from allerwise.containers import AppContainer

router = APIRouter(tags=["scans"], dependencies=[Depends(require_api_token)])


@router.post("/users/{user_id}/scans")
async def scan_product(
    user_id: UUID, payload: ScanRequest, request: Request
) -> dict[str, object]:
    """Look up a barcode and check it against the user's allergens."""
    container: AppContainer = request.app.state.container
    result = await container.product_scan_service.scan_barcode(user_id, payload.barcode)
    return {
        **result.to_document(),
        "verdict_text": result.verdict.display_text,
        "verdict_icon": result.verdict.display_icon,
    }


@router.get("/users/{user_id}/scans")
async def list_scans(
    user_id: UUID, request: Request, limit: int | None = None
) -> dict[str, object]:
    """Return recent scans, newest first."""
    container: AppContainer = request.app.state.container
    entries = container.product_scan_service.list_history(
        user_id, limit or container.settings.scan_history_limit
    )
    return {"scans": [scan_entry_payload(entry) for entry in entries]}


@router.delete("/users/{user_id}/scans", status_code=status.HTTP_204_NO_CONTENT)
async def clear_scans(user_id: UUID, request: Request) -> Response:
    container: AppContainer = request.app.state.container
    container.product_scan_service.clear_history(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/scans/{scan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_scan(scan_id: UUID, request: Request) -> Response:
    container: AppContainer = request.app.state.container
    container.product_scan_service.delete_scan(scan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
