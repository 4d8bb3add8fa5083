"""Jeffy Wants review queue and the launch mailing list."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from jeffy_shared.models import WantStatusUpdate

from jeffy_api.responses import wrap_response
from jeffy_api.services import coming_soon_service, wants_service

router = APIRouter(tags=["admin-jeffy-wants"])


@router.get("/jeffy-requests")
async def list_requests(
    status: str | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
):
    data = wants_service.list_all(status, limit)
    response = wrap_response(data, total_count=len(data))
    response["meta"]["status_counts"] = wants_service.status_counts(data)
    return response


@router.put("/jeffy-requests/{request_id}")
async def update_request(request_id: str, body: WantStatusUpdate):
    data = wants_service.update_status(request_id, body.status, body.admin_notes)
    if data is None:
        raise HTTPException(status_code=404, detail="Request not found")
    return wrap_response(data)


@router.get("/coming-soon")
async def list_signups():
    data = coming_soon_service.list_signups()
    return wrap_response(data, total_count=len(data))
