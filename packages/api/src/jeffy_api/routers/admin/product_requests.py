"""Review of customer product requests."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from jeffy_shared.constants import RequestStatus

from jeffy_api.responses import wrap_response
from jeffy_api.services import product_request_service

router = APIRouter(prefix="/product-requests", tags=["admin-product-requests"])


class RequestStatusBody(BaseModel):
    status: RequestStatus
    admin_notes: str | None = None


@router.get("")
async def list_requests(status: str | None = Query(None)):
    data = product_request_service.list_requests(status)
    return wrap_response(data, total_count=len(data))


@router.put("/{request_id}")
async def update_request(request_id: str, body: RequestStatusBody):
    data = product_request_service.update_status(request_id, body.status, body.admin_notes)
    if data is None:
        raise HTTPException(status_code=404, detail="Product request not found")
    return wrap_response(data)
