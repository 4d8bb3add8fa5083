"""Low-stock report and reorder requests."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from jeffy_shared.models import ReorderRequestIn

from jeffy_api.dependencies import AuthUser, require_admin
from jeffy_api.responses import wrap_response
from jeffy_api.services import reorder_service

router = APIRouter(prefix="/reorders", tags=["admin-reorders"])


@router.get("/low-stock")
async def low_stock():
    data = reorder_service.low_stock()
    return wrap_response(data, total_count=len(data))


@router.get("")
async def list_reorders(status: str | None = Query(None)):
    data = reorder_service.list_reorders(status)
    return wrap_response(data, total_count=len(data))


@router.post("", status_code=201)
async def create_reorder(body: ReorderRequestIn, user: AuthUser = Depends(require_admin)):
    return wrap_response(reorder_service.create_reorder(body, requested_by=user.user_id))
