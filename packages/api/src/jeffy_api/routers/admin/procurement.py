"""Procurement queue and batches sent to the buying agent."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from jeffy_shared.constants import BatchStatus
from jeffy_shared.models import BatchCreate, QueueItemCreate, QueueItemUpdate

from jeffy_api.dependencies import AuthUser, require_admin
from jeffy_api.responses import wrap_response
from jeffy_api.services import procurement_service

router = APIRouter(prefix="/procurement", tags=["admin-procurement"])


class BatchStatusBody(BaseModel):
    status: BatchStatus


@router.get("/queue")
async def list_queue(
    status: str | None = Query(None),
    priority: str | None = Query(None),
):
    data = procurement_service.list_queue(status=status, priority=priority)
    return wrap_response(data, total_count=len(data))


@router.post("/queue", status_code=201)
async def create_queue_item(body: QueueItemCreate, user: AuthUser = Depends(require_admin)):
    return wrap_response(procurement_service.create_queue_item(body, added_by=user.user_id))


@router.put("/queue/{item_id}")
async def update_queue_item(item_id: str, body: QueueItemUpdate):
    data = procurement_service.update_queue_item(item_id, body)
    if data is None:
        raise HTTPException(status_code=404, detail="Queue item not found")
    return wrap_response(data)


@router.delete("/queue/{item_id}")
async def delete_queue_item(item_id: str):
    if not procurement_service.delete_queue_item(item_id):
        raise HTTPException(status_code=404, detail="Queue item not found")
    return wrap_response({"deleted": True})


@router.get("/batches")
async def list_batches(status: str | None = Query(None)):
    data = procurement_service.list_batches(status=status)
    return wrap_response(data, total_count=len(data))


@router.post("/batches", status_code=201)
async def create_batch(body: BatchCreate, user: AuthUser = Depends(require_admin)):
    return wrap_response(procurement_service.create_batch(body, created_by=user.user_id))


@router.get("/batches/{batch_id}")
async def get_batch(batch_id: str):
    data = procurement_service.get_batch(batch_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Batch not found")
    return wrap_response(data)


@router.put("/batches/{batch_id}/status")
async def update_batch_status(batch_id: str, body: BatchStatusBody):
    data = procurement_service.update_batch_status(batch_id, body.status)
    if data is None:
        raise HTTPException(status_code=404, detail="Batch not found")
    return wrap_response(data)
