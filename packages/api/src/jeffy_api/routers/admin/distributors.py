"""Distributor management."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, HTTPException, Query

from jeffy_shared.models import DistributorIn

from jeffy_api.responses import wrap_response
from jeffy_api.services import distributor_service

router = APIRouter(prefix="/distributors", tags=["admin-distributors"])


@router.get("")
async def list_distributors(
    location_id: str | None = Query(None),
    status: str | None = Query(None),
):
    data = distributor_service.list_distributors(location_id=location_id, status=status)
    return wrap_response(data, total_count=len(data))


@router.post("", status_code=201)
async def create_distributor(body: DistributorIn):
    return wrap_response(distributor_service.create_distributor(body))


@router.get("/{distributor_id}")
async def get_distributor(distributor_id: str):
    data = distributor_service.get_distributor(distributor_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Distributor not found")
    return wrap_response(data)


@router.put("/{distributor_id}")
async def update_distributor(distributor_id: str, body: dict[str, Any] = Body(...)):
    data = distributor_service.update_distributor(distributor_id, body)
    if data is None:
        raise HTTPException(status_code=404, detail="Distributor not found")
    return wrap_response(data)


@router.delete("/{distributor_id}")
async def delete_distributor(distributor_id: str):
    if not distributor_service.delete_distributor(distributor_id):
        raise HTTPException(status_code=404, detail="Distributor not found")
    return wrap_response({"deleted": True})
