"""Franchise locations, stock allocations and period financials."""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from jeffy_shared.models import AllocationCreate, AllocationUpdate, FinancialsRequest, FranchiseIn

from jeffy_api.dependencies import AuthUser, require_admin
from jeffy_api.responses import wrap_response
from jeffy_api.services import franchise_service

router = APIRouter(tags=["admin-franchises"])


@router.get("/franchises")
async def list_franchises(include_inactive: bool = Query(False)):
    data = franchise_service.list_franchises(include_inactive=include_inactive)
    return wrap_response(data, total_count=len(data))


@router.post("/franchises", status_code=201)
async def create_franchise(body: FranchiseIn):
    return wrap_response(franchise_service.create_franchise(body))


@router.put("/franchises/{location_id}")
async def update_franchise(location_id: str, body: dict[str, Any] = Body(...)):
    data = franchise_service.update_franchise(location_id, body)
    if data is None:
        raise HTTPException(status_code=404, detail="Franchise not found")
    return wrap_response(data)


@router.get("/franchise-allocations")
async def list_allocations(
    franchise_id: str | None = Query(None),
    shipment_id: str | None = Query(None),
    status: str | None = Query(None),
):
    data = franchise_service.list_allocations(
        location_id=franchise_id, shipment_id=shipment_id, status=status
    )
    return wrap_response(data, total_count=len(data))


@router.post("/franchise-allocations", status_code=201)
async def create_allocations(body: AllocationCreate, user: AuthUser = Depends(require_admin)):
    data = franchise_service.create_allocations(body, allocated_by=user.user_id)
    return wrap_response(data, total_count=len(data))


@router.put("/franchise-allocations/{allocation_id}")
async def update_allocation(allocation_id: str, body: AllocationUpdate):
    data = franchise_service.update_allocation(allocation_id, body)
    if data is None:
        raise HTTPException(status_code=404, detail="Allocation not found")
    return wrap_response(data)


@router.get("/franchise-financials")
async def list_financials(
    franchise_id: str | None = Query(None),
    period_type: str | None = Query("monthly"),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
):
    data = franchise_service.list_financials(
        franchise_id, period_type=period_type, start=start_date, end=end_date
    )
    return wrap_response(data, total_count=len(data))


@router.post("/franchise-financials/calculate")
async def calculate_financials(body: FinancialsRequest):
    return wrap_response(franchise_service.calculate_financials(body))
