"""Inbound shipments from the China agent."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from jeffy_shared.models import ShipmentCreate, ShipmentUpdate

from jeffy_api.dependencies import AuthUser, require_admin
from jeffy_api.responses import wrap_response
from jeffy_api.services import shipment_service

router = APIRouter(prefix="/shipments", tags=["admin-shipments"])


@router.get("")
async def list_shipments(status: str | None = Query(None)):
    data = shipment_service.list_shipments(status=status)
    return wrap_response(data, total_count=len(data))


@router.post("", status_code=201)
async def create_shipment(body: ShipmentCreate, user: AuthUser = Depends(require_admin)):
    return wrap_response(shipment_service.create_shipment(body, created_by=user.user_id))


@router.get("/{shipment_id}")
async def get_shipment(shipment_id: str):
    data = shipment_service.get_shipment(shipment_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Shipment not found")
    return wrap_response(data)


@router.put("/{shipment_id}")
async def update_shipment(shipment_id: str, body: ShipmentUpdate):
    data = shipment_service.update_shipment(shipment_id, body)
    if data is None:
        raise HTTPException(status_code=404, detail="Shipment not found")
    return wrap_response(data)


@router.get("/{shipment_id}/landed-costs")
async def landed_costs(shipment_id: str):
    if shipment_service.get_shipment(shipment_id) is None:
        raise HTTPException(status_code=404, detail="Shipment not found")
    data = shipment_service.calculate_landed_costs(shipment_id)
    return wrap_response(data, total_count=len(data))
