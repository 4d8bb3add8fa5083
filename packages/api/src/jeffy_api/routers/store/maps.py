"""Delivery ETA and geocoding."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from jeffy_shared.models import EtaRequest

from jeffy_api.responses import wrap_response
from jeffy_api.services import maps_service

router = APIRouter(prefix="/maps", tags=["maps"])


@router.post("/eta")
async def calculate_eta(body: EtaRequest):
    return wrap_response(await maps_service.calculate_eta(body))


@router.get("/geocode")
async def geocode(address: str = Query(..., min_length=3)):
    data = await maps_service.geocode(address)
    if data is None:
        raise HTTPException(status_code=404, detail="Address not found")
    return wrap_response(data)
