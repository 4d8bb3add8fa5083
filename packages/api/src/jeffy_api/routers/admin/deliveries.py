"""Drivers and delivery assignments."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from jeffy_shared.models import AssignmentNotify, DeliveryStatusUpdate, DriverIn, DriverLocation, DriverUpdate

from jeffy_api.responses import wrap_response
from jeffy_api.services import delivery_service

router = APIRouter(tags=["admin-deliveries"])


@router.get("/drivers")
async def list_drivers(include_inactive: bool = Query(False)):
    data = delivery_service.list_drivers(include_inactive=include_inactive)
    return wrap_response(data, total_count=len(data))


@router.post("/drivers", status_code=201)
async def create_driver(body: DriverIn):
    return wrap_response(delivery_service.create_driver(body))


@router.get("/drivers/{driver_id}")
async def get_driver(driver_id: str):
    driver = delivery_service.get_driver(driver_id)
    if driver is None:
        raise HTTPException(status_code=404, detail="Driver not found")
    return wrap_response(driver)


@router.put("/drivers/{driver_id}")
async def update_driver(driver_id: str, body: DriverUpdate):
    driver = delivery_service.update_driver(driver_id, body)
    if driver is None:
        raise HTTPException(status_code=404, detail="Driver not found")
    return wrap_response(driver)


@router.delete("/drivers/{driver_id}")
async def delete_driver(driver_id: str):
    if not delivery_service.delete_driver(driver_id):
        raise HTTPException(status_code=404, detail="Driver not found")
    return wrap_response({"deleted": True})


@router.put("/drivers/{driver_id}/location")
async def update_location(driver_id: str, body: DriverLocation):
    driver = delivery_service.update_location(driver_id, body)
    if driver is None:
        raise HTTPException(status_code=404, detail="Driver not found")
    return wrap_response(driver)


@router.get("/deliveries")
async def list_deliveries(
    status: str | None = Query(None),
    driver_id: str | None = Query(None),
):
    data = delivery_service.list_deliveries(status=status, driver_id=driver_id)
    return wrap_response(data, total_count=len(data))


@router.put("/deliveries/{assignment_id}/status")
async def update_delivery_status(assignment_id: str, body: DeliveryStatusUpdate):
    return wrap_response(delivery_service.update_delivery_status(assignment_id, body))


@router.post("/delivery-assignments/notify")
async def notify_assignment(body: AssignmentNotify):
    sent = delivery_service.notify_assignment(body.assignment_id, body.event_type)
    return wrap_response({"notified": sent})
