"""Driver app endpoints: a signed-in driver's own profile, position and deliveries."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from jeffy_shared.models import DeliveryStatusUpdate, DriverLocation

from jeffy_api.dependencies import AuthUser, require_driver
from jeffy_api.responses import wrap_response
from jeffy_api.services import delivery_service

router = APIRouter(prefix="/api/driver", tags=["driver"])


def _own_driver(user: AuthUser = Depends(require_driver)) -> dict[str, Any]:
    driver = delivery_service.driver_for_user(user.user_id)
    if driver is None:
        raise HTTPException(status_code=404, detail="No driver profile for this account")
    return driver


@router.get("/me")
async def get_me(driver: dict[str, Any] = Depends(_own_driver)):
    return wrap_response(driver)


@router.put("/location")
async def update_location(body: DriverLocation, driver: dict[str, Any] = Depends(_own_driver)):
    return wrap_response(delivery_service.update_location(driver["id"], body))


@router.get("/deliveries")
async def list_deliveries(
    status: str | None = Query(None),
    driver: dict[str, Any] = Depends(_own_driver),
):
    data = delivery_service.list_deliveries(status=status, driver_id=driver["id"])
    return wrap_response(data, total_count=len(data))


@router.put("/deliveries/{assignment_id}/status")
async def update_delivery_status(
    assignment_id: str,
    body: DeliveryStatusUpdate,
    driver: dict[str, Any] = Depends(_own_driver),
):
    assignment = delivery_service.get_assignment(assignment_id)
    # Another driver's assignment is reported as missing
    if assignment is None or assignment.get("driver_id") != driver["id"]:
        raise HTTPException(status_code=404, detail="Delivery assignment not found")
    return wrap_response(delivery_service.update_delivery_status(assignment_id, body))
