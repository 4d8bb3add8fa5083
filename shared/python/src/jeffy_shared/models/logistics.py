"""
models/logistics.py — Drivers, delivery assignments and map requests.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from jeffy_shared.constants import DeliveryStatus, DriverStatus


class LatLng(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class DriverIn(BaseModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: str | None = None
    user_id: str | None = None
    vehicle_type: str | None = None
    vehicle_registration: str | None = None
    status: DriverStatus = "active"

    def to_insert_dict(self) -> dict[str, Any]:
        return self.model_dump()


class DriverUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    phone: str | None = None
    email: str | None = None
    vehicle_type: str | None = None
    vehicle_registration: str | None = None
    status: DriverStatus | None = None

    def to_update_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class DriverLocation(LatLng):
    heading: float | None = None
    speed_kmh: float | None = Field(default=None, ge=0)


class DeliveryStatusUpdate(BaseModel):
    status: DeliveryStatus
    notes: str | None = None
    proof_of_delivery_url: str | None = None


class EtaRequest(BaseModel):
    pickup_location: LatLng
    delivery_location: LatLng
    current_location: LatLng | None = None
