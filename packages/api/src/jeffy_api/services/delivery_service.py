"""Drivers, delivery assignments and live order tracking."""

from __future__ import annotations

from typing import Any

import structlog

from jeffy_shared.constants import AVAILABLE_DRIVER_STATUSES
from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import (
    DeliveryStatusUpdate,
    DriverIn,
    DriverLocation,
    DriverUpdate,
    EtaRequest,
    LatLng,
)
from jeffy_shared.time_utils import utc_now

from jeffy_api.errors import NotFound
from jeffy_api.services import maps_service, notification_service
from jeffy_api.utils.filtering import apply_status_filter

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Drivers
# ---------------------------------------------------------------------------


def list_drivers(*, include_inactive: bool = False) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("drivers").select("*")
    if not include_inactive:
        query = query.in_("status", list(AVAILABLE_DRIVER_STATUSES))
    return query.order("name").execute().data


def get_driver(driver_id: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("drivers").select("*").eq("id", driver_id).limit(1).execute()
    return result.data[0] if result.data else None


def driver_for_user(user_id: str) -> dict[str, Any] | None:
    """The drivers row linked to a signed-in driver account."""
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("drivers").select("*").eq("user_id", user_id).limit(1).execute()
    return result.data[0] if result.data else None


def create_driver(payload: DriverIn) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    driver = supabase.table("drivers").insert(payload.to_insert_dict()).execute().data[0]
    logger.info("driver_created", driver_id=driver.get("id"))
    return driver


def update_driver(driver_id: str, payload: DriverUpdate) -> dict[str, Any] | None:
    changes = payload.to_update_dict()
    if not changes:
        return get_driver(driver_id)
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("drivers").update(changes).eq("id", driver_id).execute()
    return result.data[0] if result.data else None


def delete_driver(driver_id: str) -> bool:
    supabase = get_supabase_client(service_role=True)
    return bool(supabase.table("drivers").delete().eq("id", driver_id).execute().data)


def update_location(driver_id: str, location: DriverLocation) -> dict[str, Any] | None:
    """Store the driver's position; tracking pages receive it over Realtime."""
    changes = {
        "current_lat": location.lat,
        "current_lng": location.lng,
        "heading": location.heading,
        "speed_kmh": location.speed_kmh,
        "location_updated_at": utc_now().isoformat(),
    }
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("drivers").update(changes).eq("id", driver_id).execute()
    return result.data[0] if result.data else None


# ---------------------------------------------------------------------------
# Deliveries
# ---------------------------------------------------------------------------


def list_deliveries(*, status: str | None = None, driver_id: str | None = None) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("delivery_assignments").select("*, orders(*), drivers(*)")
    query = apply_status_filter(query, "status", status)
    if driver_id:
        query = query.eq("driver_id", driver_id)
    return query.order("assigned_at", desc=True).execute().data


def get_assignment(assignment_id: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("delivery_assignments").select("*").eq("id", assignment_id).limit(1).execute()
    return result.data[0] if result.data else None


def update_delivery_status(assignment_id: str, payload: DeliveryStatusUpdate) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    now = utc_now().isoformat()
    changes: dict[str, Any] = {"status": payload.status, "updated_at": now}
    if payload.status == "picked_up":
        changes["picked_up_at"] = now
    elif payload.status == "delivered":
        changes["delivered_at"] = now
    if payload.notes:
        changes["notes"] = payload.notes
    if payload.proof_of_delivery_url:
        changes["proof_of_delivery_url"] = payload.proof_of_delivery_url

    result = supabase.table("delivery_assignments").update(changes).eq("id", assignment_id).execute()
    if not result.data:
        raise NotFound("Delivery assignment not found")
    assignment = result.data[0]

    if payload.status == "delivered":
        order_result = (
            supabase.table("orders")
            .update({"status": "delivered", "delivered_at": now, "updated_at": now})
            .eq("id", assignment["order_id"])
            .execute()
        )
        supabase.table("drivers").update({"status": "active"}).eq("id", assignment["driver_id"]).execute()
        if order_result.data:
            notification_service.notify_order(order_result.data[0], notification_type="delivered")

    logger.info("delivery_status_updated", assignment_id=assignment_id, status=payload.status)
    return assignment


def notify_assignment(assignment_id: str, event_type: str) -> list[str]:
    """
    Notify the customer about an assignment written outside the API.

    New or re-assigned rows announce the driver; a delivered row
    announces the delivery. Returns the notification types sent.
    """
    assignment = get_assignment(assignment_id)
    if assignment is None:
        raise NotFound("Assignment not found")
    supabase = get_supabase_client(service_role=True)
    orders = (
        supabase.table("orders")
        .select("id, user_id, user_email, status")
        .eq("id", assignment["order_id"])
        .limit(1)
        .execute()
        .data
    )
    order = orders[0] if orders else None
    if order is None or not order.get("user_id"):
        return []

    sent = []
    status = assignment.get("status")
    if event_type == "INSERT" or (event_type == "UPDATE" and status == "assigned"):
        driver = get_driver(assignment["driver_id"]) if assignment.get("driver_id") else None
        notification_service.notify_order(
            order,
            message=notification_service.driver_assigned_message((driver or {}).get("name")),
            notification_type="driver_assigned",
        )
        sent.append("driver_assigned")
    if event_type == "UPDATE" and status == "delivered":
        notification_service.notify_order(
            {**order, "status": "delivered"}, notification_type="delivered"
        )
        sent.append("delivered")
    logger.info("assignment_notified", assignment_id=assignment_id, event=event_type, sent=sent)
    return sent


# ---------------------------------------------------------------------------
# Tracking
# ---------------------------------------------------------------------------


def _point(lat: Any, lng: Any) -> LatLng | None:
    if lat is None or lng is None:
        return None
    return LatLng(lat=float(lat), lng=float(lng))


async def get_tracking(order: dict[str, Any]) -> dict[str, Any]:
    """Order, its latest assignment, the driver's last position and an ETA."""
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("delivery_assignments")
        .select("*")
        .eq("order_id", order["id"])
        .order("assigned_at", desc=True)
        .limit(1)
        .execute()
    )
    assignment = result.data[0] if result.data else None
    driver = get_driver(assignment["driver_id"]) if assignment else None

    driver_location = None
    eta = None
    if driver is not None:
        current = _point(driver.get("current_lat"), driver.get("current_lng"))
        if current is not None:
            driver_location = {
                "lat": current.lat,
                "lng": current.lng,
                "updated_at": driver.get("location_updated_at"),
            }
        destination = order.get("delivery_location") or {}
        delivery = _point(destination.get("lat"), destination.get("lng"))
        if current is not None and delivery is not None and order.get("status") != "delivered":
            eta = await maps_service.calculate_eta(
                EtaRequest(pickup_location=current, delivery_location=delivery)
            )

    return {
        "order": order,
        "assignment": assignment,
        "driver": {k: driver.get(k) for k in ("id", "name", "phone", "vehicle_type", "status")}
        if driver
        else None,
        "driver_location": driver_location,
        "eta": eta,
    }
