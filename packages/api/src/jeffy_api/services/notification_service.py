"""Customer order notifications.

Rows written here are pushed to the storefront by Supabase Realtime; the
API only inserts them and marks them read.
"""

from __future__ import annotations

from typing import Any

import structlog
from postgrest.exceptions import APIError

from jeffy_shared.constants import ORDER_STATUS_MESSAGES, NotificationType
from jeffy_shared.db import get_supabase_client

logger = structlog.get_logger(__name__)

NOTIFICATIONS_TABLE = "order_notifications"


def driver_assigned_message(driver_name: str | None) -> str:
    if driver_name:
        return f"Driver {driver_name} has been assigned to your order!"
    return "A driver has been assigned to your order!"


def notify_order(
    order: dict[str, Any],
    *,
    message: str | None = None,
    notification_type: NotificationType = "status_update",
) -> dict[str, Any] | None:
    """
    Insert a notification for the customer who placed `order`.

    A failed insert is logged and swallowed: the order change that
    triggered it has already been committed.
    """
    user_id = order.get("user_id")
    if not user_id:
        return None
    status = order.get("status", "")
    row = {
        "user_id": user_id,
        "order_id": order.get("id"),
        "type": notification_type,
        "message": message or ORDER_STATUS_MESSAGES.get(status, f"Order status: {status}"),
        "read": False,
    }
    supabase = get_supabase_client(service_role=True)
    try:
        result = supabase.table(NOTIFICATIONS_TABLE).insert(row).execute()
    except APIError as exc:
        logger.error("notification_failed", user_id=user_id, order_id=order.get("id"), error=str(exc))
        return None
    logger.info("notification_created", user_id=user_id, order_id=order.get("id"), type=notification_type)
    return result.data[0] if result.data else None


def list_notifications(user_id: str, *, unread_only: bool = False, limit: int = 50) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table(NOTIFICATIONS_TABLE).select("*").eq("user_id", user_id)
    if unread_only:
        query = query.eq("read", False)
    return query.order("created_at", desc=True).limit(limit).execute().data


def mark_read(user_id: str, notification_id: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table(NOTIFICATIONS_TABLE)
        .update({"read": True})
        .eq("id", notification_id)
        .eq("user_id", user_id)
        .execute()
    )
    return result.data[0] if result.data else None


def mark_all_read(user_id: str) -> int:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table(NOTIFICATIONS_TABLE)
        .update({"read": True})
        .eq("user_id", user_id)
        .eq("read", False)
        .execute()
    )
    return len(result.data)
