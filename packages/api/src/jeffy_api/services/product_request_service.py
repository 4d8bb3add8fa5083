"""Customer requests for products the store does not carry yet."""

from __future__ import annotations

from typing import Any

import structlog

from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import ProductRequestIn
from jeffy_shared.time_utils import utc_now

from jeffy_api.utils.filtering import apply_status_filter

logger = structlog.get_logger(__name__)


def create_request(payload: ProductRequestIn, user_id: str | None = None) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    row = supabase.table("product_requests").insert(payload.to_insert_dict(user_id)).execute().data[0]
    logger.info("product_requested", request_id=row.get("id"), urgency=payload.urgency)
    return row


def list_requests(status: str | None = None) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("product_requests").select("*")
    query = apply_status_filter(query, "status", status)
    return query.order("created_at", desc=True).execute().data


def update_status(request_id: str, status: str, admin_notes: str | None = None) -> dict[str, Any] | None:
    changes: dict[str, Any] = {"status": status, "updated_at": utc_now().isoformat()}
    if admin_notes is not None:
        changes["admin_notes"] = admin_notes
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("product_requests").update(changes).eq("id", request_id).execute()
    return result.data[0] if result.data else None
