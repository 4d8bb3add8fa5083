"""Procurement queue and the batches sent to the sourcing agent."""

from __future__ import annotations

from typing import Any

import structlog
from postgrest.exceptions import APIError

from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import BatchCreate, QueueItemCreate, QueueItemUpdate
from jeffy_shared.references import batch_number
from jeffy_shared.time_utils import utc_now

from jeffy_api.errors import ValidationFailed
from jeffy_api.utils.filtering import apply_status_filter

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Queue
# ---------------------------------------------------------------------------


def list_queue(*, status: str | None = None, priority: str | None = None) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("procurement_queue").select("*")
    query = apply_status_filter(query, "status", status)
    query = apply_status_filter(query, "priority", priority)
    return query.order("created_at", desc=True).execute().data


def create_queue_item(payload: QueueItemCreate, added_by: str | None = None) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    row = {**payload.to_insert_dict(), "added_by": added_by}
    item = supabase.table("procurement_queue").insert(row).execute().data[0]
    logger.info("procurement_item_queued", item_id=item.get("id"), product_id=payload.product_id)
    return item


def update_queue_item(item_id: str, payload: QueueItemUpdate) -> dict[str, Any] | None:
    changes = payload.to_update_dict()
    changes["updated_at"] = utc_now().isoformat()
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("procurement_queue").update(changes).eq("id", item_id).execute()
    return result.data[0] if result.data else None


def delete_queue_item(item_id: str) -> bool:
    supabase = get_supabase_client(service_role=True)
    return bool(supabase.table("procurement_queue").delete().eq("id", item_id).execute().data)


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------


def list_batches(*, status: str | None = None) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("procurement_batches").select("*")
    query = apply_status_filter(query, "status", status)
    return query.order("created_at", desc=True).execute().data


def get_batch(batch_id: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("procurement_batches").select("*").eq("id", batch_id).limit(1).execute()
    if not result.data:
        return None
    batch = result.data[0]
    batch["items"] = (
        supabase.table("procurement_batch_items").select("*").eq("batch_id", batch_id).execute().data
    )
    return batch


def create_batch(payload: BatchCreate, created_by: str | None = None) -> dict[str, Any]:
    """
    Group pending queue items into a batch for the agent.

    Items that are no longer pending are skipped. If the batch items
    cannot be written the batch header is deleted again.
    """
    supabase = get_supabase_client(service_role=True)
    queued = (
        supabase.table("procurement_queue")
        .select("*")
        .in_("id", payload.queue_item_ids)
        .eq("status", "pending")
        .execute()
        .data
    )
    if not queued:
        raise ValidationFailed("No pending queue items selected")

    now = utc_now()
    total_quantity = sum(int(q.get("quantity_needed") or 0) for q in queued)
    batch = (
        supabase.table("procurement_batches")
        .insert(
            {
                "batch_number": batch_number(payload.batch_type, now.date()),
                "batch_type": payload.batch_type,
                "status": "draft",
                "total_items": len(queued),
                "total_quantity": total_quantity,
                "created_by": created_by,
            }
        )
        .execute()
        .data[0]
    )

    rows = [
        {
            "batch_id": batch["id"],
            "queue_item_id": q["id"],
            "product_id": q.get("product_id"),
            "variant_id": q.get("variant_id"),
            "quantity": q.get("quantity_needed"),
            "procurement_link": q.get("procurement_link"),
            "target_cost_rmb": q.get("target_cost_rmb"),
        }
        for q in queued
    ]
    try:
        items = supabase.table("procurement_batch_items").insert(rows).execute().data
    except APIError:
        supabase.table("procurement_batches").delete().eq("id", batch["id"]).execute()
        logger.error("batch_items_failed", batch_id=batch["id"], rolled_back=True)
        raise

    supabase.table("procurement_queue").update(
        {
            "status": "sent_to_agent",
            "procurement_batch_id": batch["id"],
            "sent_to_agent_at": now.isoformat(),
        }
    ).in_("id", [q["id"] for q in queued]).execute()

    logger.info(
        "procurement_batch_created",
        batch_id=batch["id"],
        batch_number=batch["batch_number"],
        items=len(items),
        total_quantity=total_quantity,
    )
    return {**batch, "items": items}


def update_batch_status(batch_id: str, status: str) -> dict[str, Any] | None:
    changes: dict[str, Any] = {"status": status, "updated_at": utc_now().isoformat()}
    if status == "sent":
        changes["sent_at"] = changes["updated_at"]
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("procurement_batches").update(changes).eq("id", batch_id).execute()
    return result.data[0] if result.data else None
