"""
jobs/reorders.py — Low-stock scan and procurement queue top-up.

Lists products and variants at or below their reorder point, using the
check_low_stock database function when it is deployed and the same rule
in Python otherwise. With enqueue=True each low item that has no open
procurement_queue row gets a pending one.
"""

from __future__ import annotations

from typing import Any

from postgrest.exceptions import APIError

from jeffy_shared.aggregations import find_low_stock
from jeffy_shared.config import settings
from jeffy_shared.db import get_supabase_client
from jeffy_shared.logging import get_logger

from jeffy_ops.loaders.supabase_writer import SupabaseWriter, WriteResult

log = get_logger(__name__, job="reorders")

# Queue rows in these states already cover the shortfall
OPEN_QUEUE_STATUSES = ("pending", "sent_to_agent", "ordered")


def _low_stock(client: Any) -> list[dict[str, Any]]:
    try:
        return client.rpc("check_low_stock").execute().data or []
    except APIError as exc:
        log.warning("low_stock_rpc_failed", error=exc.message, fallback="manual")

    products = (
        client.table("products")
        .select("id, name, stock, reorder_point, reorder_quantity, has_variants")
        .eq("is_active", True)
        .execute()
        .data
    )
    variants = (
        client.table("product_variants")
        .select("id, product_id, name, sku, stock, reorder_point, reorder_quantity, products(name)")
        .execute()
        .data
    )
    return find_low_stock(
        products,
        variants,
        default_reorder_point=settings.default_reorder_point,
        suggested_quantity=settings.default_reorder_quantity,
    )


def _queue_key(row: dict[str, Any]) -> tuple[str, str | None]:
    return str(row.get("product_id")), row.get("variant_id")


def scan_low_stock(
    *,
    enqueue: bool = False,
    client: Any | None = None,
) -> tuple[list[dict[str, Any]], WriteResult | None]:
    """
    Return the low-stock items and, when enqueuing, the queue write result.

    Items are ordered by current stock, lowest first.
    """
    client = client or get_supabase_client(service_role=True)
    items = _low_stock(client)
    log.info("low_stock_scanned", items=len(items))
    if not enqueue:
        return items, None

    open_rows = (
        client.table("procurement_queue")
        .select("product_id, variant_id, status")
        .in_("status", list(OPEN_QUEUE_STATUSES))
        .execute()
        .data
    )
    queued = {_queue_key(r) for r in open_rows}

    new_rows = [
        {
            "product_id": item["product_id"],
            "variant_id": item.get("variant_id"),
            "quantity_needed": int(item.get("suggested_quantity") or settings.default_reorder_quantity),
            "priority": "urgent" if int(item.get("current_stock") or 0) <= 0 else "high",
            "status": "pending",
            "description": f"Low stock: {item.get('name', '')} ({item.get('current_stock', 0)} left)",
        }
        for item in items
        if _queue_key(item) not in queued
    ]
    result = SupabaseWriter(client).insert("procurement_queue", new_rows)
    log.info(
        "low_stock_enqueued",
        queued=result.records_written,
        already_queued=len(items) - len(new_rows),
    )
    return items, result
