"""Purchase (stock) orders sent to local suppliers."""

from __future__ import annotations

from typing import Any

import structlog

from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import StockOrderCreate, StockOrderItemIn, StockOrderUpdate
from jeffy_shared.references import next_stock_order_number
from jeffy_shared.time_utils import utc_now

from jeffy_api.utils.filtering import apply_status_filter, apply_text_search

logger = structlog.get_logger(__name__)


def list_stock_orders(*, status: str | None = None, search: str | None = None) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("stock_orders").select("*")
    query = apply_status_filter(query, "order_status", status)
    query = apply_text_search(query, ["order_number", "supplier_name"], search)
    return query.order("created_at", desc=True).execute().data


def list_items(stock_order_id: str) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    return (
        supabase.table("stock_order_items")
        .select("*")
        .eq("stock_order_id", stock_order_id)
        .execute()
        .data
    )


def get_stock_order(stock_order_id: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("stock_orders").select("*").eq("id", stock_order_id).limit(1).execute()
    if not result.data:
        return None
    order = result.data[0]
    order["items"] = list_items(stock_order_id)
    return order


def _next_order_number(year: int) -> str:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("stock_orders")
        .select("order_number")
        .like("order_number", f"PO-{year}-%")
        .order("order_number", desc=True)
        .limit(1)
        .execute()
    )
    last = result.data[0]["order_number"] if result.data else None
    return next_stock_order_number(last, year)


def _insert_items(stock_order_id: str, items: list[StockOrderItemIn]) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    rows = [i.to_insert_dict(stock_order_id) for i in items]
    return supabase.table("stock_order_items").insert(rows).execute().data


def create_stock_order(payload: StockOrderCreate, created_by: str | None = None) -> dict[str, Any]:
    order_number = _next_order_number(utc_now().year)
    supabase = get_supabase_client(service_role=True)
    order = (
        supabase.table("stock_orders")
        .insert(payload.header_dict(order_number, created_by))
        .execute()
        .data[0]
    )
    items = _insert_items(order["id"], payload.items)
    logger.info(
        "stock_order_created",
        stock_order_id=order["id"],
        order_number=order_number,
        total=order.get("total_amount"),
    )
    return {**order, "items": items}


def update_stock_order(stock_order_id: str, payload: StockOrderUpdate) -> dict[str, Any] | None:
    """Update header fields; a new item list replaces the existing items."""
    if get_stock_order(stock_order_id) is None:
        return None
    supabase = get_supabase_client(service_role=True)
    changes = payload.to_update_dict()

    if payload.items is not None:
        supabase.table("stock_order_items").delete().eq("stock_order_id", stock_order_id).execute()
        _insert_items(stock_order_id, payload.items)
        subtotal = round(sum(i.line_total for i in payload.items), 2)
        changes["subtotal"] = subtotal
        changes["total_amount"] = subtotal

    changes["updated_at"] = utc_now().isoformat()
    supabase.table("stock_orders").update(changes).eq("id", stock_order_id).execute()
    return get_stock_order(stock_order_id)


def delete_stock_order(stock_order_id: str) -> bool:
    supabase = get_supabase_client(service_role=True)
    supabase.table("stock_order_items").delete().eq("stock_order_id", stock_order_id).execute()
    result = supabase.table("stock_orders").delete().eq("id", stock_order_id).execute()
    return bool(result.data)
