"""Low-stock detection and reorder requests."""

from __future__ import annotations

from typing import Any

import structlog
from postgrest.exceptions import APIError

from jeffy_shared.aggregations import find_low_stock
from jeffy_shared.config import settings
from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import ReorderRequestIn

from jeffy_api.utils.filtering import apply_status_filter

logger = structlog.get_logger(__name__)


def _low_stock_fallback() -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    products = (
        supabase.table("products")
        .select("id, name, stock, reorder_point, reorder_quantity, has_variants")
        .eq("is_active", True)
        .execute()
        .data
    )
    variants = (
        supabase.table("product_variants")
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


def low_stock() -> list[dict[str, Any]]:
    """Items at or below their reorder point, from the check_low_stock function if deployed."""
    supabase = get_supabase_client(service_role=True)
    try:
        return supabase.rpc("check_low_stock").execute().data or []
    except APIError as exc:
        logger.warning("low_stock_rpc_failed", error=str(exc), fallback="manual")
        return _low_stock_fallback()


def create_reorder(payload: ReorderRequestIn, requested_by: str | None = None) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    row = supabase.table("reorder_requests").insert(payload.to_insert_dict(requested_by)).execute().data[0]
    logger.info(
        "reorder_requested",
        product_id=payload.product_id,
        variant_id=payload.variant_id,
        quantity=payload.quantity,
    )
    return row


def list_reorders(status: str | None = None) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("reorder_requests").select("*")
    query = apply_status_filter(query, "status", status)
    return query.order("created_at", desc=True).execute().data
