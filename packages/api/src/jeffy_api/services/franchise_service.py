"""Franchise locations, stock allocations and per-period financials."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any

import structlog

from jeffy_shared.aggregations import franchise_period_metrics
from jeffy_shared.constants import REVENUE_ORDER_STATUSES
from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import AllocationCreate, AllocationUpdate, FinancialsRequest, FranchiseIn
from jeffy_shared.time_utils import utc_now

from jeffy_api.errors import NotFound, ValidationFailed
from jeffy_api.utils.filtering import apply_period_filter, apply_status_filter

logger = structlog.get_logger(__name__)

ALLOCATIONS_TABLE = "franchise_stock_allocations"
FINANCIALS_CONFLICT = "franchise_location_id,period_start,period_end,period_type"


# ---------------------------------------------------------------------------
# Franchise locations
# ---------------------------------------------------------------------------


def list_franchises(*, include_inactive: bool = False) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("locations").select("*").eq("is_franchise", True)
    if not include_inactive:
        query = query.eq("is_active", True)
    return query.order("name").execute().data


def create_franchise(payload: FranchiseIn) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    row = supabase.table("locations").insert(payload.to_insert_dict()).execute().data[0]
    logger.info("franchise_created", location_id=row.get("id"), code=payload.franchise_code)
    return row


def update_franchise(location_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
    changes = {k: v for k, v in changes.items() if k not in ("id", "created_at", "is_franchise")}
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("locations")
        .update(changes)
        .eq("id", location_id)
        .eq("is_franchise", True)
        .execute()
    )
    return result.data[0] if result.data else None


# ---------------------------------------------------------------------------
# Allocations
# ---------------------------------------------------------------------------


def list_allocations(
    *,
    location_id: str | None = None,
    shipment_id: str | None = None,
    status: str | None = None,
) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table(ALLOCATIONS_TABLE).select("*")
    if location_id:
        query = query.eq("franchise_location_id", location_id)
    if shipment_id:
        query = query.eq("shipment_id", shipment_id)
    query = apply_status_filter(query, "status", status)
    return query.order("created_at", desc=True).execute().data


def create_allocations(payload: AllocationCreate, allocated_by: str | None = None) -> list[dict[str, Any]]:
    """Allocate shipment stock to franchises at the shipment's landed unit cost."""
    supabase = get_supabase_client(service_role=True)
    items = (
        supabase.table("shipment_items")
        .select("product_id, variant_id, landed_cost_per_unit, quantity")
        .eq("shipment_id", payload.shipment_id)
        .execute()
        .data
    )
    if not items:
        raise NotFound("Shipment has no items")
    unit_costs = {
        (i.get("product_id"), i.get("variant_id")): i.get("landed_cost_per_unit")
        for i in items
    }

    rows = []
    for alloc in payload.allocations:
        key = (alloc.product_id, alloc.variant_id)
        if key not in unit_costs:
            raise ValidationFailed(
                "Product is not part of this shipment",
                details={"product_id": alloc.product_id, "variant_id": alloc.variant_id},
            )
        # Landed cost is unknown until the shipment is costed
        unit_cost = float(unit_costs[key]) if unit_costs[key] is not None else None
        rows.append(
            {
                "shipment_id": payload.shipment_id,
                "franchise_location_id": alloc.franchise_location_id,
                "product_id": alloc.product_id,
                "variant_id": alloc.variant_id,
                "quantity_allocated": alloc.quantity,
                "unit_cost_zar": unit_cost,
                "total_cost_zar": round(unit_cost * alloc.quantity, 2) if unit_cost is not None else None,
                "status": "pending",
                "notes": alloc.notes,
                "allocated_by": allocated_by,
            }
        )
    created = supabase.table(ALLOCATIONS_TABLE).insert(rows).execute().data
    logger.info("allocations_created", shipment_id=payload.shipment_id, count=len(created))
    return created


def update_allocation(allocation_id: str, payload: AllocationUpdate) -> dict[str, Any] | None:
    changes: dict[str, Any] = payload.model_dump(exclude_unset=True)
    now = utc_now().isoformat()
    if payload.status == "shipped":
        changes["shipped_at"] = now
    elif payload.status == "received":
        changes["received_at"] = now
    changes["updated_at"] = now
    supabase = get_supabase_client(service_role=True)
    result = supabase.table(ALLOCATIONS_TABLE).update(changes).eq("id", allocation_id).execute()
    return result.data[0] if result.data else None


# ---------------------------------------------------------------------------
# Financials
# ---------------------------------------------------------------------------


def list_financials(
    location_id: str | None = None,
    *,
    period_type: str | None = "monthly",
    start: date | None = None,
    end: date | None = None,
) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("franchise_financials").select("*")
    if location_id:
        query = query.eq("franchise_location_id", location_id)
    if period_type:
        query = query.eq("period_type", period_type)
    if start:
        query = query.gte("period_start", start.isoformat())
    if end:
        query = query.lte("period_end", end.isoformat())
    return query.order("period_start", desc=True).execute().data


def _window(start: date, end: date) -> tuple[datetime, datetime]:
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end, time.max, tzinfo=timezone.utc),
    )


def calculate_financials(payload: FinancialsRequest) -> dict[str, Any]:
    """Compute a franchise's period summary and upsert it."""
    start, end = _window(payload.period_start, payload.period_end)
    supabase = get_supabase_client(service_role=True)
    query = (
        supabase.table("orders")
        .select("id, items, total, shipping_cost, created_at")
        .eq("franchise_location_id", payload.franchise_location_id)
        .in_("status", list(REVENUE_ORDER_STATUSES))
    )
    orders = apply_period_filter(query, "created_at", start, end).execute().data

    tax_rows: list[dict[str, Any]] = []
    if orders:
        tax_rows = (
            supabase.table("financial_transactions")
            .select("order_id, tax_amount, corporate_tax_amount")
            .in_("order_id", [o["id"] for o in orders])
            .execute()
            .data
        )

    row = {
        "franchise_location_id": payload.franchise_location_id,
        "period_start": payload.period_start.isoformat(),
        "period_end": payload.period_end.isoformat(),
        "period_type": payload.period_type,
        **franchise_period_metrics(orders, tax_rows),
        "calculated_at": utc_now().isoformat(),
    }
    result = (
        supabase.table("franchise_financials")
        .upsert(row, on_conflict=FINANCIALS_CONFLICT)
        .execute()
    )
    logger.info(
        "franchise_financials_calculated",
        location_id=payload.franchise_location_id,
        orders=len(orders),
        revenue=row["total_revenue"],
    )
    return result.data[0] if result.data else row
