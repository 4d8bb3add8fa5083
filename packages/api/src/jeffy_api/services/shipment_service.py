"""Inbound shipments from the sourcing agent and their landed costs."""

from __future__ import annotations

from typing import Any

import structlog
from postgrest.exceptions import APIError

from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import ShipmentCreate, ShipmentUpdate
from jeffy_shared.pricing import allocate_landed_costs, compute_shipment_totals
from jeffy_shared.references import shipment_reference
from jeffy_shared.time_utils import utc_now

from jeffy_api.errors import NotFound
from jeffy_api.utils.filtering import apply_status_filter

logger = structlog.get_logger(__name__)

COST_FIELDS = ("total_cost_rmb", "exchange_rate", "shipping_cost", "insurance_cost")


def list_shipments(*, status: str | None = None) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("shipments").select("*")
    query = apply_status_filter(query, "status", status)
    return query.order("created_at", desc=True).execute().data


def list_items(shipment_id: str) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    return supabase.table("shipment_items").select("*").eq("shipment_id", shipment_id).execute().data


def get_shipment(shipment_id: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("shipments").select("*").eq("id", shipment_id).limit(1).execute()
    if not result.data:
        return None
    shipment = result.data[0]
    shipment["items"] = list_items(shipment_id)
    return shipment


def _next_reference(year: int) -> str:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("shipments")
        .select("id", count="exact")
        .like("shipment_reference", f"SHIP-{year}-%")
        .execute()
    )
    existing = result.count if result.count is not None else len(result.data)
    return shipment_reference(year, existing + 1)


def create_shipment(payload: ShipmentCreate, created_by: str | None = None) -> dict[str, Any]:
    import_duty = sum(i.import_duty_amount for i in payload.items)
    vat = sum(i.vat_amount for i in payload.items)
    totals = compute_shipment_totals(
        total_cost_rmb=payload.total_cost_rmb,
        exchange_rate=payload.exchange_rate,
        shipping_cost=payload.shipping_cost,
        insurance_cost=payload.insurance_cost,
        import_duty=import_duty,
        vat_amount=vat,
    )
    header = {
        **payload.model_dump(exclude={"items"}),
        **totals,
        "import_duty": round(import_duty, 2),
        "vat_amount": round(vat, 2),
        "shipment_reference": _next_reference(utc_now().year),
        "status": "ordered",
        "created_by": created_by,
    }

    supabase = get_supabase_client(service_role=True)
    shipment = supabase.table("shipments").insert(header).execute().data[0]

    rows = [i.to_insert_dict(shipment["id"], payload.exchange_rate) for i in payload.items]
    try:
        items = supabase.table("shipment_items").insert(rows).execute().data
    except APIError:
        supabase.table("shipments").delete().eq("id", shipment["id"]).execute()
        logger.error("shipment_items_failed", shipment_id=shipment["id"], rolled_back=True)
        raise

    logger.info(
        "shipment_created",
        shipment_id=shipment["id"],
        reference=shipment["shipment_reference"],
        items=len(items),
    )
    return {**shipment, "items": items}


def update_shipment(shipment_id: str, payload: ShipmentUpdate) -> dict[str, Any] | None:
    current = get_shipment(shipment_id)
    if current is None:
        return None
    changes = payload.to_update_dict()
    if any(field in changes for field in COST_FIELDS):
        merged = {**current, **changes}
        changes.update(
            compute_shipment_totals(
                total_cost_rmb=float(merged.get("total_cost_rmb") or 0),
                exchange_rate=float(merged.get("exchange_rate") or 0),
                shipping_cost=float(merged.get("shipping_cost") or 0),
                insurance_cost=float(merged.get("insurance_cost") or 0),
                import_duty=float(merged.get("import_duty") or 0),
                vat_amount=float(merged.get("vat_amount") or 0),
            )
        )
    if not changes:
        return current
    changes["updated_at"] = utc_now().isoformat()
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("shipments").update(changes).eq("id", shipment_id).execute()
    return result.data[0] if result.data else None


def calculate_landed_costs(shipment_id: str) -> list[dict[str, Any]]:
    """Share freight, insurance, duty and VAT across items by value and store per-unit costs."""
    shipment = get_shipment(shipment_id)
    if shipment is None:
        raise NotFound("Shipment not found")
    items = shipment["items"]
    if not items:
        return []

    extra = sum(
        float(shipment.get(k) or 0)
        for k in ("shipping_cost", "insurance_cost", "import_duty", "vat_amount")
    )
    per_unit = allocate_landed_costs(
        items,
        exchange_rate=float(shipment.get("exchange_rate") or 0),
        extra_costs=extra,
    )

    supabase = get_supabase_client(service_role=True)
    updated = []
    for item, landed in zip(items, per_unit):
        supabase.table("shipment_items").update({"landed_cost_per_unit": landed}).eq(
            "id", item["id"]
        ).execute()
        updated.append({**item, "landed_cost_per_unit": landed})
    logger.info("landed_costs_calculated", shipment_id=shipment_id, items=len(updated))
    return updated
