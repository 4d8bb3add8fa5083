"""Landed-cost calculator: duty rates, saved breakdowns and product cost fields."""

from __future__ import annotations

from typing import Any

import structlog

from jeffy_shared.db import get_supabase_client
from jeffy_shared.pricing import CostBreakdown, CostBreakdownInput, calculate_cost_breakdown

from jeffy_api.errors import NotFound
from jeffy_api.services import catalog_service
from jeffy_api.utils.cache import duty_rate_cache

logger = structlog.get_logger(__name__)


def _load_duty_rates() -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("custom_duty_rates")
        .select("*")
        .eq("is_active", True)
        .order("category")
        .execute()
    )
    return result.data


def list_duty_rates() -> list[dict[str, Any]]:
    return duty_rate_cache.get_or_load("duty_rates", _load_duty_rates)


def duty_rate_for(category: str | None) -> float:
    """Active duty rate for a product category; unknown categories are duty free."""
    if not category:
        return 0.0
    for row in list_duty_rates():
        if row.get("category") == category:
            return float(row.get("duty_rate") or 0)
    return 0.0


def _breakdown_query(product_id: str, variant_id: str | None) -> Any:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("product_cost_breakdown").select("*").eq("product_id", product_id)
    if variant_id:
        return query.eq("variant_id", variant_id)
    return query.is_("variant_id", "null")


def get_breakdown(product_id: str, variant_id: str | None = None) -> dict[str, Any] | None:
    result = _breakdown_query(product_id, variant_id).limit(1).execute()
    return result.data[0] if result.data else None


def get_product_for_calculator(product_id: str, variant_id: str | None = None) -> dict[str, Any] | None:
    product = catalog_service.get_product(product_id, include_variants=False)
    if product is None:
        return None
    variant = catalog_service.get_variant(variant_id) if variant_id else None
    return {
        "product": product,
        "variant": variant,
        "duty_rate": duty_rate_for(product.get("category")),
    }


def calculate(inp: CostBreakdownInput) -> CostBreakdown:
    return calculate_cost_breakdown(inp)


def save_breakdown(
    product_id: str,
    variant_id: str | None,
    inp: CostBreakdownInput,
    *,
    calculated_by: str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    """
    Store the breakdown for a product or variant and copy the transport and
    duty figures onto the product/variant row.

    Figures are recomputed from the inputs rather than taken from the client.
    """
    product = catalog_service.get_product(product_id, include_variants=False)
    if product is None:
        raise NotFound("Product not found")
    if variant_id and catalog_service.get_variant(variant_id) is None:
        raise NotFound("Variant not found")

    b = calculate_cost_breakdown(inp)
    row = {
        "product_id": product_id,
        "variant_id": variant_id,
        "base_cost": round(b.base_cost, 2),
        "transport_cost_per_unit": round(b.transport_cost_per_unit, 2),
        "transport_cost_per_shipment": round(inp.transport_cost_per_shipment, 2),
        "custom_duty_rate": b.custom_duty_rate,
        "custom_duty_amount": round(b.custom_duty, 2),
        "import_vat_amount": round(b.import_vat, 2),
        "total_landed_cost": round(b.total_landed_cost, 2),
        "effective_cost": round(b.effective_cost, 2),
        "suggested_selling_price": round(b.final_selling_price, 2),
        "desired_profit_margin": inp.desired_profit_margin,
        "pricing_method": inp.pricing_method,
        "calculated_by": calculated_by,
        "notes": notes,
    }

    supabase = get_supabase_client(service_role=True)
    existing = get_breakdown(product_id, variant_id)
    if existing:
        result = (
            supabase.table("product_cost_breakdown").update(row).eq("id", existing["id"]).execute()
        )
    else:
        result = supabase.table("product_cost_breakdown").insert(row).execute()

    cost_fields = {
        "transport_cost": row["transport_cost_per_unit"],
        "custom_duty_rate": row["custom_duty_rate"],
        "custom_duty_amount": row["custom_duty_amount"],
    }
    if variant_id:
        supabase.table("product_variants").update(cost_fields).eq("id", variant_id).execute()
    else:
        supabase.table("products").update(
            {**cost_fields, "category_duty_rate": duty_rate_for(product.get("category"))}
        ).eq("id", product_id).execute()

    logger.info(
        "cost_breakdown_saved",
        product_id=product_id,
        variant_id=variant_id,
        landed_cost=row["total_landed_cost"],
    )
    return result.data[0]
