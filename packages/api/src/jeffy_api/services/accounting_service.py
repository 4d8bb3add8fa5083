"""Accounting dashboard, tax configuration and transaction export."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import structlog

from jeffy_shared.aggregations import product_performance, sum_transactions
from jeffy_shared.config import settings
from jeffy_shared.constants import REVENUE_ORDER_STATUSES
from jeffy_shared.db import get_supabase_client
from jeffy_shared.time_utils import utc_now

from jeffy_api.errors import ValidationFailed
from jeffy_api.utils.cache import settings_cache
from jeffy_api.utils.filtering import apply_period_filter

logger = structlog.get_logger(__name__)

TAX_CONFIG_TABLE = "tax_configuration"
TAX_CONFIG_FIELDS = ("tax_rate", "tax_inclusive", "import_vat_rate", "corporate_tax_rate", "tax_name")


def default_tax_config() -> dict[str, Any]:
    return {
        "tax_rate": float(settings.default_sales_vat_rate),
        "tax_inclusive": False,
        "import_vat_rate": float(settings.default_import_vat_rate),
        "corporate_tax_rate": float(settings.default_corporate_tax_rate),
        "tax_name": "VAT",
        "is_active": True,
    }


def _load_tax_config() -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table(TAX_CONFIG_TABLE).select("*").eq("is_active", True).limit(1).execute()
    if not result.data:
        return default_tax_config()
    row = result.data[0]
    config = default_tax_config()
    config.update({k: v for k, v in row.items() if v is not None})
    return config


def get_tax_config() -> dict[str, Any]:
    """The active tax_configuration row merged over defaults."""
    return settings_cache.get_or_load("tax_config", _load_tax_config)


def update_tax_config(changes: dict[str, Any]) -> dict[str, Any]:
    if changes.get("tax_rate") is None:
        raise ValidationFailed("tax_rate is required")
    rate = float(changes["tax_rate"])
    if not 0 <= rate <= 100:
        raise ValidationFailed("tax_rate must be between 0 and 100")

    row = {k: changes[k] for k in TAX_CONFIG_FIELDS if k in changes}
    row["updated_at"] = utc_now().isoformat()

    supabase = get_supabase_client(service_role=True)
    existing = supabase.table(TAX_CONFIG_TABLE).select("id").eq("is_active", True).limit(1).execute()
    if existing.data:
        result = (
            supabase.table(TAX_CONFIG_TABLE)
            .update(row)
            .eq("id", existing.data[0]["id"])
            .execute()
        )
    else:
        result = supabase.table(TAX_CONFIG_TABLE).insert({**row, "is_active": True}).execute()

    settings_cache.delete("tax_config")
    logger.info("tax_config_updated", tax_rate=rate)
    return result.data[0]


def list_transactions(
    start: datetime | None,
    end: datetime | None,
    *,
    transaction_type: str | None = "sale",
) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("financial_transactions").select("*")
    if transaction_type:
        query = query.eq("transaction_type", transaction_type)
    query = apply_period_filter(query, "transaction_date", start, end)
    return query.order("transaction_date", desc=True).execute().data


def dashboard(start: datetime | None, end: datetime | None) -> dict[str, Any]:
    rows = list_transactions(start, end)
    totals = sum_transactions(rows)
    totals["period_start"] = start.isoformat() if start else None
    totals["period_end"] = end.isoformat() if end else None
    totals["currency"] = settings.currency
    return totals


def revenue_orders(start: datetime | None, end: datetime | None) -> list[dict[str, Any]]:
    """Orders that count as sales in the window."""
    supabase = get_supabase_client(service_role=True)
    query = (
        supabase.table("orders")
        .select("id, items, total, shipping_cost, created_at, status")
        .in_("status", list(REVENUE_ORDER_STATUSES))
    )
    query = apply_period_filter(query, "created_at", start, end)
    return query.execute().data


def products_profit(
    start: datetime | None,
    end: datetime | None,
    categories: dict[str, str] | None = None,
) -> list[dict[str, Any]]:
    return product_performance(revenue_orders(start, end), categories)
