"""
jobs/financials.py — Per-period financial summaries for franchise locations.

For each active franchise (or a single location) the job sums revenue
orders in the period, joins the tax recorded on their sale transactions
and upserts one franchise_financials row per location and period.

Usage:
    from jeffy_ops.jobs.financials import calculate_all
    rows, result = calculate_all("month")
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from jeffy_shared.aggregations import franchise_period_metrics
from jeffy_shared.constants import REVENUE_ORDER_STATUSES
from jeffy_shared.db import get_supabase_client
from jeffy_shared.logging import get_logger
from jeffy_shared.time_utils import resolve_period, utc_now

from jeffy_ops.loaders.supabase_writer import SupabaseWriter, WriteResult

log = get_logger(__name__, job="financials")

PERIOD_TYPES = {
    "today": "daily",
    "week": "weekly",
    "month": "monthly",
    "year": "yearly",
}

CONFLICT_COLUMNS = ["franchise_location_id", "period_start", "period_end", "period_type"]


def _franchise_ids(client: Any, location_id: str | None) -> list[str]:
    if location_id:
        return [location_id]
    rows = (
        client.table("locations")
        .select("id")
        .eq("is_franchise", True)
        .eq("is_active", True)
        .execute()
        .data
    )
    return [r["id"] for r in rows]


def _period_orders(client: Any, location_id: str, start: datetime, end: datetime) -> list[dict[str, Any]]:
    return (
        client.table("orders")
        .select("id, items, total, shipping_cost, created_at")
        .eq("franchise_location_id", location_id)
        .in_("status", list(REVENUE_ORDER_STATUSES))
        .gte("created_at", start.isoformat())
        .lte("created_at", end.isoformat())
        .execute()
        .data
    )


def _tax_rows(client: Any, orders: list[dict[str, Any]]) -> list[dict[str, Any]]:
    if not orders:
        return []
    return (
        client.table("financial_transactions")
        .select("order_id, tax_amount, corporate_tax_amount")
        .in_("order_id", [o["id"] for o in orders])
        .execute()
        .data
    )


def calculate_all(
    range_name: str = "month",
    *,
    location_id: str | None = None,
    now: datetime | None = None,
    client: Any | None = None,
) -> tuple[list[dict[str, Any]], WriteResult]:
    """Compute and upsert the period summary for every franchise."""
    if range_name not in PERIOD_TYPES:
        raise ValueError(f"Unsupported range {range_name!r}; expected one of {', '.join(PERIOD_TYPES)}")
    client = client or get_supabase_client(service_role=True)
    start, end = resolve_period(range_name, now=now)

    calculated_at = utc_now().isoformat()
    rows: list[dict[str, Any]] = []
    for franchise_id in _franchise_ids(client, location_id):
        orders = _period_orders(client, franchise_id, start, end)
        metrics = franchise_period_metrics(orders, _tax_rows(client, orders))
        rows.append(
            {
                "franchise_location_id": franchise_id,
                "period_start": start.date().isoformat(),
                "period_end": end.date().isoformat(),
                "period_type": PERIOD_TYPES[range_name],
                **metrics,
                "calculated_at": calculated_at,
            }
        )
        log.debug("franchise_period_computed", location_id=franchise_id, orders=len(orders))

    result = SupabaseWriter(client).upsert("franchise_financials", rows, CONFLICT_COLUMNS)
    log.info(
        "franchise_financials_calculated",
        range=range_name,
        locations=len(rows),
        status=result.status,
    )
    return rows, result
