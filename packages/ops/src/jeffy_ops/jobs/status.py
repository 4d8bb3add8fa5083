"""
jobs/status.py — Row counts for the status report.
"""

from __future__ import annotations

from typing import Any

from jeffy_shared.db import get_supabase_client

# (label, table, filters)
STATUS_CHECKS: list[tuple[str, str, dict[str, Any]]] = [
    ("Active products", "products", {"is_active": True}),
    ("Pending orders", "orders", {"status": "pending"}),
    ("Out for delivery", "orders", {"status": "out_for_delivery"}),
    ("Available drivers", "drivers", {"status": "active"}),
    ("Procurement queue", "procurement_queue", {"status": "pending"}),
    ("Open stock orders", "stock_orders", {"order_status": "submitted"}),
    ("Pending reorders", "reorder_requests", {"status": "pending"}),
    ("Product requests", "product_requests", {"status": "pending"}),
    ("Active promo codes", "promo_codes", {"is_active": True}),
]


def collect_counts(client: Any | None = None) -> list[tuple[str, int]]:
    client = client or get_supabase_client(service_role=True)
    counts = []
    for label, table, filters in STATUS_CHECKS:
        query = client.table(table).select("id", count="exact")
        for column, value in filters.items():
            query = query.eq(column, value)
        result = query.limit(1).execute()
        counts.append((label, int(result.count or 0)))
    return counts
