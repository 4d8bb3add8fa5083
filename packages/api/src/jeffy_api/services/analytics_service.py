"""Sales analytics over completed orders."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from jeffy_shared.aggregations import best_sellers, category_performance, daily_trends, profit_leaders

from jeffy_api.services import catalog_service
from jeffy_api.services.accounting_service import revenue_orders

REPORTS = ("best-sellers", "profit-leaders", "trends", "categories")


def report(name: str, start: datetime | None, end: datetime | None, *, limit: int = 10) -> list[dict[str, Any]]:
    orders = revenue_orders(start, end)
    if name == "trends":
        return daily_trends(orders)

    categories = catalog_service.category_map()
    if name == "best-sellers":
        return best_sellers(orders, categories, limit=limit)
    if name == "profit-leaders":
        return profit_leaders(orders, categories, limit=limit)
    if name == "categories":
        return category_performance(orders, categories)
    raise ValueError(f"Unknown report: {name}")
