"""
aggregations.py — polars reductions over orders, transactions and stock.

Orders store their line items as a JSON array:
    [{"product_id", "product_name", "variant_id", "price", "cost", "quantity"}]

These helpers flatten that array into a DataFrame and aggregate it for
the accounting and analytics dashboards, the franchise financials job
and the reorder scan. They take plain row dicts (as returned by
supabase-py) and return plain dicts, so callers stay free of polars.
"""

from __future__ import annotations

from typing import Any

import polars as pl

_ITEM_SCHEMA: dict[str, Any] = {
    "order_id": pl.Utf8,
    "date": pl.Utf8,
    "product_id": pl.Utf8,
    "product_name": pl.Utf8,
    "price": pl.Float64,
    "cost": pl.Float64,
    "quantity": pl.Int64,
}


def _num(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def flatten_order_items(orders: list[dict[str, Any]]) -> pl.DataFrame:
    """One row per order line with revenue/cost/profit columns added."""
    rows: list[dict[str, Any]] = []
    for order in orders:
        items = order.get("items")
        if not isinstance(items, list):
            continue
        created = str(order.get("created_at") or "")[:10]
        for item in items:
            if not isinstance(item, dict) or not item.get("product_id"):
                continue
            rows.append(
                {
                    "order_id": str(order.get("id") or ""),
                    "date": created,
                    "product_id": str(item["product_id"]),
                    "product_name": item.get("product_name") or item.get("name") or "Unknown",
                    "price": _num(item.get("price")),
                    "cost": _num(item.get("cost")),
                    "quantity": int(_num(item.get("quantity"))),
                }
            )

    df = pl.DataFrame(rows, schema=_ITEM_SCHEMA)
    return df.with_columns(
        (pl.col("price") * pl.col("quantity")).alias("revenue"),
        (pl.col("cost") * pl.col("quantity")).alias("total_cost"),
    ).with_columns((pl.col("revenue") - pl.col("total_cost")).alias("profit"))


def _margin_expr() -> pl.Expr:
    return (
        pl.when(pl.col("revenue") > 0)
        .then(pl.col("profit") / pl.col("revenue") * 100)
        .otherwise(0.0)
        .alias("profit_margin")
    )


def product_performance(
    orders: list[dict[str, Any]],
    categories: dict[str, str] | None = None,
) -> list[dict[str, Any]]:
    """
    Per-product units, revenue, cost, profit and margin, most profitable first.

    `categories` maps product_id -> category name; missing entries get "".
    Average selling price and cost are weighted by units sold.
    """
    items = flatten_order_items(orders)
    if items.is_empty():
        return []

    grouped = (
        items.group_by("product_id")
        .agg(
            pl.col("product_name").first(),
            pl.col("quantity").sum().alias("units_sold"),
            pl.col("revenue").sum(),
            pl.col("total_cost").sum(),
            pl.col("profit").sum(),
        )
        .with_columns(
            pl.when(pl.col("units_sold") > 0)
            .then(pl.col("revenue") / pl.col("units_sold"))
            .otherwise(0.0)
            .alias("selling_price"),
            pl.when(pl.col("units_sold") > 0)
            .then(pl.col("total_cost") / pl.col("units_sold"))
            .otherwise(0.0)
            .alias("cost"),
            _margin_expr(),
        )
        .sort(["profit", "product_id"], descending=[True, False])
    )

    cats = categories or {}
    result = grouped.to_dicts()
    for row in result:
        row["category"] = cats.get(row["product_id"], "")
    return result


def best_sellers(
    orders: list[dict[str, Any]],
    categories: dict[str, str] | None = None,
    limit: int = 10,
) -> list[dict[str, Any]]:
    rows = product_performance(orders, categories)
    rows.sort(key=lambda r: (-r["units_sold"], r["product_id"]))
    return rows[:limit]


def profit_leaders(
    orders: list[dict[str, Any]],
    categories: dict[str, str] | None = None,
    limit: int = 10,
) -> list[dict[str, Any]]:
    return product_performance(orders, categories)[:limit]


def daily_trends(orders: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Revenue (order totals), order count and item profit per calendar day."""
    if not orders:
        return []

    totals = pl.DataFrame(
        [
            {
                "order_id": str(o.get("id") or i),
                "date": str(o.get("created_at") or "")[:10],
                "total": _num(o.get("total")),
            }
            for i, o in enumerate(orders)
        ],
        schema={"order_id": pl.Utf8, "date": pl.Utf8, "total": pl.Float64},
    )
    by_day = totals.group_by("date").agg(
        pl.col("total").sum().alias("revenue"),
        pl.len().alias("orders"),
    )

    items = flatten_order_items(orders)
    profit = items.group_by("date").agg(pl.col("profit").sum())

    return (
        by_day.join(profit, on="date", how="left")
        .with_columns(pl.col("profit").fill_null(0.0))
        .sort("date")
        .to_dicts()
    )


def category_performance(
    orders: list[dict[str, Any]],
    categories: dict[str, str],
) -> list[dict[str, Any]]:
    items = flatten_order_items(orders)
    if items.is_empty():
        return []

    mapping = pl.DataFrame(
        {"product_id": list(categories.keys()), "category": list(categories.values())},
        schema={"product_id": pl.Utf8, "category": pl.Utf8},
    )
    return (
        items.join(mapping, on="product_id", how="left")
        .with_columns(pl.col("category").fill_null("Uncategorized"))
        .group_by("category")
        .agg(
            pl.col("quantity").sum().alias("units_sold"),
            pl.col("revenue").sum(),
            pl.col("profit").sum(),
        )
        .with_columns(_margin_expr())
        .sort(["revenue", "category"], descending=[True, False])
        .to_dicts()
    )


_TRANSACTION_COLUMNS = (
    "amount",
    "cost_amount",
    "tax_amount",
    "import_vat_amount",
    "corporate_tax_amount",
    "profit_amount",
    "net_profit_after_tax",
)


def sum_transactions(rows: list[dict[str, Any]]) -> dict[str, float]:
    """Accounting dashboard totals over financial_transactions rows."""
    df = pl.DataFrame(
        [{c: _num(r.get(c)) for c in _TRANSACTION_COLUMNS} for r in rows],
        schema={c: pl.Float64 for c in _TRANSACTION_COLUMNS},
    )
    sums = {c: float(df[c].sum() or 0.0) for c in _TRANSACTION_COLUMNS}

    revenue = sums["amount"]
    net = sums["net_profit_after_tax"]
    return {
        "total_revenue": revenue,
        "total_costs": sums["cost_amount"],
        "effective_costs": sums["cost_amount"] - sums["import_vat_amount"],
        "net_profit": net,
        "profit_before_tax": sums["profit_amount"],
        "tax_owed": sums["tax_amount"],
        "import_vat_paid": sums["import_vat_amount"],
        "import_vat_reclaimable": sums["import_vat_amount"],
        "corporate_tax_owed": sums["corporate_tax_amount"],
        "profit_margin": net / revenue * 100 if revenue > 0 else 0.0,
        "transaction_count": len(rows),
    }


def franchise_period_metrics(
    orders: list[dict[str, Any]],
    tax_rows: list[dict[str, Any]] | None = None,
) -> dict[str, float | int]:
    """
    Financial summary of one franchise location over a period.

    Revenue is the sum of order totals; cost of goods comes from the
    line items; shipping is what the franchise paid to deliver.
    """
    items = flatten_order_items(orders)
    revenue = sum(_num(o.get("total")) for o in orders)
    shipping = sum(_num(o.get("shipping_cost")) for o in orders)
    cost = float(items["total_cost"].sum() or 0.0) if not items.is_empty() else 0.0
    units = int(items["quantity"].sum() or 0) if not items.is_empty() else 0
    order_count = len(orders)

    gross = revenue - cost
    net = gross - shipping
    tax = sum(_num(r.get("tax_amount")) for r in tax_rows or [])
    corporate_tax = sum(_num(r.get("corporate_tax_amount")) for r in tax_rows or [])

    # Keys match the franchise_financials columns
    return {
        "total_revenue": round(revenue, 2),
        "total_orders": order_count,
        "average_order_value": round(revenue / order_count, 2) if order_count else 0.0,
        "total_cost": round(cost, 2),
        "total_shipping_cost": round(shipping, 2),
        "total_operational_cost": 0.0,
        "gross_profit": round(gross, 2),
        "net_profit": round(net, 2),
        "profit_margin": round(net / revenue * 100, 2) if revenue > 0 else 0.0,
        "total_tax": round(tax, 2),
        "corporate_tax": round(corporate_tax, 2),
        "units_sold": units,
        "stock_turnover_rate": 0.0,
    }


def find_low_stock(
    products: list[dict[str, Any]],
    variants: list[dict[str, Any]],
    *,
    default_reorder_point: int,
    suggested_quantity: int,
) -> list[dict[str, Any]]:
    """
    Products (without variants) and variants at or below their reorder point.

    Mirrors the check_low_stock database function so the API can fall back
    to it when the RPC is unavailable.
    """
    low: list[dict[str, Any]] = []
    for p in products:
        if p.get("has_variants"):
            continue
        stock = int(_num(p.get("stock")))
        point = int(_num(p.get("reorder_point"))) or default_reorder_point
        if stock <= point:
            low.append(
                {
                    "product_id": p["id"],
                    "variant_id": None,
                    "name": p.get("name", ""),
                    "current_stock": stock,
                    "reorder_point": point,
                    "suggested_quantity": int(_num(p.get("reorder_quantity"))) or suggested_quantity,
                }
            )
    for v in variants:
        stock = int(_num(v.get("stock")))
        point = int(_num(v.get("reorder_point"))) or default_reorder_point
        if stock <= point:
            product = v.get("products") or {}
            label = " ".join(
                part for part in (product.get("name"), v.get("name") or v.get("sku")) if part
            )
            low.append(
                {
                    "product_id": v.get("product_id"),
                    "variant_id": v["id"],
                    "name": label,
                    "current_stock": stock,
                    "reorder_point": point,
                    "suggested_quantity": int(_num(v.get("reorder_quantity"))) or suggested_quantity,
                }
            )
    low.sort(key=lambda r: (r["current_stock"], r["name"]))
    return low
