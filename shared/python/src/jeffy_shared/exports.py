"""
exports.py — Tabular exports of Supabase rows via polars.

Rows coming back from PostgREST can hold nested JSON (order items,
embedded relations). CSV has no place for those, so nested values are
serialised to JSON strings and embedded relations can be flattened with
dotted column names, e.g. "driver.name".

Usage:
    from jeffy_shared.exports import rows_to_frame, ORDER_EXPORT_COLUMNS

    df = rows_to_frame(rows, ORDER_EXPORT_COLUMNS)
    df.write_csv("orders.csv")
"""

from __future__ import annotations

import io
import json
from typing import Any

import polars as pl

ORDER_EXPORT_COLUMNS: tuple[str, ...] = (
    "id",
    "created_at",
    "user_email",
    "status",
    "payment_status",
    "subtotal",
    "discount",
    "shipping_cost",
    "total",
    "promo_code",
    "items",
)

TRANSACTION_EXPORT_COLUMNS: tuple[str, ...] = (
    "id",
    "created_at",
    "order_id",
    "transaction_type",
    "amount",
    "cost_amount",
    "tax_amount",
    "import_vat_amount",
    "profit_amount",
    "corporate_tax_amount",
    "net_profit_after_tax",
    "currency",
)

PRODUCT_EXPORT_COLUMNS: tuple[str, ...] = (
    "id",
    "name",
    "sku",
    "category",
    "price",
    "cost_price",
    "stock",
    "has_variants",
    "is_active",
)


def _lookup(row: dict[str, Any], column: str) -> Any:
    value: Any = row
    for part in column.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _scalar(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), default=str)
    return value


def rows_to_frame(rows: list[dict[str, Any]], columns: tuple[str, ...] | list[str]) -> pl.DataFrame:
    """Project rows onto `columns` (dotted paths allowed) as a string-safe DataFrame."""
    data: dict[str, list[str | None]] = {col: [] for col in columns}
    for row in rows:
        for col in columns:
            value = _scalar(_lookup(row, col))
            data[col].append(None if value is None else str(value))
    return pl.DataFrame(data, schema={col: pl.Utf8 for col in columns})


def frame_to_csv_bytes(df: pl.DataFrame) -> bytes:
    buf = io.BytesIO()
    df.write_csv(buf)
    return buf.getvalue()
