"""
jobs/exports.py — CSV exports of orders and financial transactions.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Literal

from jeffy_shared.db import get_supabase_client
from jeffy_shared.exports import ORDER_EXPORT_COLUMNS, TRANSACTION_EXPORT_COLUMNS, rows_to_frame
from jeffy_shared.logging import get_logger
from jeffy_shared.time_utils import resolve_period

log = get_logger(__name__, job="export")

ExportKind = Literal["orders", "transactions"]

_SOURCES: dict[str, tuple[str, str, tuple[str, ...]]] = {
    "orders": ("orders", "created_at", ORDER_EXPORT_COLUMNS),
    "transactions": ("financial_transactions", "transaction_date", TRANSACTION_EXPORT_COLUMNS),
}


def export_csv(
    kind: ExportKind,
    out: Path,
    *,
    range_name: str = "month",
    now: datetime | None = None,
    client: Any | None = None,
) -> int:
    """Write `kind` rows in the period to `out` as CSV and return the row count."""
    table, date_column, columns = _SOURCES[kind]
    client = client or get_supabase_client(service_role=True)
    start, end = resolve_period(range_name, now=now)

    query = client.table(table).select("*")
    if start is not None:
        query = query.gte(date_column, start.isoformat())
    rows = query.lte(date_column, end.isoformat()).order(date_column, desc=True).execute().data

    out.parent.mkdir(parents=True, exist_ok=True)
    rows_to_frame(rows, columns).write_csv(out)
    log.info("export_written", kind=kind, rows=len(rows), path=str(out))
    return len(rows)
