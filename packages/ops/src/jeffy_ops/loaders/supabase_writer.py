"""
loaders/supabase_writer.py — Batched inserts and upserts for the ops jobs.

Every job funnels its writes through this module. The writer:
  - Accepts plain row dicts or a polars DataFrame
  - Batches rows to respect Supabase payload limits
  - Upserts via conflict columns, or inserts when none are given
  - Retries transport errors, then logs failed batches and continues
  - Returns a WriteResult with records_written and records_failed counts

Usage:
    from jeffy_ops.loaders.supabase_writer import SupabaseWriter

    writer = SupabaseWriter()
    result = writer.upsert(
        "franchise_financials",
        rows,
        conflict_columns=["franchise_location_id", "period_start", "period_end", "period_type"],
    )
    print(result.records_written, result.status)
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Any

import httpx
import polars as pl
import structlog
from postgrest.exceptions import APIError

from jeffy_shared.db import get_supabase_client
from jeffy_shared.retry import with_retry_sync

log = structlog.get_logger(__name__)

BATCH_SIZE = 500  # rows per Supabase request


@with_retry_sync(max_attempts=3, base_delay=0.5, retry_on=httpx.TransportError)
def _execute(query: Any) -> Any:
    return query.execute()


@dataclass
class WriteResult:
    """Summary of a writer operation."""

    table: str
    records_written: int = 0
    records_failed: int = 0
    batches_total: int = 0
    batches_failed: int = 0
    errors: list[str] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def success(self) -> bool:
        return self.records_failed == 0

    @property
    def status(self) -> str:
        if self.records_failed == 0:
            return "success"
        if self.records_written > 0:
            return "partial_failure"
        return "failure"


class SupabaseWriter:
    """
    Handles all writes to Supabase from the ops jobs.

    Uses the service role key so RLS is bypassed.
    """

    def __init__(self, client: Any | None = None, batch_size: int = BATCH_SIZE) -> None:
        self._batch_size = batch_size
        self._client = client or get_supabase_client(service_role=True)

    @property
    def client(self) -> Any:
        return self._client

    def upsert(
        self,
        table: str,
        rows: list[dict[str, Any]] | pl.DataFrame,
        conflict_columns: list[str],
    ) -> WriteResult:
        """Upsert rows, matching existing ones on `conflict_columns`."""
        return self._write(table, rows, on_conflict=",".join(conflict_columns))

    def insert(self, table: str, rows: list[dict[str, Any]] | pl.DataFrame) -> WriteResult:
        return self._write(table, rows, on_conflict=None)

    def _write(
        self,
        table: str,
        rows: list[dict[str, Any]] | pl.DataFrame,
        *,
        on_conflict: str | None,
    ) -> WriteResult:
        result = WriteResult(table=table)
        t0 = time.monotonic()

        records = self._to_dicts(rows) if isinstance(rows, pl.DataFrame) else list(rows)
        if not records:
            log.info("write_skipped_empty", table=table)
            return result

        writer_log = log.bind(table=table, total_rows=len(records))
        writer_log.info("write_start", mode="upsert" if on_conflict else "insert")

        n_batches = math.ceil(len(records) / self._batch_size)
        result.batches_total = n_batches

        for batch_idx in range(n_batches):
            start = batch_idx * self._batch_size
            batch = records[start : start + self._batch_size]
            query = self._client.table(table)
            try:
                if on_conflict:
                    _execute(query.upsert(batch, on_conflict=on_conflict))
                else:
                    _execute(query.insert(batch))
                result.records_written += len(batch)
                writer_log.debug("batch_written", batch=batch_idx + 1, n_batches=n_batches)
            except (APIError, httpx.TransportError) as exc:
                message = exc.message if isinstance(exc, APIError) else str(exc)
                log.error("batch_failed", table=table, batch=batch_idx + 1, error=message)
                result.records_failed += len(batch)
                result.batches_failed += 1
                result.errors.append(f"Batch {batch_idx + 1}/{n_batches}: {message}")

        result.duration_ms = int((time.monotonic() - t0) * 1000)
        writer_log.info(
            "write_complete",
            records_written=result.records_written,
            records_failed=result.records_failed,
            duration_ms=result.duration_ms,
            status=result.status,
        )
        return result

    @staticmethod
    def _to_dicts(df: pl.DataFrame) -> list[dict[str, Any]]:
        """
        Convert a polars DataFrame to JSON-serialisable dicts.

        Date and datetime columns become ISO strings; nulls are dropped so
        database defaults apply.
        """
        cast_exprs = []
        for name, dtype in df.schema.items():
            if dtype == pl.Date:
                cast_exprs.append(pl.col(name).cast(pl.String))
            elif isinstance(dtype, pl.Datetime):
                cast_exprs.append(pl.col(name).dt.strftime("%Y-%m-%dT%H:%M:%SZ"))
        if cast_exprs:
            df = df.with_columns(cast_exprs)
        return [{k: v for k, v in row.items() if v is not None} for row in df.to_dicts()]
