"""Query parameter parsing and Supabase filter builders."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import Query

from jeffy_shared.time_utils import resolve_period


def apply_period_filter(
    query: Any,
    column: str,
    start: datetime | None,
    end: datetime | None,
) -> Any:
    """Apply an inclusive timestamp window to a Supabase query builder."""
    if start is not None:
        query = query.gte(column, start.isoformat())
    if end is not None:
        query = query.lte(column, end.isoformat())
    return query


def apply_status_filter(query: Any, column: str, status: str | None) -> Any:
    """Filter on a status column; "all" and empty mean no filter."""
    if status and status != "all":
        query = query.eq(column, status)
    return query


def apply_text_search(
    query: Any,
    columns: list[str],
    search_term: str | None,
) -> Any:
    """Case-insensitive substring match on any of `columns` (PostgREST or filter)."""
    if not search_term:
        return query
    term = sanitize_search_term(search_term)
    if not term:
        return query
    if len(columns) == 1:
        return query.ilike(columns[0], f"%{term}%")
    return query.or_(",".join(f"{c}.ilike.%{term}%" for c in columns))


def sanitize_search_term(term: str) -> str:
    """Strip characters that would break a PostgREST or() filter."""
    return "".join(ch for ch in term.strip() if ch not in ",()%*\\")


class PeriodParams:
    """Dependency resolving ?range= / ?startDate= / ?endDate= to a UTC window."""

    def __init__(
        self,
        range_name: str = Query("month", alias="range", description="today, week, month, year or all"),
        start_date: str | None = Query(None, alias="startDate"),
        end_date: str | None = Query(None, alias="endDate"),
    ) -> None:
        self.range_name = range_name
        self.start, self.end = resolve_period(range_name, start=start_date, end=end_date)
