"""
time_utils.py — Reporting periods and timestamp parsing.

Dashboards accept either a named range ("today", "week", "month",
"year", "all") or explicit ISO start/end dates. Everything is resolved
to timezone-aware UTC datetimes before it reaches a query.

Usage:
    from jeffy_shared.time_utils import resolve_period

    start, end = resolve_period("month")          # 1st of this month -> now
    start, end = resolve_period(start="2024-01-01", end="2024-03-31")
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_iso_datetime(raw: str | datetime | None) -> datetime | None:
    """
    Parse a Postgres/ISO timestamp into an aware UTC datetime.

    Naive values are assumed to be UTC. Returns None for empty or
    unparseable input.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        dt = raw
    else:
        try:
            dt = date_parser.isoparse(raw)
        except (ValueError, OverflowError):
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _day_start(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


def _day_end(d: date) -> datetime:
    return datetime.combine(d, time.max, tzinfo=timezone.utc)


def resolve_period(
    range_name: str | None = "month",
    *,
    start: str | date | None = None,
    end: str | date | None = None,
    now: datetime | None = None,
) -> tuple[datetime | None, datetime]:
    """
    Resolve a reporting window to (start, end).

    "month" and "year" start at the beginning of the calendar month/year,
    "week" is a rolling seven days. Explicit start/end take precedence
    over range_name. The start is None for "all" and for unknown names.
    """
    now = now or utc_now()

    if start is not None or end is not None:
        start_dt = _coerce_bound(start, _day_start)
        end_dt = _coerce_bound(end, _day_end) or now
        return start_dt, end_dt

    midnight = relativedelta(hour=0, minute=0, second=0, microsecond=0)
    if range_name == "today":
        return now + midnight, now
    if range_name == "week":
        return now - relativedelta(days=7), now
    if range_name == "month":
        return now + midnight + relativedelta(day=1), now
    if range_name == "year":
        return now + midnight + relativedelta(month=1, day=1), now
    return None, now


def _coerce_bound(value: str | date | None, for_date) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return parse_iso_datetime(value)
    if isinstance(value, date):
        return for_date(value)
    # A bare date string covers the whole day
    if len(value) == 10:
        try:
            return for_date(date.fromisoformat(value))
        except ValueError:
            return None
    return parse_iso_datetime(value)


def iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None
