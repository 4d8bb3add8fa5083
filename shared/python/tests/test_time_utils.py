"""
tests/test_time_utils.py — Tests for reporting periods and timestamp parsing.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from jeffy_shared.time_utils import iso, parse_iso_datetime, resolve_period

NOW = datetime(2026, 3, 18, 15, 30, tzinfo=timezone.utc)


class TestParseIsoDatetime:
    @pytest.mark.parametrize("raw", [None, "", "not a date"])
    def test_empty_or_invalid(self, raw):
        assert parse_iso_datetime(raw) is None

    def test_naive_is_utc(self):
        assert parse_iso_datetime("2026-03-01T10:00:00") == datetime(2026, 3, 1, 10, tzinfo=timezone.utc)

    def test_offset_converted_to_utc(self):
        parsed = parse_iso_datetime("2026-03-01T10:00:00+02:00")
        assert parsed == datetime(2026, 3, 1, 8, tzinfo=timezone.utc)
        assert parsed.tzinfo == timezone.utc

    def test_postgres_format(self):
        parsed = parse_iso_datetime("2026-03-01 10:00:00.123456+00")
        assert parsed is not None
        assert parsed.microsecond == 123456

    def test_datetime_passthrough(self):
        assert parse_iso_datetime(datetime(2026, 3, 1)) == datetime(2026, 3, 1, tzinfo=timezone.utc)


class TestResolvePeriod:
    @pytest.mark.parametrize(
        ("name", "expected_start"),
        [
            ("today", datetime(2026, 3, 18, tzinfo=timezone.utc)),
            ("week", NOW - timedelta(days=7)),
            ("month", datetime(2026, 3, 1, tzinfo=timezone.utc)),
            ("year", datetime(2026, 1, 1, tzinfo=timezone.utc)),
        ],
    )
    def test_named_ranges(self, name, expected_start):
        start, end = resolve_period(name, now=NOW)
        assert start == expected_start
        assert end == NOW

    @pytest.mark.parametrize("name", ["all", "decade", None])
    def test_open_ended(self, name):
        assert resolve_period(name, now=NOW) == (None, NOW)

    def test_explicit_dates_cover_whole_days(self):
        start, end = resolve_period("year", start="2026-02-01", end="2026-02-28", now=NOW)
        assert start == datetime(2026, 2, 1, tzinfo=timezone.utc)
        assert end.date() == date(2026, 2, 28)
        assert (end.hour, end.minute, end.second) == (23, 59, 59)

    def test_start_only_runs_to_now(self):
        start, end = resolve_period(start=date(2026, 3, 10), now=NOW)
        assert start == datetime(2026, 3, 10, tzinfo=timezone.utc)
        assert end == NOW

    def test_full_timestamp_bounds(self):
        start, _ = resolve_period(start="2026-03-10T06:00:00+02:00", now=NOW)
        assert start == datetime(2026, 3, 10, 4, tzinfo=timezone.utc)


def test_iso():
    assert iso(None) is None
    assert iso(NOW) == "2026-03-18T15:30:00+00:00"
