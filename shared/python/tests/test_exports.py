"""
tests/test_exports.py — Tests for CSV projection of Supabase rows.
"""

from __future__ import annotations

import polars as pl

from jeffy_shared.exports import ORDER_EXPORT_COLUMNS, frame_to_csv_bytes, rows_to_frame


def test_nested_values_become_json():
    rows = [{"id": "o-1", "items": [{"product_id": "p", "quantity": 2}], "total": 10.5}]
    df = rows_to_frame(rows, ("id", "items", "total"))
    assert df.row(0) == ("o-1", '[{"product_id":"p","quantity":2}]', "10.5")
    assert all(dtype == pl.Utf8 for dtype in df.dtypes)


def test_dotted_columns_flatten_relations():
    rows = [
        {"id": "a-1", "drivers": {"name": "Sipho"}},
        {"id": "a-2", "drivers": None},
    ]
    df = rows_to_frame(rows, ["id", "drivers.name"])
    assert df["drivers.name"].to_list() == ["Sipho", None]


def test_missing_columns_are_null():
    df = rows_to_frame([{"id": "o-1"}], ORDER_EXPORT_COLUMNS)
    assert df.columns == list(ORDER_EXPORT_COLUMNS)
    assert df["status"].to_list() == [None]


def test_empty_rows_keep_header():
    csv = frame_to_csv_bytes(rows_to_frame([], ("id", "total"))).decode()
    assert csv.strip() == "id,total"


def test_csv_quotes_json():
    df = rows_to_frame([{"id": "o-1", "items": [{"a": 1}, {"b": 2}]}], ("id", "items"))
    lines = frame_to_csv_bytes(df).decode().splitlines()
    assert lines[1] == 'o-1,"[{""a"":1},{""b"":2}]"'
