"""
tests/test_jobs.py — Tests for the back-office jobs against a mocked client.
"""

from __future__ import annotations

from datetime import datetime, timezone

import polars as pl
import pytest
from postgrest.exceptions import APIError

from jeffy_ops.jobs.exports import export_csv
from jeffy_ops.jobs.financials import calculate_all
from jeffy_ops.jobs.promos import expire_promos
from jeffy_ops.jobs.reorders import scan_low_stock
from jeffy_ops.jobs.status import STATUS_CHECKS, collect_counts

from query_mocks import query_mock

NOW = datetime(2026, 3, 18, 15, 30, tzinfo=timezone.utc)

LOW_ITEMS = [
    {"product_id": "p-1", "variant_id": None, "name": "Speaker", "current_stock": 0,
     "reorder_point": 10, "suggested_quantity": 40},
    {"product_id": "p-2", "variant_id": "v-1", "name": "Case Black", "current_stock": 3,
     "reorder_point": 10, "suggested_quantity": 50},
]


# ---------------------------------------------------------------------------
# reorders
# ---------------------------------------------------------------------------


class TestScanLowStock:
    def test_uses_rpc(self, mock_supabase_client):
        mock_supabase_client.rpc.return_value.execute.return_value.data = LOW_ITEMS
        items, result = scan_low_stock()
        mock_supabase_client.rpc.assert_called_once_with("check_low_stock")
        assert items == LOW_ITEMS
        assert result is None

    def test_falls_back_when_rpc_missing(self, mock_supabase_client):
        mock_supabase_client.rpc.return_value.execute.side_effect = APIError(
            {"message": "function check_low_stock() does not exist", "code": "42883"}
        )
        mock_supabase_client.tables["products"] = query_mock(
            [
                {"id": "p-1", "name": "Speaker", "stock": 4, "reorder_point": 5, "has_variants": False},
                {"id": "p-2", "name": "Plenty", "stock": 100, "reorder_point": 5, "has_variants": False},
                {"id": "p-3", "name": "Parent", "stock": 0, "has_variants": True},
            ]
        )
        mock_supabase_client.tables["product_variants"] = query_mock(
            [{"id": "v-1", "product_id": "p-3", "name": "Red", "stock": 1, "products": {"name": "Parent"}}]
        )

        items, _ = scan_low_stock()

        assert [(i["product_id"], i["variant_id"]) for i in items] == [("p-3", "v-1"), ("p-1", None)]
        assert items[0]["name"] == "Parent Red"
        assert items[0]["reorder_point"] == 10
        assert items[1]["suggested_quantity"] == 50

    def test_enqueue_skips_open_rows(self, mock_supabase_client):
        mock_supabase_client.rpc.return_value.execute.return_value.data = LOW_ITEMS
        queue = query_mock([{"product_id": "p-2", "variant_id": "v-1", "status": "ordered"}])
        mock_supabase_client.tables["procurement_queue"] = queue

        items, result = scan_low_stock(enqueue=True)

        assert len(items) == 2
        assert result.records_written == 1
        queue.in_.assert_called_once_with("status", ["pending", "sent_to_agent", "ordered"])
        inserted, = queue.insert.call_args.args
        assert inserted == [
            {
                "product_id": "p-1",
                "variant_id": None,
                "quantity_needed": 40,
                "priority": "urgent",
                "status": "pending",
                "description": "Low stock: Speaker (0 left)",
            }
        ]

    def test_enqueue_priority_high_when_stock_remains(self, mock_supabase_client):
        mock_supabase_client.rpc.return_value.execute.return_value.data = LOW_ITEMS[1:]
        _, result = scan_low_stock(enqueue=True)
        inserted, = mock_supabase_client.tables["procurement_queue"].insert.call_args.args
        assert inserted[0]["priority"] == "high"
        assert result.status == "success"


# ---------------------------------------------------------------------------
# financials
# ---------------------------------------------------------------------------


ORDERS = [
    {
        "id": "o-1",
        "total": 998,
        "shipping_cost": 0,
        "created_at": "2026-03-05T10:00:00+00:00",
        "items": [{"product_id": "speaker", "price": 499, "cost": 210, "quantity": 2}],
    }
]


class TestCalculateFinancials:
    def test_single_location(self, mock_supabase_client):
        mock_supabase_client.tables["orders"] = query_mock(ORDERS)
        mock_supabase_client.tables["financial_transactions"] = query_mock(
            [{"order_id": "o-1", "tax_amount": 130.17, "corporate_tax_amount": 0}]
        )

        rows, result = calculate_all("month", location_id="loc-1", now=NOW)

        assert "locations" not in mock_supabase_client.tables
        assert len(rows) == 1
        row = rows[0]
        assert row["franchise_location_id"] == "loc-1"
        assert row["total_operational_cost"] == 0.0
        assert row["period_start"] == "2026-03-01"
        assert row["period_end"] == "2026-03-18"
        assert row["period_type"] == "monthly"
        assert row["total_revenue"] == 998
        assert row["total_cost"] == 420
        assert row["net_profit"] == 578
        assert row["total_tax"] == 130.17
        assert result.records_written == 1

        orders = mock_supabase_client.tables["orders"]
        orders.eq.assert_any_call("franchise_location_id", "loc-1")
        orders.gte.assert_called_once_with("created_at", "2026-03-01T00:00:00+00:00")

        written = mock_supabase_client.tables["franchise_financials"]
        assert written.upsert.call_args.kwargs == {
            "on_conflict": "franchise_location_id,period_start,period_end,period_type"
        }

    def test_every_active_franchise(self, mock_supabase_client):
        mock_supabase_client.tables["locations"] = query_mock([{"id": "loc-1"}, {"id": "loc-2"}])

        rows, result = calculate_all("week", now=NOW)

        assert [r["franchise_location_id"] for r in rows] == ["loc-1", "loc-2"]
        assert all(r["total_orders"] == 0 and r["period_type"] == "weekly" for r in rows)
        assert "financial_transactions" not in mock_supabase_client.tables
        locations = mock_supabase_client.tables["locations"]
        locations.eq.assert_any_call("is_franchise", True)
        locations.eq.assert_any_call("is_active", True)
        assert result.records_written == 2

    def test_rejects_open_range(self, mock_supabase_client):
        with pytest.raises(ValueError, match="Unsupported range"):
            calculate_all("all")


# ---------------------------------------------------------------------------
# promos
# ---------------------------------------------------------------------------


class TestExpirePromos:
    def test_deactivates_expired(self, mock_supabase_client):
        promos = query_mock([{"id": "pr-1", "code": "WINTER"}, {"id": "pr-2", "code": "FLASH"}])
        mock_supabase_client.tables["promo_codes"] = promos

        codes = expire_promos(now=NOW)

        assert codes == ["WINTER", "FLASH"]
        promos.lt.assert_called_once_with("expires_at", NOW.isoformat())
        update, = promos.update.call_args.args
        assert update["is_active"] is False
        promos.in_.assert_called_once_with("id", ["pr-1", "pr-2"])

    def test_nothing_to_expire(self, mock_supabase_client):
        assert expire_promos(now=NOW) == []
        mock_supabase_client.tables["promo_codes"].update.assert_not_called()


# ---------------------------------------------------------------------------
# exports
# ---------------------------------------------------------------------------


class TestExportCsv:
    def test_orders(self, mock_supabase_client, tmp_path):
        mock_supabase_client.tables["orders"] = query_mock(
            [{"id": "o-1", "created_at": "2026-03-05T10:00:00+00:00", "status": "delivered", "total": 998}]
        )
        out = tmp_path / "nested" / "orders.csv"

        count = export_csv("orders", out, range_name="month", now=NOW)

        assert count == 1
        df = pl.read_csv(out)
        assert df.columns[:4] == ["id", "created_at", "user_email", "status"]
        assert df["id"].to_list() == ["o-1"]
        mock_supabase_client.tables["orders"].order.assert_called_once_with("created_at", desc=True)

    def test_all_time_has_no_lower_bound(self, mock_supabase_client, tmp_path):
        count = export_csv("transactions", tmp_path / "tx.csv", range_name="all", now=NOW)
        assert count == 0
        tx = mock_supabase_client.tables["financial_transactions"]
        tx.gte.assert_not_called()
        tx.lte.assert_called_once_with("transaction_date", NOW.isoformat())
        assert (tmp_path / "tx.csv").read_text().startswith("id,created_at,order_id")


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------


def test_collect_counts(mock_supabase_client):
    mock_supabase_client.tables["orders"] = query_mock([], count=7)
    counts = dict(collect_counts())
    assert len(counts) == len(STATUS_CHECKS)
    assert counts["Pending orders"] == 7
    assert counts["Out for delivery"] == 7
    assert counts["Active products"] == 0
