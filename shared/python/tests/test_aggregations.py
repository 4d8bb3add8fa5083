"""
tests/test_aggregations.py — Tests for the polars order and transaction reductions.
"""

from __future__ import annotations

import pytest

from jeffy_shared.aggregations import (
    best_sellers,
    category_performance,
    daily_trends,
    find_low_stock,
    flatten_order_items,
    franchise_period_metrics,
    product_performance,
    profit_leaders,
    sum_transactions,
)


@pytest.fixture()
def orders():
    return [
        {
            "id": "o-1",
            "created_at": "2026-03-01T09:00:00+00:00",
            "total": 998,
            "shipping_cost": 0,
            "items": [
                {"product_id": "speaker", "product_name": "Speaker", "price": 499, "cost": 210, "quantity": 2}
            ],
        },
        {
            "id": "o-2",
            "created_at": "2026-03-02T09:00:00+00:00",
            "total": 520,
            "shipping_cost": 20,
            "items": [
                {"product_id": "case", "name": "Phone Case", "price": 100, "cost": 90, "quantity": 5},
                {"product_name": "No id, skipped", "price": 1, "quantity": 1},
            ],
        },
        {"id": "o-3", "created_at": "2026-03-02T10:00:00+00:00", "total": 0, "items": None},
    ]


CATEGORIES = {"speaker": "Electronics"}


class TestFlattenOrderItems:
    def test_one_row_per_line(self, orders):
        df = flatten_order_items(orders)
        assert df.height == 2
        assert df["product_name"].to_list() == ["Speaker", "Phone Case"]
        assert df["date"].to_list() == ["2026-03-01", "2026-03-02"]
        assert df["profit"].to_list() == [578.0, 50.0]

    def test_empty(self):
        df = flatten_order_items([])
        assert df.is_empty()
        assert "revenue" in df.columns


class TestProductPerformance:
    def test_most_profitable_first(self, orders):
        rows = product_performance(orders, CATEGORIES)
        assert [r["product_id"] for r in rows] == ["speaker", "case"]
        speaker, case = rows
        assert speaker["units_sold"] == 2
        assert speaker["revenue"] == 998.0
        assert speaker["selling_price"] == 499.0
        assert speaker["cost"] == 210.0
        assert speaker["profit_margin"] == pytest.approx(57.915, abs=0.001)
        assert speaker["category"] == "Electronics"
        assert case["category"] == ""

    def test_no_sales(self):
        assert product_performance([]) == []

    def test_best_sellers_by_units(self, orders):
        assert [r["product_id"] for r in best_sellers(orders)] == ["case", "speaker"]
        assert len(best_sellers(orders, limit=1)) == 1

    def test_profit_leaders(self, orders):
        assert profit_leaders(orders, limit=1)[0]["product_id"] == "speaker"


def test_daily_trends(orders):
    rows = daily_trends(orders)
    assert rows == [
        {"date": "2026-03-01", "revenue": 998.0, "orders": 1, "profit": 578.0},
        {"date": "2026-03-02", "revenue": 520.0, "orders": 2, "profit": 50.0},
    ]


def test_daily_trends_empty():
    assert daily_trends([]) == []


def test_category_performance(orders):
    rows = category_performance(orders, CATEGORIES)
    assert [r["category"] for r in rows] == ["Electronics", "Uncategorized"]
    assert rows[1]["units_sold"] == 5
    assert rows[1]["profit_margin"] == pytest.approx(10.0)


class TestSumTransactions:
    def test_totals(self):
        rows = [
            {"amount": 1000, "cost_amount": 400, "import_vat_amount": 60, "net_profit_after_tax": 328.5},
            {"amount": "200", "cost_amount": None, "net_profit_after_tax": 71.5},
        ]
        totals = sum_transactions(rows)
        assert totals["total_revenue"] == 1200.0
        assert totals["effective_costs"] == 340.0
        assert totals["net_profit"] == 400.0
        assert totals["profit_margin"] == pytest.approx(33.333, abs=0.001)
        assert totals["transaction_count"] == 2

    def test_empty(self):
        totals = sum_transactions([])
        assert totals["total_revenue"] == 0.0
        assert totals["profit_margin"] == 0.0
        assert totals["transaction_count"] == 0


class TestFranchisePeriodMetrics:
    def test_metrics(self):
        orders = [
            {
                "total": 120,
                "shipping_cost": 20,
                "items": [{"product_id": "a", "price": 50, "cost": 20, "quantity": 2}],
            },
            {"total": 80, "items": [{"product_id": "b", "price": 80, "cost": 40, "quantity": 1}]},
        ]
        metrics = franchise_period_metrics(orders, [{"tax_amount": 26.09, "corporate_tax_amount": 5}])
        assert metrics == {
            "total_revenue": 200.0,
            "total_orders": 2,
            "average_order_value": 100.0,
            "total_cost": 80.0,
            "total_shipping_cost": 20.0,
            "total_operational_cost": 0.0,
            "gross_profit": 120.0,
            "net_profit": 100.0,
            "profit_margin": 50.0,
            "total_tax": 26.09,
            "corporate_tax": 5.0,
            "units_sold": 3,
            "stock_turnover_rate": 0.0,
        }

    def test_no_orders(self):
        metrics = franchise_period_metrics([])
        assert metrics["total_revenue"] == 0.0
        assert metrics["average_order_value"] == 0.0
        assert metrics["profit_margin"] == 0.0
        assert metrics["units_sold"] == 0


class TestFindLowStock:
    def test_products_and_variants(self):
        products = [
            {"id": "p1", "name": "Kettle", "stock": 2, "reorder_point": 5},
            {"id": "p2", "name": "Toaster", "stock": 9},
            {"id": "p3", "name": "Fridge", "stock": 11},
            {"id": "p4", "name": "Tee", "stock": 0, "has_variants": True},
        ]
        variants = [
            {"id": "v1", "product_id": "p4", "name": "Large", "stock": 1, "reorder_quantity": 24, "products": {"name": "Tee"}},
            {"id": "v2", "product_id": "p4", "sku": "TEE-S", "stock": 30},
        ]
        rows = find_low_stock(products, variants, default_reorder_point=10, suggested_quantity=50)
        assert [(r["name"], r["current_stock"]) for r in rows] == [
            ("Tee Large", 1),
            ("Kettle", 2),
            ("Toaster", 9),
        ]
        assert rows[0]["suggested_quantity"] == 24
        assert rows[2]["reorder_point"] == 10
        assert rows[1]["variant_id"] is None
