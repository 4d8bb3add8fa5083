"""Tests for the accounting dashboard, tax configuration and sales analytics."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest


@pytest.fixture()
def transactions(fake_db):
    now = datetime.now(timezone.utc).isoformat()
    return fake_db.seed(
        "financial_transactions",
        {
            "transaction_type": "sale",
            "transaction_date": now,
            "amount": 1000,
            "cost_amount": 400,
            "tax_amount": 150,
            "import_vat_amount": 60,
            "profit_amount": 450,
            "corporate_tax_amount": 121.5,
            "net_profit_after_tax": 328.5,
        },
        {
            "transaction_type": "refund",
            "transaction_date": now,
            "amount": -200,
        },
    )


@pytest.fixture()
def sales(fake_db, product):
    return fake_db.seed(
        "orders",
        {
            "status": "delivered",
            "total": 998,
            "created_at": "2026-03-01T09:00:00+00:00",
            "items": [
                {"product_id": product["id"], "product_name": "Bluetooth Speaker", "price": 499, "cost": 210, "quantity": 2}
            ],
        },
        {
            "status": "confirmed",
            "total": 500,
            "created_at": "2026-03-02T09:00:00+00:00",
            "items": [{"product_id": "p-x", "product_name": "Phone Case", "price": 100, "cost": 90, "quantity": 5}],
        },
        {
            "status": "pending",
            "total": 750,
            "created_at": "2026-03-02T10:00:00+00:00",
            "items": [{"product_id": "p-x", "product_name": "Phone Case", "price": 150, "cost": 90, "quantity": 5}],
        },
    )


def test_dashboard_totals(client, admin_headers, transactions):
    response = client.get("/api/admin/accounting/dashboard", params={"range": "month"}, headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    data = body["data"]
    assert body["meta"]["currency"] == "ZAR"
    assert data["transaction_count"] == 1
    assert data["total_revenue"] == 1000.0
    assert data["effective_costs"] == 340.0
    assert data["import_vat_reclaimable"] == 60.0
    assert data["net_profit"] == 328.5
    assert data["profit_margin"] == pytest.approx(32.85)
    assert data["period_start"] is not None


def test_dashboard_excludes_older_transactions(client, fake_db, admin_headers):
    fake_db.seed(
        "financial_transactions",
        {"transaction_type": "sale", "transaction_date": "2020-01-05T10:00:00+00:00", "amount": 100},
    )
    data = client.get(
        "/api/admin/accounting/dashboard", params={"range": "year"}, headers=admin_headers
    ).json()["data"]
    assert data["transaction_count"] == 0
    assert data["profit_margin"] == 0.0

    data = client.get(
        "/api/admin/accounting/dashboard", params={"range": "all"}, headers=admin_headers
    ).json()["data"]
    assert data["transaction_count"] == 1
    assert data["period_start"] is None


def test_dashboard_explicit_dates(client, fake_db, admin_headers):
    fake_db.seed(
        "financial_transactions",
        {"transaction_type": "sale", "transaction_date": "2026-02-10T10:00:00+00:00", "amount": 100},
        {"transaction_type": "sale", "transaction_date": "2026-03-10T10:00:00+00:00", "amount": 300},
    )
    data = client.get(
        "/api/admin/accounting/dashboard",
        params={"startDate": "2026-02-01", "endDate": "2026-02-28"},
        headers=admin_headers,
    ).json()["data"]
    assert data["total_revenue"] == 100.0


def test_tax_config_defaults(client, admin_headers):
    data = client.get("/api/admin/accounting/tax-config", headers=admin_headers).json()["data"]
    assert data["tax_rate"] == 15.0
    assert data["tax_inclusive"] is False
    assert data["corporate_tax_rate"] == 27.0
    assert data["import_vat_rate"] == 15.0
    assert data["tax_name"] == "VAT"


def test_update_tax_config(client, fake_db, admin_headers):
    response = client.put(
        "/api/admin/accounting/tax-config",
        json={"tax_rate": 16, "tax_inclusive": True, "unknown_field": "ignored"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    [row] = fake_db.rows("tax_configuration")
    assert row["tax_rate"] == 16
    assert row["is_active"] is True
    assert "unknown_field" not in row

    # Cache was invalidated and a second update changes the same row
    data = client.get("/api/admin/accounting/tax-config", headers=admin_headers).json()["data"]
    assert data["tax_inclusive"] is True
    client.put("/api/admin/accounting/tax-config", json={"tax_rate": 15}, headers=admin_headers)
    assert len(fake_db.rows("tax_configuration")) == 1


@pytest.mark.parametrize("body", [{}, {"tax_rate": None}, {"tax_rate": 101}, {"tax_rate": -1}])
def test_update_tax_config_validation(client, admin_headers, body):
    response = client.put("/api/admin/accounting/tax-config", json=body, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_FAILED"


def test_order_uses_updated_tax_rate(client, fake_db, admin_headers, customer_headers, product):
    client.put(
        "/api/admin/accounting/tax-config",
        json={"tax_rate": 15, "tax_inclusive": True},
        headers=admin_headers,
    )
    body = {
        "user_email": "thandi@example.com",
        "items": [
            {"product_id": product["id"], "product_name": product["name"], "quantity": 1, "price": 115, "cost": 40}
        ],
    }

    assert client.post("/api/orders", json=body, headers=customer_headers).status_code == 201

    [txn] = fake_db.rows("financial_transactions")
    assert txn["amount"] == 100.0
    assert txn["tax_amount"] == 15.0


def test_products_profit(client, admin_headers, sales, product):
    response = client.get(
        "/api/admin/accounting/products-profit", params={"range": "all"}, headers=admin_headers
    )

    assert response.status_code == 200
    rows = response.json()["data"]
    assert [r["product_id"] for r in rows] == [product["id"], "p-x"]
    speaker, case = rows
    assert speaker["category"] == "Electronics"
    assert speaker["units_sold"] == 2
    assert speaker["profit"] == 578.0
    assert speaker["profit_margin"] == pytest.approx(57.92, abs=0.01)
    # The pending order is not a sale
    assert case["units_sold"] == 5
    assert case["category"] == ""


def test_export_transactions_csv(client, admin_headers, transactions):
    response = client.get("/api/admin/accounting/export", params={"range": "all"}, headers=admin_headers)

    assert response.status_code == 200
    assert "transactions-" in response.headers["content-disposition"]
    header, *rows = response.text.strip().splitlines()
    assert header.startswith("id,created_at,order_id,transaction_type,amount")
    # Refunds are exported alongside sales
    assert len(rows) == 2


@pytest.mark.parametrize(
    ("report", "first"),
    [("best-sellers", "p-x"), ("profit-leaders", None)],
)
def test_product_reports(client, admin_headers, sales, product, report, first):
    response = client.get(f"/api/admin/analytics/{report}", params={"range": "all"}, headers=admin_headers)
    assert response.status_code == 200
    rows = response.json()["data"]
    assert rows[0]["product_id"] == (first or product["id"])


def test_report_limit(client, admin_headers, sales):
    response = client.get(
        "/api/admin/analytics/best-sellers", params={"range": "all", "limit": 1}, headers=admin_headers
    )
    assert response.json()["meta"]["total_count"] == 1


def test_trends_report(client, admin_headers, sales):
    rows = client.get(
        "/api/admin/analytics/trends", params={"range": "all"}, headers=admin_headers
    ).json()["data"]
    assert [r["date"] for r in rows] == ["2026-03-01", "2026-03-02"]
    assert rows[0]["revenue"] == 998.0
    assert rows[0]["profit"] == 578.0
    assert rows[1]["orders"] == 1


def test_category_report(client, admin_headers, sales):
    rows = client.get(
        "/api/admin/analytics/categories", params={"range": "all"}, headers=admin_headers
    ).json()["data"]
    assert [r["category"] for r in rows] == ["Electronics", "Uncategorized"]


def test_unknown_report(client, admin_headers):
    response = client.get("/api/admin/analytics/nonsense", headers=admin_headers)
    assert response.status_code == 404
    assert "best-sellers" in response.json()["detail"]
