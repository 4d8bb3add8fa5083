"""Tests for the admin pricing calculator endpoints."""

from __future__ import annotations

import pytest


def test_calculate_requires_admin(client, customer_headers):
    body = {"baseCost": 100, "customDutyRate": 20}
    assert client.post("/api/admin/pricing-calculator/calculate", json=body).status_code == 401
    response = client.post(
        "/api/admin/pricing-calculator/calculate", json=body, headers=customer_headers
    )
    assert response.status_code == 403


def test_calculate_landed_cost(client, admin_headers):
    """POST /calculate accepts the camelCase keys the admin UI sends."""
    body = {
        "baseCost": 100,
        "customDutyRate": 20,
        "importVatRate": 15,
        "salesVatRate": 15,
        "desiredProfitMargin": 30,
    }
    response = client.post(
        "/api/admin/pricing-calculator/calculate", json=body, headers=admin_headers
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["custom_duty"] == 20.0
    assert data["import_vat"] == 18.0
    assert data["total_landed_cost"] == 138.0
    assert data["effective_cost"] == 120.0
    assert data["price_before_sales_vat"] == pytest.approx(171.43, abs=0.01)
    assert data["final_selling_price"] == pytest.approx(197.14, abs=0.01)
    assert data["pricing_method"] == "margin"


def test_calculate_markup(client, admin_headers):
    body = {"base_cost": 100, "custom_duty_rate": 0, "desired_profit_margin": 50, "pricing_method": "markup"}
    response = client.post(
        "/api/admin/pricing-calculator/calculate", json=body, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["price_before_sales_vat"] == 150.0


def test_calculate_rejects_margin_of_hundred(client, admin_headers):
    body = {"baseCost": 100, "customDutyRate": 20, "desiredProfitMargin": 100}
    response = client.post(
        "/api/admin/pricing-calculator/calculate", json=body, headers=admin_headers
    )
    assert response.status_code == 422


def test_calculate_rejects_non_positive_base_cost(client, admin_headers):
    body = {"baseCost": 0, "customDutyRate": 20}
    response = client.post(
        "/api/admin/pricing-calculator/calculate", json=body, headers=admin_headers
    )
    assert response.status_code == 422


def test_duty_rates(client, fake_db, admin_headers):
    fake_db.seed(
        "custom_duty_rates",
        {"category": "Electronics", "duty_rate": 20, "is_active": True},
        {"category": "Clothing", "duty_rate": 45, "is_active": True},
        {"category": "Toys", "duty_rate": 30, "is_active": False},
    )

    response = client.get("/api/admin/pricing-calculator/duty-rates", headers=admin_headers)
    assert response.status_code == 200
    assert [r["category"] for r in response.json()["data"]] == ["Clothing", "Electronics"]

    response = client.get("/api/admin/pricing-calculator/duty-rates/Clothing", headers=admin_headers)
    assert response.json()["data"]["duty_rate"] == 45.0

    response = client.get("/api/admin/pricing-calculator/duty-rates/Toys", headers=admin_headers)
    assert response.json()["data"]["duty_rate"] == 0.0


def test_product_for_calculator(client, fake_db, admin_headers, product):
    fake_db.seed("custom_duty_rates", {"category": "Electronics", "duty_rate": 20, "is_active": True})

    response = client.get(
        f"/api/admin/pricing-calculator/products/{product['id']}", headers=admin_headers
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["product"]["name"] == "Bluetooth Speaker"
    assert data["variant"] is None
    assert data["duty_rate"] == 20.0


def test_product_for_calculator_not_found(client, admin_headers):
    response = client.get("/api/admin/pricing-calculator/products/missing", headers=admin_headers)
    assert response.status_code == 404


def test_save_breakdown_writes_product_costs(client, fake_db, admin_headers, product):
    fake_db.seed("custom_duty_rates", {"category": "Electronics", "duty_rate": 20, "is_active": True})
    body = {
        "productId": product["id"],
        "inputs": {"baseCost": 100, "transportCostPerUnit": 10, "customDutyRate": 20},
    }

    response = client.post("/api/admin/pricing-calculator/save", json=body, headers=admin_headers)

    assert response.status_code == 200
    saved = response.json()["data"]
    assert saved["total_landed_cost"] == pytest.approx(151.8)
    assert saved["calculated_by"] is not None
    stored = fake_db.rows("products")[0]
    assert stored["transport_cost"] == 10.0
    assert stored["custom_duty_rate"] == 20.0
    assert stored["custom_duty_amount"] == 22.0
    assert stored["category_duty_rate"] == 20.0

    # Saving again updates the same breakdown row
    client.post("/api/admin/pricing-calculator/save", json=body, headers=admin_headers)
    assert len(fake_db.rows("product_cost_breakdown")) == 1

    response = client.get(
        "/api/admin/pricing-calculator/breakdown",
        params={"productId": product["id"]},
        headers=admin_headers,
    )
    assert response.json()["data"]["custom_duty_amount"] == 22.0


def test_save_breakdown_for_variant(client, fake_db, admin_headers, variant_product):
    product, variant = variant_product
    body = {
        "productId": product["id"],
        "variantId": variant["id"],
        "inputs": {"baseCost": 50, "customDutyRate": 45},
    }

    response = client.post("/api/admin/pricing-calculator/save", json=body, headers=admin_headers)

    assert response.status_code == 200
    assert fake_db.rows("product_variants")[0]["custom_duty_amount"] == 22.5
    assert "custom_duty_amount" not in fake_db.rows("products")[0]


def test_save_breakdown_unknown_product(client, admin_headers):
    body = {"productId": "missing", "inputs": {"baseCost": 50, "customDutyRate": 0}}
    response = client.post("/api/admin/pricing-calculator/save", json=body, headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"
