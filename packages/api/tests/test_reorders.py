"""Tests for low stock, reorder requests, drivers, deliveries and distributors."""

from __future__ import annotations

from supabase_fakes import ADMIN_ID, CUSTOMER_ID, api_error


def test_low_stock_from_database_function(client, fake_db, admin_headers):
    fake_db.rpc_results["check_low_stock"] = [
        {"product_id": "p-1", "variant_id": None, "name": "Kettle", "current_stock": 1, "reorder_point": 5}
    ]
    data = client.get("/api/admin/reorders/low-stock", headers=admin_headers).json()["data"]
    assert [r["name"] for r in data] == ["Kettle"]


def test_low_stock_fallback(client, fake_db, admin_headers, product, variant_product):
    fake_db.rpc_results["check_low_stock"] = api_error("function check_low_stock() does not exist", "42883")
    fake_db.seed(
        "products",
        {"name": "Full Shelf", "stock": 100, "reorder_point": 5, "is_active": True},
        {"name": "Empty Shelf", "stock": 0, "is_active": True},
    )

    response = client.get("/api/admin/reorders/low-stock", headers=admin_headers)

    assert response.status_code == 200
    rows = response.json()["data"]
    names = [r["name"] for r in rows]
    # Lowest stock first; products with variants are reported per variant
    assert names[0] == "Empty Shelf"
    assert "Full Shelf" not in names
    assert "Cotton T-Shirt" not in names
    variant_row = next(r for r in rows if r["variant_id"] is not None)
    assert variant_row["current_stock"] == 3
    assert variant_row["suggested_quantity"] == 50
    empty = rows[0]
    # No reorder point set falls back to the default of 10
    assert empty["reorder_point"] == 10


def test_reorder_requests(client, fake_db, admin_headers, product):
    response = client.post(
        "/api/admin/reorders",
        json={"product_id": product["id"], "quantity": 30, "supplier": "Durban Wholesale"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    row = response.json()["data"]
    assert row["status"] == "pending"
    assert row["requested_by"] == ADMIN_ID

    fake_db.seed("reorder_requests", {"product_id": product["id"], "quantity": 5, "status": "ordered"})
    data = client.get("/api/admin/reorders", params={"status": "pending"}, headers=admin_headers).json()
    assert data["meta"]["total_count"] == 1
    data = client.get("/api/admin/reorders", headers=admin_headers).json()
    assert data["meta"]["total_count"] == 2


def test_reorder_quantity_must_be_positive(client, admin_headers, product):
    response = client.post(
        "/api/admin/reorders", json={"product_id": product["id"], "quantity": 0}, headers=admin_headers
    )
    assert response.status_code == 422


# ---------------------------------------------------------------------------
# Drivers and deliveries
# ---------------------------------------------------------------------------


def test_driver_crud(client, fake_db, admin_headers):
    response = client.post(
        "/api/admin/drivers",
        json={"name": "Lindiwe", "phone": "+27 83 111 2222", "vehicle_type": "scooter"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    driver = response.json()["data"]
    assert driver["status"] == "active"

    response = client.put(
        f"/api/admin/drivers/{driver['id']}", json={"status": "offline"}, headers=admin_headers
    )
    assert response.json()["data"]["status"] == "offline"

    # Offline drivers are hidden from the assignment board by default
    assert client.get("/api/admin/drivers", headers=admin_headers).json()["data"] == []
    data = client.get(
        "/api/admin/drivers", params={"include_inactive": "true"}, headers=admin_headers
    ).json()["data"]
    assert len(data) == 1

    assert client.delete(f"/api/admin/drivers/{driver['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/admin/drivers/{driver['id']}", headers=admin_headers).status_code == 404


def test_driver_location(client, fake_db, admin_headers, driver):
    response = client.put(
        f"/api/admin/drivers/{driver['id']}/location",
        json={"lat": -26.1, "lng": 28.05, "heading": 90, "speed_kmh": 35},
        headers=admin_headers,
    )
    assert response.status_code == 200
    stored = fake_db.rows("drivers")[0]
    assert stored["current_lat"] == -26.1
    assert stored["speed_kmh"] == 35
    assert stored["location_updated_at"]

    response = client.put(
        f"/api/admin/drivers/{driver['id']}/location", json={"lat": -100, "lng": 28}, headers=admin_headers
    )
    assert response.status_code == 422


def test_delivered_completes_order(client, fake_db, admin_headers, driver):
    [order] = fake_db.seed(
        "orders", {"user_id": CUSTOMER_ID, "status": "out_for_delivery", "total": 10}
    )
    fake_db.rows("drivers")[0]["status"] = "busy"
    [assignment] = fake_db.seed(
        "delivery_assignments",
        {"order_id": order["id"], "driver_id": driver["id"], "status": "in_transit"},
    )

    response = client.put(
        f"/api/admin/deliveries/{assignment['id']}/status",
        json={"status": "delivered", "proof_of_delivery_url": "https://cdn.example.com/pod.jpg"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    stored = fake_db.rows("delivery_assignments")[0]
    assert stored["delivered_at"]
    assert stored["proof_of_delivery_url"].endswith("pod.jpg")
    assert fake_db.rows("orders")[0]["status"] == "delivered"
    assert fake_db.rows("drivers")[0]["status"] == "active"
    [note] = fake_db.rows("order_notifications")
    assert note["type"] == "delivered"


def test_picked_up_leaves_order_alone(client, fake_db, admin_headers, driver):
    [order] = fake_db.seed("orders", {"status": "out_for_delivery", "total": 10})
    [assignment] = fake_db.seed(
        "delivery_assignments", {"order_id": order["id"], "driver_id": driver["id"], "status": "assigned"}
    )

    client.put(
        f"/api/admin/deliveries/{assignment['id']}/status", json={"status": "picked_up"}, headers=admin_headers
    )

    assert fake_db.rows("delivery_assignments")[0]["picked_up_at"]
    assert fake_db.rows("orders")[0]["status"] == "out_for_delivery"


def test_delivery_status_unknown_assignment(client, admin_headers):
    response = client.put(
        "/api/admin/deliveries/missing/status", json={"status": "failed"}, headers=admin_headers
    )
    assert response.status_code == 404


def test_list_deliveries_by_driver(client, fake_db, admin_headers, driver):
    fake_db.seed(
        "delivery_assignments",
        {"order_id": "o-1", "driver_id": driver["id"], "status": "assigned", "assigned_at": "2026-03-01T10:00:00+00:00"},
        {"order_id": "o-2", "driver_id": "other", "status": "assigned", "assigned_at": "2026-03-01T11:00:00+00:00"},
    )
    data = client.get(
        "/api/admin/deliveries", params={"driver_id": driver["id"]}, headers=admin_headers
    ).json()["data"]
    assert [d["order_id"] for d in data] == ["o-1"]


# ---------------------------------------------------------------------------
# Distributors
# ---------------------------------------------------------------------------


def test_distributor_crud(client, fake_db, admin_headers):
    response = client.post(
        "/api/admin/distributors",
        json={"name": "Bongani", "email": "Bongani@Example.com", "commission_rate": 12.5},
        headers=admin_headers,
    )
    assert response.status_code == 201
    distributor = response.json()["data"]
    assert distributor["email"] == "bongani@example.com"
    assert distributor["status"] == "active"
    assert distributor["contract_signed"] is False

    response = client.put(
        f"/api/admin/distributors/{distributor['id']}",
        json={"contract_signed": True, "id": "hijack"},
        headers=admin_headers,
    )
    assert response.json()["data"]["contract_signed"] is True
    assert fake_db.rows("distributors")[0]["id"] == distributor["id"]

    assert client.delete(f"/api/admin/distributors/{distributor['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/admin/distributors/{distributor['id']}", headers=admin_headers).status_code == 404


def test_distributor_commission_bounds(client, admin_headers):
    response = client.post(
        "/api/admin/distributors",
        json={"name": "Bongani", "email": "bongani@example.com", "commission_rate": 150},
        headers=admin_headers,
    )
    assert response.status_code == 422
