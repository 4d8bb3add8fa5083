"""Tests for checkout, order reads and staff order management."""

from __future__ import annotations

import pytest

from supabase_fakes import CUSTOMER_ID, api_error


def _order_body(product, quantity=2, **extra):
    body = {
        "user_email": "Thandi@Example.com",
        "items": [
            {
                "product_id": product["id"],
                "product_name": product["name"],
                "quantity": quantity,
                "price": product["price"],
                "cost": product.get("cost_price") or 0,
            }
        ],
    }
    body.update(extra)
    return body


def test_create_order_requires_auth(client, product):
    response = client.post("/api/orders", json=_order_body(product))
    assert response.status_code == 401


def test_create_order(client, fake_db, customer_headers, product):
    response = client.post("/api/orders", json=_order_body(product), headers=customer_headers)

    assert response.status_code == 201
    order = response.json()["data"]
    assert order["status"] == "pending"
    assert order["user_id"] == CUSTOMER_ID
    assert order["user_email"] == "thandi@example.com"
    assert order["total"] == 998.0

    # Stock decremented with a history row
    assert fake_db.rows("products")[0]["stock"] == 10
    history = fake_db.rows("stock_history")
    assert len(history) == 1
    assert history[0]["change_type"] == "sale"
    assert history[0]["quantity_change"] == -2
    assert history[0]["previous_stock"] == 12
    assert history[0]["new_stock"] == 10

    # VAT at 15% charged on top of the total
    [txn] = fake_db.rows("financial_transactions")
    assert txn["transaction_type"] == "sale"
    assert txn["currency"] == "ZAR"
    assert txn["amount"] == 998.0
    assert txn["tax_amount"] == pytest.approx(149.7)
    assert txn["cost_amount"] == 420.0
    assert txn["import_vat_amount"] == 63.0

    [note] = fake_db.rows("order_notifications")
    assert note["user_id"] == CUSTOMER_ID
    assert note["type"] == "status_update"


def test_create_order_insufficient_stock(client, fake_db, customer_headers, product):
    response = client.post(
        "/api/orders", json=_order_body(product, quantity=50), headers=customer_headers
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "INSUFFICIENT_STOCK"
    assert error["details"]["available"] == 12
    assert error["details"]["requested"] == 50
    assert fake_db.rows("orders") == []
    assert fake_db.rows("products")[0]["stock"] == 12


def test_create_order_sums_lines_for_same_product(client, fake_db, customer_headers, product):
    body = _order_body(product, quantity=8)
    body["items"].append(dict(body["items"][0]))

    response = client.post("/api/orders", json=body, headers=customer_headers)

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "INSUFFICIENT_STOCK"
    assert error["details"]["available"] == 12
    assert error["details"]["requested"] == 16
    assert fake_db.rows("orders") == []
    assert fake_db.rows("products")[0]["stock"] == 12


def test_create_order_chains_stock_history(client, fake_db, customer_headers, product):
    body = _order_body(product, quantity=5)
    body["items"].append({**body["items"][0], "quantity": 4})

    response = client.post("/api/orders", json=body, headers=customer_headers)

    assert response.status_code == 201
    assert fake_db.rows("products")[0]["stock"] == 3
    history = fake_db.rows("stock_history")
    assert [(h["previous_stock"], h["new_stock"]) for h in history] == [(12, 7), (7, 3)]


def test_create_order_requires_variant_choice(client, customer_headers, variant_product):
    product, _ = variant_product
    response = client.post(
        "/api/orders", json=_order_body(product, quantity=1), headers=customer_headers
    )
    assert response.status_code == 400
    assert "select an option" in response.json()["error"]["message"]


def test_create_order_with_variant(client, fake_db, customer_headers, variant_product):
    product, variant = variant_product
    body = _order_body(product, quantity=2)
    body["items"][0]["variant_id"] = variant["id"]

    response = client.post("/api/orders", json=body, headers=customer_headers)

    assert response.status_code == 201
    assert fake_db.rows("product_variants")[0]["stock"] == 1
    assert fake_db.rows("products")[0]["stock"] == 0


def test_create_order_rejects_empty_items(client, customer_headers):
    response = client.post(
        "/api/orders",
        json={"user_email": "thandi@example.com", "items": []},
        headers=customer_headers,
    )
    assert response.status_code == 422


def test_create_order_survives_bookkeeping_failure(client, fake_db, customer_headers, product):
    fake_db.failures[("financial_transactions", "insert")] = api_error("insert failed")

    response = client.post("/api/orders", json=_order_body(product), headers=customer_headers)

    assert response.status_code == 201
    assert len(fake_db.rows("orders")) == 1


def test_create_order_survives_notification_failure(client, fake_db, customer_headers, product):
    fake_db.failures[("order_notifications", "insert")] = api_error("insert failed")

    response = client.post("/api/orders", json=_order_body(product), headers=customer_headers)

    assert response.status_code == 201
    assert fake_db.rows("products")[0]["stock"] == 10
    assert len(fake_db.rows("financial_transactions")) == 1


def test_status_change_survives_notification_failure(client, fake_db, admin_headers):
    [order] = fake_db.seed("orders", {"user_id": CUSTOMER_ID, "status": "pending", "total": 10})
    fake_db.failures[("order_notifications", "insert")] = api_error("insert failed")

    response = client.put(
        f"/api/admin/orders/{order['id']}/status", json={"status": "confirmed"}, headers=admin_headers
    )

    assert response.status_code == 200
    assert fake_db.rows("orders")[0]["status"] == "confirmed"


def test_customer_sees_only_own_orders(client, fake_db, customer_headers):
    mine, theirs = fake_db.seed(
        "orders",
        {"user_id": CUSTOMER_ID, "user_email": "thandi@example.com", "status": "pending", "total": 10},
        {"user_id": "someone-else", "user_email": "x@example.com", "status": "pending", "total": 20},
    )

    response = client.get("/api/orders", headers=customer_headers)
    assert [o["id"] for o in response.json()["data"]] == [mine["id"]]

    assert client.get(f"/api/orders/{mine['id']}", headers=customer_headers).status_code == 200
    assert client.get(f"/api/orders/{theirs['id']}", headers=customer_headers).status_code == 404


def test_admin_can_read_any_order(client, fake_db, admin_headers):
    [order] = fake_db.seed("orders", {"user_id": CUSTOMER_ID, "status": "pending", "total": 10})
    response = client.get(f"/api/orders/{order['id']}", headers=admin_headers)
    assert response.status_code == 200


def test_admin_list_orders_filters(client, fake_db, admin_headers):
    fake_db.seed(
        "orders",
        {"user_email": "a@example.com", "status": "pending", "total": 10},
        {"user_email": "b@example.com", "status": "delivered", "total": 20},
        {"user_email": "c@example.com", "status": "pending", "total": 30},
    )

    response = client.get("/api/admin/orders", params={"status": "pending"}, headers=admin_headers)
    body = response.json()
    assert response.status_code == 200
    assert body["meta"]["total_count"] == 2

    response = client.get("/api/admin/orders", params={"search": "b@ex"}, headers=admin_headers)
    assert [o["user_email"] for o in response.json()["data"]] == ["b@example.com"]


def test_admin_search_by_order_id(client, fake_db, admin_headers):
    first, _ = fake_db.seed(
        "orders",
        {"user_email": "a@example.com", "status": "pending", "total": 10},
        {"user_email": "b@example.com", "status": "pending", "total": 20},
    )

    response = client.get("/api/admin/orders", params={"search": first["id"]}, headers=admin_headers)
    assert [o["id"] for o in response.json()["data"]] == [first["id"]]

    # A partial id is treated as an email fragment
    response = client.get("/api/admin/orders", params={"search": first["id"][:8]}, headers=admin_headers)
    assert response.json()["data"] == []


def test_update_status_ready_for_delivery(client, fake_db, admin_headers):
    [order] = fake_db.seed("orders", {"user_id": CUSTOMER_ID, "status": "processing", "total": 10})

    response = client.put(
        f"/api/admin/orders/{order['id']}/status",
        json={"status": "ready_for_delivery", "notes": "Packed"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    stored = fake_db.rows("orders")[0]
    assert stored["status"] == "ready_for_delivery"
    assert stored["ready_for_delivery"] is True
    assert stored["ready_for_delivery_at"]
    assert stored["admin_notes"] == "Packed"
    assert fake_db.rows("order_notifications")[0]["message"].startswith("Your order is packed")


def test_update_status_unknown_order(client, admin_headers):
    response = client.put(
        "/api/admin/orders/missing/status", json={"status": "confirmed"}, headers=admin_headers
    )
    assert response.status_code == 404


def test_bulk_status(client, fake_db, admin_headers):
    orders = fake_db.seed(
        "orders",
        {"status": "pending", "total": 10},
        {"status": "pending", "total": 20},
        {"status": "pending", "total": 30},
    )
    ids = [o["id"] for o in orders[:2]]

    response = client.put(
        "/api/admin/orders/bulk-status",
        json={"order_ids": ids, "status": "confirmed"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["meta"]["total_count"] == 2
    assert [o["status"] for o in fake_db.rows("orders")] == ["confirmed", "confirmed", "pending"]


def test_assign_driver(client, fake_db, admin_headers, driver):
    [order] = fake_db.seed("orders", {"user_id": CUSTOMER_ID, "status": "ready_for_delivery", "total": 10})

    response = client.post(
        f"/api/admin/orders/{order['id']}/assign-driver",
        json={"driver_id": driver["id"]},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["order"]["status"] == "out_for_delivery"
    assert data["order"]["assigned_driver_id"] == driver["id"]
    assert data["assignment"]["status"] == "assigned"
    assert fake_db.rows("drivers")[0]["status"] == "busy"
    [note] = fake_db.rows("order_notifications")
    assert note["type"] == "driver_assigned"
    assert note["message"] == "Driver Sipho has been assigned to your order!"


def test_assign_unknown_driver(client, fake_db, admin_headers):
    [order] = fake_db.seed("orders", {"status": "ready_for_delivery", "total": 10})
    response = client.post(
        f"/api/admin/orders/{order['id']}/assign-driver",
        json={"driver_id": "missing"},
        headers=admin_headers,
    )
    assert response.status_code == 404


def test_shipping_label_pdf(client, fake_db, admin_headers):
    [order] = fake_db.seed(
        "orders",
        {
            "user_email": "thandi@example.com",
            "status": "ready_for_delivery",
            "total": 10,
            "shipping_address": {"street_address": "12 Main Rd", "city": "Johannesburg", "postal_code": "2001"},
            "items": [{"product_name": "Speaker", "quantity": 1, "price": 10}],
        },
    )
    response = client.get(f"/api/admin/orders/{order['id']}/label", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_export_orders_csv(client, fake_db, admin_headers):
    fake_db.seed("orders", {"user_email": "a@example.com", "status": "pending", "total": 10, "items": []})
    response = client.get("/api/admin/orders/export", params={"range": "all"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    header, *rows = response.text.strip().splitlines()
    assert header.startswith("id,created_at,user_email,status")
    assert len(rows) == 1


def test_order_tracking(client, fake_db, customer_headers, driver):
    [order] = fake_db.seed(
        "orders",
        {
            "user_id": CUSTOMER_ID,
            "status": "out_for_delivery",
            "total": 10,
            "assigned_driver_id": driver["id"],
            "delivery_location": {"lat": -26.1076, "lng": 28.0567},
        },
    )
    fake_db.seed("delivery_assignments", {"order_id": order["id"], "driver_id": driver["id"], "status": "assigned"})

    response = client.get(f"/api/orders/{order['id']}/tracking", headers=customer_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["order"]["id"] == order["id"]
    assert data["assignment"]["status"] == "assigned"
    assert data["driver"]["name"] == "Sipho"

