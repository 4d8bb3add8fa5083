"""Shared test fixtures for jeffy-api."""

from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from jeffy_shared import db
from jeffy_shared.config import settings

from supabase_fakes import ADMIN_ID, CUSTOMER_ID, FakeSupabase, bearer


@pytest.fixture(autouse=True)
def _clear_caches():
    """Clear all in-memory caches between tests."""
    from jeffy_api.utils.cache import ALL_CACHES

    yield
    for cache in ALL_CACHES:
        cache.clear()


@pytest.fixture()
def fake_db(monkeypatch):
    """Install an in-memory Supabase client as the per-process singleton."""
    fake = FakeSupabase(
        {
            "user_profiles": [
                {"id": ADMIN_ID, "role": "admin", "email": "admin@jeffy.co.za", "full_name": "Admin"},
                {"id": CUSTOMER_ID, "role": "customer", "email": "thandi@example.com", "full_name": "Thandi"},
            ]
        }
    )
    monkeypatch.setitem(db._clients, "service_role", fake)
    monkeypatch.setitem(db._clients, "anon", fake)
    monkeypatch.setattr(settings, "google_maps_api_key", "")
    return fake


@pytest.fixture()
def app(fake_db):
    """Create test FastAPI app backed by the fake Supabase client."""
    from jeffy_api.app import create_app

    return create_app()


@pytest.fixture()
def client(app):
    """HTTP test client."""
    return TestClient(app)


@pytest.fixture()
def admin_headers():
    return bearer(ADMIN_ID)


@pytest.fixture()
def customer_headers():
    return bearer(CUSTOMER_ID)


@pytest.fixture()
def product(fake_db):
    return fake_db.seed(
        "products",
        {
            "name": "Bluetooth Speaker",
            "description": "Portable speaker with deep bass",
            "category": "Electronics",
            "price": 499.0,
            "cost_price": 210.0,
            "stock": 12,
            "has_variants": False,
            "is_active": True,
            "reorder_point": 5,
        },
    )[0]


@pytest.fixture()
def variant_product(fake_db):
    product = fake_db.seed(
        "products",
        {
            "name": "Cotton T-Shirt",
            "description": "Plain tee",
            "category": "Clothing",
            "price": 149.0,
            "stock": 0,
            "has_variants": True,
            "is_active": True,
        },
    )[0]
    variant = fake_db.seed(
        "product_variants",
        {
            "product_id": product["id"],
            "name": "Large / Black",
            "price": 149.0,
            "cost_price": 60.0,
            "stock": 3,
            "attributes": {"size": "L", "color": "Black"},
        },
    )[0]
    return product, variant


@pytest.fixture()
def driver(fake_db):
    return fake_db.seed(
        "drivers",
        {
            "id": str(uuid4()),
            "name": "Sipho",
            "phone": "+27 82 000 0000",
            "status": "active",
            "current_lat": -26.2041,
            "current_lng": 28.0473,
        },
    )[0]
