"""Tests for delivery ETAs and geocoding."""

from __future__ import annotations

import httpx
import pytest
import respx

from jeffy_shared.config import settings
from jeffy_shared.models import EtaRequest, LatLng

from jeffy_api.services import maps_service

SANDTON = {"lat": -26.1076, "lng": 28.0567}
ROSEBANK = {"lat": -26.1452, "lng": 28.0436}
JHB_CBD = {"lat": -26.2041, "lng": 28.0473}

DIRECTIONS_URL = "https://maps.googleapis.com/maps/api/directions/json"
GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


def _directions(distance_m: int, duration_s: int) -> dict:
    return {
        "status": "OK",
        "routes": [{"legs": [{"distance": {"value": distance_m}, "duration": {"value": duration_s}}]}],
    }


@pytest.fixture()
def maps_key(monkeypatch):
    monkeypatch.setattr(settings, "google_maps_api_key", "test-key")
    monkeypatch.setattr(settings, "google_maps_base_url", "https://maps.googleapis.com/maps/api")


def test_eta_falls_back_to_estimate_without_key(client):
    response = client.post(
        "/api/maps/eta", json={"pickup_location": SANDTON, "delivery_location": ROSEBANK}
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["source"] == "estimate"
    assert data["current_to_pickup"] is None
    # Roughly 4.4 km as the crow flies
    assert 4000 < data["total_distance_meters"] < 5000
    assert data["total_duration"].endswith("mins")
    assert data["estimated_arrival"]


@respx.mock
def test_eta_uses_google_directions(client, maps_key):
    route = respx.get(DIRECTIONS_URL).mock(
        return_value=httpx.Response(200, json=_directions(6200, 780))
    )

    response = client.post(
        "/api/maps/eta", json={"pickup_location": SANDTON, "delivery_location": ROSEBANK}
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["source"] == "google"
    assert data["total_distance_meters"] == 6200
    assert data["total_distance"] == "6.2 km"
    assert data["total_duration"] == "13 mins"
    assert route.calls.last.request.url.params["key"] == "test-key"


@pytest.mark.asyncio
@respx.mock
async def test_eta_with_current_location_sums_legs(maps_key):
    respx.get(DIRECTIONS_URL).mock(return_value=httpx.Response(200, json=_directions(5000, 600)))

    eta = await maps_service.calculate_eta(
        EtaRequest(
            pickup_location=LatLng(**SANDTON),
            delivery_location=LatLng(**ROSEBANK),
            current_location=LatLng(**JHB_CBD),
        )
    )

    assert eta["current_to_pickup"]["distance_meters"] == 5000
    assert eta["total_distance_meters"] == 10000
    assert eta["total_duration_seconds"] == 1200
    assert eta["total_duration"] == "20 mins"


@pytest.mark.asyncio
@respx.mock
async def test_eta_falls_back_when_google_fails(maps_key):
    respx.get(DIRECTIONS_URL).mock(return_value=httpx.Response(500))

    eta = await maps_service.calculate_eta(
        EtaRequest(pickup_location=LatLng(**SANDTON), delivery_location=LatLng(**ROSEBANK))
    )

    assert eta["source"] == "estimate"
    assert eta["total_distance_meters"] > 0


@pytest.mark.asyncio
@respx.mock
async def test_eta_falls_back_on_zero_results(maps_key):
    respx.get(DIRECTIONS_URL).mock(
        return_value=httpx.Response(200, json={"status": "ZERO_RESULTS", "routes": []})
    )

    eta = await maps_service.calculate_eta(
        EtaRequest(pickup_location=LatLng(**SANDTON), delivery_location=LatLng(**ROSEBANK))
    )

    assert eta["source"] == "estimate"


def test_eta_validates_coordinates(client):
    response = client.post(
        "/api/maps/eta",
        json={"pickup_location": {"lat": 120, "lng": 0}, "delivery_location": ROSEBANK},
    )
    assert response.status_code == 422


@respx.mock
def test_geocode(client, maps_key):
    respx.get(GEOCODE_URL).mock(
        return_value=httpx.Response(
            200,
            json={
                "status": "OK",
                "results": [
                    {
                        "formatted_address": "Sandton, Johannesburg, 2196, South Africa",
                        "geometry": {"location": SANDTON},
                        "place_id": "abc123",
                    }
                ],
            },
        )
    )

    response = client.get("/api/maps/geocode", params={"address": "Sandton"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["lat"] == SANDTON["lat"]
    assert data["place_id"] == "abc123"


@respx.mock
def test_geocode_not_found(client, maps_key):
    respx.get(GEOCODE_URL).mock(
        return_value=httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})
    )
    response = client.get("/api/maps/geocode", params={"address": "Nowhere at all"})
    assert response.status_code == 404


@respx.mock
def test_geocode_upstream_error(client, maps_key):
    respx.get(GEOCODE_URL).mock(return_value=httpx.Response(503))
    response = client.get("/api/maps/geocode", params={"address": "Sandton"})
    assert response.status_code == 503
    assert response.json()["error"]["code"] == "UPSTREAM_UNAVAILABLE"


def test_geocode_without_key_is_not_found(client):
    response = client.get("/api/maps/geocode", params={"address": "Sandton"})
    assert response.status_code == 404
