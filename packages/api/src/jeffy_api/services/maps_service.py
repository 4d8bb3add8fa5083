"""
Google Maps client for delivery ETAs and geocoding.

Directions and Geocoding are called over httpx with tenacity retries on
transport errors. When no API key is configured, or Google fails, ETAs
fall back to a straight-line estimate at average urban speed so the
tracking page always has something to show.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import httpx
import structlog

from jeffy_shared.config import settings
from jeffy_shared.geo import estimate_travel_minutes, format_distance, format_duration, haversine_km
from jeffy_shared.models import EtaRequest, LatLng
from jeffy_shared.retry import with_retry
from jeffy_shared.time_utils import utc_now

from jeffy_api.errors import UpstreamUnavailable

logger = structlog.get_logger(__name__)

REQUEST_TIMEOUT = 10.0


class MapsError(Exception):
    """Google answered, but not with a usable result."""


def _fmt(point: LatLng) -> str:
    return f"{point.lat},{point.lng}"


def _leg(distance_m: float, duration_s: float) -> dict[str, Any]:
    return {
        "distance_meters": int(distance_m),
        "duration_seconds": int(duration_s),
        "distance_text": format_distance(distance_m),
        "duration_text": format_duration(duration_s),
    }


@with_retry(max_attempts=3, base_delay=0.5, retry_on=httpx.TransportError)
async def _get_json(path: str, params: dict[str, Any]) -> dict[str, Any]:
    async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
        response = await client.get(
            f"{settings.google_maps_base_url}/{path}",
            params={**params, "key": settings.google_maps_api_key},
        )
        response.raise_for_status()
        return response.json()


async def directions_leg(origin: LatLng, destination: LatLng) -> dict[str, Any]:
    data = await _get_json(
        "directions/json",
        {"origin": _fmt(origin), "destination": _fmt(destination), "mode": "driving"},
    )
    if data.get("status") != "OK" or not data.get("routes"):
        raise MapsError(f"Directions status {data.get('status')}")
    legs = data["routes"][0]["legs"]
    return _leg(
        sum(leg["distance"]["value"] for leg in legs),
        sum(leg["duration"]["value"] for leg in legs),
    )


def estimate_leg(origin: LatLng, destination: LatLng) -> dict[str, Any]:
    km = haversine_km(origin.lat, origin.lng, destination.lat, destination.lng)
    return _leg(km * 1000, estimate_travel_minutes(km) * 60)


async def _route_leg(origin: LatLng, destination: LatLng) -> tuple[dict[str, Any], bool]:
    """Return (leg, from_google)."""
    if not settings.maps_enabled:
        return estimate_leg(origin, destination), False
    try:
        return await directions_leg(origin, destination), True
    except (httpx.HTTPError, MapsError, KeyError) as exc:
        logger.warning("maps_request_failed", error=str(exc), fallback="haversine")
        return estimate_leg(origin, destination), False


async def calculate_eta(request: EtaRequest) -> dict[str, Any]:
    """
    Distance and time for a delivery.

    With a current driver position the route is current -> pickup ->
    delivery; otherwise it is pickup -> delivery only.
    """
    pickup_to_delivery, google = await _route_leg(request.pickup_location, request.delivery_location)
    legs = [pickup_to_delivery]
    current_to_pickup = None
    if request.current_location is not None:
        current_to_pickup, google_current = await _route_leg(
            request.current_location, request.pickup_location
        )
        google = google and google_current
        legs.insert(0, current_to_pickup)

    total_m = sum(leg["distance_meters"] for leg in legs)
    total_s = sum(leg["duration_seconds"] for leg in legs)
    return {
        "pickup_to_delivery": pickup_to_delivery,
        "current_to_pickup": current_to_pickup,
        "total_distance": _leg(total_m, total_s)["distance_text"],
        "total_distance_meters": total_m,
        "total_duration": format_duration(total_s),
        "total_duration_seconds": total_s,
        "estimated_arrival": (utc_now() + timedelta(seconds=total_s)).isoformat(),
        "source": "google" if google else "estimate",
    }


async def geocode(address: str) -> dict[str, Any] | None:
    """First geocoding match for a free-text address, or None."""
    if not settings.maps_enabled:
        logger.warning("maps_disabled", operation="geocode")
        return None
    try:
        data = await _get_json("geocode/json", {"address": address, "region": "za"})
    except httpx.HTTPError as exc:
        raise UpstreamUnavailable("Geocoding service unavailable") from exc
    if data.get("status") != "OK" or not data.get("results"):
        logger.info("geocode_no_results", address=address, status=data.get("status"))
        return None
    first = data["results"][0]
    location = first["geometry"]["location"]
    return {
        "formatted_address": first.get("formatted_address"),
        "lat": location["lat"],
        "lng": location["lng"],
        "place_id": first.get("place_id"),
    }
