"""
geo.py — Straight-line distance and travel-time estimates.

Used when Google Maps is not configured or fails, so order tracking
still shows a rough ETA for the driver.

Usage:
    from jeffy_shared.geo import haversine_km, estimate_travel_minutes

    km = haversine_km(-26.2041, 28.0473, -25.7479, 28.2293)   # JHB -> PTA, ~53.5
    mins = estimate_travel_minutes(km)
"""

from __future__ import annotations

import math

from jeffy_shared.constants import FALLBACK_SPEED_KMH

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def estimate_travel_minutes(distance_km: float, speed_kmh: float = FALLBACK_SPEED_KMH) -> int:
    if distance_km <= 0 or speed_kmh <= 0:
        return 0
    return max(1, math.ceil(distance_km / speed_kmh * 60))


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{int(round(meters))} m"
    return f"{meters / 1000:.1f} km"


def format_duration(seconds: float) -> str:
    minutes = int(round(seconds / 60))
    if minutes < 60:
        return f"{minutes} mins"
    hours, minutes = divmod(minutes, 60)
    return f"{hours} hr {minutes} mins" if minutes else f"{hours} hr"
