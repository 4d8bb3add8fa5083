"""Liveness and readiness checks; never rate limited."""

from __future__ import annotations

from fastapi import APIRouter

from jeffy_shared import __version__
from jeffy_shared.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {
        "status": "ok",
        "version": __version__,
        "environment": settings.environment,
        "maps_enabled": settings.maps_enabled,
    }


@router.get("/ready")
async def ready() -> dict:
    return {"status": "ready"}
