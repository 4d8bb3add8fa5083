"""Referral programme settings and statistics."""

from __future__ import annotations

from fastapi import APIRouter

from jeffy_shared.models import ReferralSettings

from jeffy_api.responses import wrap_response
from jeffy_api.services import referral_service

router = APIRouter(prefix="/referrals", tags=["admin-referrals"])


@router.get("/settings")
async def get_settings():
    return wrap_response(referral_service.get_settings().model_dump())


@router.put("/settings")
async def update_settings(body: ReferralSettings):
    return wrap_response(referral_service.update_settings(body).model_dump())


@router.get("/stats")
async def stats():
    return wrap_response(referral_service.stats())
