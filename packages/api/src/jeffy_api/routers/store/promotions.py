"""Promo codes and referral campaigns."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from jeffy_shared.models import PromoApply, PromoValidate, ReferralSignup, ReferralVerify

from jeffy_api.dependencies import AuthUser, require_customer
from jeffy_api.responses import wrap_response
from jeffy_api.services import promo_service, referral_service

router = APIRouter(tags=["promotions"])


@router.post("/promo-codes/validate")
async def validate_promo(body: PromoValidate):
    promo, result = promo_service.validate(body.code, body.subtotal)
    data = {
        "valid": result.valid,
        "discount": result.discount,
        "message": result.message,
        "promo": None,
    }
    if promo is not None:
        data["promo"] = {
            "code": promo["code"],
            "discount_type": promo.get("discount_type"),
            "discount_value": promo.get("discount_value"),
            "max_discount_value": promo.get("max_discount_value"),
        }
    return wrap_response(data)


@router.post("/promo-codes/apply")
async def apply_promo(body: PromoApply, user: AuthUser = Depends(require_customer)):
    data = promo_service.apply(body.code, body.subtotal, user.user_id, body.order_id)
    return wrap_response(data)


@router.get("/referrals/campaign")
async def get_campaign(user: AuthUser = Depends(require_customer)):
    return wrap_response(referral_service.get_campaign(user.user_id))


@router.post("/referrals/campaign")
async def create_campaign(user: AuthUser = Depends(require_customer)):
    campaign, created = referral_service.create_campaign(user.user_id)
    return wrap_response({"campaign": campaign, "created": created})


@router.post("/referrals/signup")
async def referral_signup(body: ReferralSignup):
    return wrap_response(referral_service.signup(body.referral_code, body.email))


@router.post("/referrals/verify")
async def referral_verify(body: ReferralVerify):
    return wrap_response(referral_service.verify(body.token))
