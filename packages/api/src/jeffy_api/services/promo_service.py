"""Promo code validation and redemption."""

from __future__ import annotations

from typing import Any

import structlog

from jeffy_shared.db import get_supabase_client
from jeffy_shared.promotions import DiscountResult, calculate_discount
from jeffy_shared.time_utils import utc_now

from jeffy_api.errors import ValidationFailed

logger = structlog.get_logger(__name__)


def get_promo(code: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("promo_codes").select("*").eq("code", code.upper()).limit(1).execute()
    return result.data[0] if result.data else None


def validate(code: str, subtotal: float) -> tuple[dict[str, Any] | None, DiscountResult]:
    promo = get_promo(code)
    if promo is None:
        return None, DiscountResult(False, message="Invalid promo code")
    return promo, calculate_discount(promo, subtotal, utc_now())


def apply(code: str, subtotal: float, user_id: str, order_id: str | None = None) -> dict[str, Any]:
    """
    Redeem a code for the caller.

    Codes issued to a specific user (referral rewards) can only be
    redeemed by that user. A code that reaches max_uses is deactivated.
    """
    promo, result = validate(code, subtotal)
    if promo is None:
        raise ValidationFailed("Invalid promo code")
    if promo.get("user_id") and str(promo["user_id"]) != user_id:
        raise ValidationFailed("This promo code is not valid for your account")
    if not result.valid:
        raise ValidationFailed(result.message)

    times_used = int(promo.get("times_used") or 0) + 1
    max_uses = promo.get("max_uses")
    still_active = max_uses is None or times_used < int(max_uses)

    supabase = get_supabase_client(service_role=True)
    supabase.table("promo_codes").update(
        {"times_used": times_used, "is_active": still_active}
    ).eq("id", promo["id"]).execute()

    now = utc_now().isoformat()
    if promo.get("referral_id"):
        supabase.table("referrals").update({"discount_used": True}).eq(
            "id", promo["referral_id"]
        ).execute()
    if promo.get("discount_type") == "free_product" and promo.get("user_id"):
        supabase.table("user_profiles").update(
            {"has_claimed_free_product": True, "free_product_claimed_at": now}
        ).eq("id", promo["user_id"]).execute()
        if promo.get("campaign_id"):
            supabase.table("referral_campaigns").update({"reward_claimed": True}).eq(
                "id", promo["campaign_id"]
            ).execute()
    if order_id:
        supabase.table("orders").update(
            {"promo_code": promo["code"], "discount": result.discount, "updated_at": now}
        ).eq("id", order_id).eq("user_id", user_id).execute()

    logger.info(
        "promo_applied",
        code=promo["code"],
        user_id=user_id,
        order_id=order_id,
        discount=result.discount,
        deactivated=not still_active,
    )
    return {
        "code": promo["code"],
        "discount": result.discount,
        "message": result.message,
        "times_used": times_used,
        "is_active": still_active,
    }
