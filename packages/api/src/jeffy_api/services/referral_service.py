"""
Referral campaigns.

A customer opens a campaign and shares a JEFFY- code. Each friend who
signs up with the code gets a verification token; verifying it issues
the friend a single-use WELCOME- discount and counts towards the
campaign. When the campaign reaches the required number of verified
referrals the referrer receives a FREE- code for one free product.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import structlog

from jeffy_shared.config import settings
from jeffy_shared.constants import (
    CODE_GENERATION_ATTEMPTS,
    FREE_PRODUCT_CODE_PREFIX,
    REFERRAL_CODE_PREFIX,
    VERIFICATION_TOKEN_TTL_HOURS,
    WELCOME_CODE_PREFIX,
    WELCOME_PROMO_VALID_DAYS,
)
from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import ReferralSettings
from jeffy_shared.promotions import (
    format_time_remaining,
    generate_code,
    generate_share_urls,
    generate_verification_token,
)
from jeffy_shared.time_utils import parse_iso_datetime, utc_now

from jeffy_api.errors import Conflict, ValidationFailed
from jeffy_api.utils.cache import settings_cache

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def _load_settings() -> ReferralSettings:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("referral_settings").select("*").eq("is_active", True).limit(1).execute()
    return ReferralSettings.from_db_row(result.data[0] if result.data else None)


def get_settings() -> ReferralSettings:
    return settings_cache.get_or_load("referral_settings", _load_settings)


def update_settings(new: ReferralSettings) -> ReferralSettings:
    supabase = get_supabase_client(service_role=True)
    row = {**new.to_update_dict(), "updated_at": utc_now().isoformat()}
    existing = supabase.table("referral_settings").select("id").eq("is_active", True).limit(1).execute()
    if existing.data:
        supabase.table("referral_settings").update(row).eq("id", existing.data[0]["id"]).execute()
    else:
        supabase.table("referral_settings").insert({**row, "is_active": True}).execute()
    settings_cache.delete("referral_settings")
    logger.info("referral_settings_updated", **new.to_update_dict())
    return new


# ---------------------------------------------------------------------------
# Campaigns
# ---------------------------------------------------------------------------


def _campaign_for_user(user_id: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("referral_campaigns").select("*").eq("user_id", user_id).limit(1).execute()
    return result.data[0] if result.data else None


def _campaign_by_code(code: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("referral_campaigns").select("*").eq("referral_code", code).limit(1).execute()
    )
    return result.data[0] if result.data else None


def _unique_code(prefix: str, table: str, column: str) -> str:
    supabase = get_supabase_client(service_role=True)
    code = generate_code(prefix)
    for _ in range(CODE_GENERATION_ATTEMPTS):
        taken = supabase.table(table).select("id").eq(column, code).limit(1).execute()
        if not taken.data:
            return code
        code = generate_code(prefix)
    raise Conflict("Could not generate a unique code, please try again")


def campaign_summary(campaign: dict[str, Any]) -> dict[str, Any]:
    """Campaign row plus progress, countdown and share links."""
    cfg = get_settings()
    now = utc_now()
    count = int(campaign.get("referral_count") or 0)
    expires_at = parse_iso_datetime(campaign.get("expires_at"))
    return {
        **campaign,
        "referrals_required": cfg.referrals_required,
        "referrals_remaining": max(0, cfg.referrals_required - count),
        "progress_percent": min(100.0, round(count / cfg.referrals_required * 100, 1)),
        "is_expired": expires_at is not None and expires_at < now,
        "time_remaining": format_time_remaining(expires_at, now),
        "share_urls": generate_share_urls(campaign["referral_code"], settings.site_url),
    }


def get_campaign(user_id: str) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    campaign = _campaign_for_user(user_id)
    profile = (
        supabase.table("user_profiles")
        .select("has_claimed_free_product")
        .eq("id", user_id)
        .limit(1)
        .execute()
        .data
    )
    referrals: list[dict[str, Any]] = []
    if campaign:
        referrals = (
            supabase.table("referrals")
            .select("id, email, email_verified, created_at, verified_at")
            .eq("campaign_id", campaign["id"])
            .order("created_at", desc=True)
            .execute()
            .data
        )
    return {
        "settings": get_settings().model_dump(),
        "campaign": campaign_summary(campaign) if campaign else None,
        "referrals": referrals,
        "has_claimed_free_product": bool(profile and profile[0].get("has_claimed_free_product")),
    }


def create_campaign(user_id: str) -> tuple[dict[str, Any], bool]:
    """Return (campaign, created); an existing campaign is returned as is."""
    existing = _campaign_for_user(user_id)
    if existing:
        return campaign_summary(existing), False

    supabase = get_supabase_client(service_role=True)
    profile = (
        supabase.table("user_profiles")
        .select("has_claimed_free_product")
        .eq("id", user_id)
        .limit(1)
        .execute()
        .data
    )
    if profile and profile[0].get("has_claimed_free_product"):
        raise ValidationFailed("You have already claimed your free product")

    cfg = get_settings()
    campaign = (
        supabase.table("referral_campaigns")
        .insert(
            {
                "user_id": user_id,
                "referral_code": _unique_code(REFERRAL_CODE_PREFIX, "referral_campaigns", "referral_code"),
                "referral_count": 0,
                "is_completed": False,
                "expires_at": (utc_now() + timedelta(days=cfg.campaign_expiry_days)).isoformat(),
            }
        )
        .execute()
        .data[0]
    )
    logger.info("referral_campaign_created", user_id=user_id, code=campaign["referral_code"])
    return campaign_summary(campaign), True


# ---------------------------------------------------------------------------
# Sign-up and verification
# ---------------------------------------------------------------------------


def signup(referral_code: str, email: str) -> dict[str, Any]:
    """Register a referred email and issue a verification token."""
    supabase = get_supabase_client(service_role=True)
    existing = (
        supabase.table("referrals").select("id, email_verified").eq("email", email).limit(1).execute().data
    )
    if existing and existing[0].get("email_verified"):
        raise ValidationFailed("This email has already been used")

    campaign = _campaign_by_code(referral_code)
    if campaign is None:
        raise ValidationFailed("Invalid referral code")
    expires_at = parse_iso_datetime(campaign.get("expires_at"))
    if expires_at is not None and expires_at < utc_now():
        raise ValidationFailed("This referral link has expired")

    token = generate_verification_token()
    token_expires = (utc_now() + timedelta(hours=VERIFICATION_TOKEN_TTL_HOURS)).isoformat()
    if existing:
        # Unverified sign-ups get a fresh token
        supabase.table("referrals").update(
            {"verification_token": token, "verification_expires_at": token_expires}
        ).eq("id", existing[0]["id"]).execute()
    else:
        supabase.table("referrals").insert(
            {
                "campaign_id": campaign["id"],
                "email": email,
                "email_verified": False,
                "verification_token": token,
                "verification_expires_at": token_expires,
            }
        ).execute()

    verification_url = f"{settings.site_url}/free-product/verify?token={token}"
    # No mail provider is wired up; the link goes to the log
    logger.info(
        "referral_verification_issued",
        campaign_id=campaign["id"],
        email=email,
        verification_url=verification_url,
        resent=bool(existing),
    )
    return {
        "message": "Please check your email to verify and claim your discount!",
        "expires_at": token_expires,
        "verification_url": verification_url if settings.is_development else None,
    }


def verify(token: str) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    found = (
        supabase.table("referrals").select("*").eq("verification_token", token).limit(1).execute().data
    )
    if not found:
        raise ValidationFailed("Invalid or expired verification link")
    referral = found[0]

    if referral.get("email_verified"):
        raise Conflict(
            "Email already verified",
            details={"discount_code": referral.get("discount_code")},
        )
    token_expires = parse_iso_datetime(referral.get("verification_expires_at"))
    if token_expires is not None and token_expires < utc_now():
        raise ValidationFailed("Verification link has expired. Please request a new one.")

    cfg = get_settings()
    now = utc_now()
    discount_code = _unique_code(WELCOME_CODE_PREFIX, "promo_codes", "code")
    supabase.table("promo_codes").insert(
        {
            "code": discount_code,
            "discount_type": "percentage",
            "discount_value": cfg.discount_percentage,
            "max_uses": 1,
            "times_used": 0,
            "is_active": True,
            "referral_id": referral["id"],
            "expires_at": (now + timedelta(days=WELCOME_PROMO_VALID_DAYS)).isoformat(),
        }
    ).execute()
    supabase.table("referrals").update(
        {
            "email_verified": True,
            "discount_code": discount_code,
            "verification_token": None,
            "verified_at": now.isoformat(),
        }
    ).eq("id", referral["id"]).execute()

    campaign_rows = (
        supabase.table("referral_campaigns")
        .select("*")
        .eq("id", referral["campaign_id"])
        .limit(1)
        .execute()
        .data
    )
    reward_code = None
    if campaign_rows:
        campaign = campaign_rows[0]
        count = int(campaign.get("referral_count") or 0) + 1
        changes: dict[str, Any] = {"referral_count": count, "updated_at": now.isoformat()}
        if count >= cfg.referrals_required and not campaign.get("is_completed"):
            reward_code = _unique_code(FREE_PRODUCT_CODE_PREFIX, "promo_codes", "code")
            supabase.table("promo_codes").insert(
                {
                    "code": reward_code,
                    "discount_type": "free_product",
                    "discount_value": cfg.max_free_product_value,
                    "max_discount_value": cfg.max_free_product_value,
                    "max_uses": 1,
                    "times_used": 0,
                    "is_active": True,
                    "user_id": campaign["user_id"],
                    "campaign_id": campaign["id"],
                }
            ).execute()
            changes.update({"is_completed": True, "reward_promo_code": reward_code})
            logger.info("referral_campaign_completed", campaign_id=campaign["id"], reward_code=reward_code)
        supabase.table("referral_campaigns").update(changes).eq("id", campaign["id"]).execute()

    logger.info("referral_verified", referral_id=referral["id"], campaign_id=referral["campaign_id"])
    return {
        "discount_code": discount_code,
        "discount_percent": cfg.discount_percentage,
        "campaign_completed": reward_code is not None,
    }


def stats() -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    campaigns = supabase.table("referral_campaigns").select("id, is_completed, reward_claimed").execute().data
    referrals = supabase.table("referrals").select("id, email_verified, discount_used").execute().data
    verified = sum(1 for r in referrals if r.get("email_verified"))
    return {
        "total_campaigns": len(campaigns),
        "completed_campaigns": sum(1 for c in campaigns if c.get("is_completed")),
        "rewards_claimed": sum(1 for c in campaigns if c.get("reward_claimed")),
        "total_referrals": len(referrals),
        "verified_referrals": verified,
        "discounts_used": sum(1 for r in referrals if r.get("discount_used")),
        "verification_rate": round(verified / len(referrals) * 100, 1) if referrals else 0.0,
    }
