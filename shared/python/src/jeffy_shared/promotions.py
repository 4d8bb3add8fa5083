"""
promotions.py — Promo code and referral helpers.

Pure functions only: code generation, discount maths, share links and
countdown formatting. Persistence lives in the API services.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from urllib.parse import quote

from jeffy_shared.constants import CODE_ALPHABET, VERIFICATION_TOKEN_LENGTH
from jeffy_shared.time_utils import parse_iso_datetime
from jeffy_shared.validators import is_valid_email

__all__ = [
    "DiscountResult",
    "calculate_discount",
    "format_time_remaining",
    "generate_code",
    "generate_share_urls",
    "generate_verification_token",
    "is_valid_email",
]


def generate_code(prefix: str = "", length: int = 6) -> str:
    """Random code from an alphabet without 0/O/1/I, e.g. 'JEFFY-7KQ2MX'."""
    return prefix + "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def generate_verification_token(length: int = VERIFICATION_TOKEN_LENGTH) -> str:
    alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
    return "".join(secrets.choice(alphabet) for _ in range(length))


@dataclass(frozen=True)
class DiscountResult:
    valid: bool
    discount: float = 0.0
    message: str = ""


def calculate_discount(
    promo: dict[str, Any],
    subtotal: float,
    now: datetime,
) -> DiscountResult:
    """
    Evaluate a promo_codes row against a cart subtotal.

    Checks are applied in the order a customer would expect to hear
    about them: inactive, expired, used up, then minimum order.
    """
    if not promo.get("is_active", False):
        return DiscountResult(False, message="This promo code is no longer active")

    expires_at = parse_iso_datetime(promo.get("expires_at"))
    if expires_at is not None and expires_at < now:
        return DiscountResult(False, message="This promo code has expired")

    max_uses = promo.get("max_uses")
    if max_uses is not None and int(promo.get("times_used") or 0) >= int(max_uses):
        return DiscountResult(False, message="This promo code has reached its usage limit")

    min_order = float(promo.get("min_order_value") or 0)
    if subtotal < min_order:
        return DiscountResult(False, message=f"Minimum order of R{min_order:.2f} required")

    promo_type = promo.get("discount_type")
    value = float(promo.get("discount_value") or 0)
    cap = promo.get("max_discount_value")

    if promo_type == "percentage":
        discount = subtotal * value / 100
        if cap is not None:
            discount = min(discount, float(cap))
        return DiscountResult(True, round(discount, 2), f"R{discount:.2f} off!")
    if promo_type == "fixed":
        discount = min(value, subtotal)
        return DiscountResult(True, round(discount, 2), f"R{discount:.2f} off!")
    if promo_type == "free_product":
        limit = float(cap or 0)
        return DiscountResult(True, round(limit, 2), f"Free product up to R{limit:.2f}!")

    return DiscountResult(False, message="Unknown promo code type")


def generate_share_urls(referral_code: str, site_url: str) -> dict[str, str]:
    """Links a referrer can post; the landing page pre-fills the code."""
    link = f"{site_url}/referral/{referral_code}"
    text = f"Join me on Jeffy and get a welcome discount! Use my code {referral_code}: {link}"
    return {
        "link": link,
        "whatsapp": f"https://wa.me/?text={quote(text)}",
        "facebook": f"https://www.facebook.com/sharer/sharer.php?u={quote(link, safe='')}",
        "twitter": f"https://twitter.com/intent/tweet?text={quote(text)}",
    }


def format_time_remaining(expires_at: datetime | str | None, now: datetime) -> str:
    expiry = parse_iso_datetime(expires_at) if isinstance(expires_at, str) else expires_at
    if expiry is None:
        return "No expiry"
    seconds = int((expiry - now).total_seconds())
    if seconds <= 0:
        return "Expired"
    days, rem = divmod(seconds, 86400)
    hours, rem = divmod(rem, 3600)
    minutes = rem // 60
    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
