"""
constants.py — shared constants used across the API and the ops CLI.

Status vocabularies mirror the check constraints on the Supabase tables,
so keep them in sync with the schema.
"""

from __future__ import annotations

from typing import Final, Literal

# ---------------------------------------------------------------------------
# Typed literals
# ---------------------------------------------------------------------------
OrderStatus = Literal[
    "pending",
    "confirmed",
    "processing",
    "ready_for_delivery",
    "out_for_delivery",
    "shipped",
    "delivered",
    "cancelled",
]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]
DriverStatus = Literal["active", "busy", "offline", "inactive"]
DeliveryStatus = Literal["assigned", "picked_up", "in_transit", "delivered", "failed"]
ShipmentStatus = Literal["ordered", "in_transit", "customs", "arrived", "received"]
ProcurementStatus = Literal["pending", "sent_to_agent", "ordered", "received", "cancelled"]
BatchStatus = Literal["draft", "sent", "confirmed", "received", "cancelled"]
Priority = Literal["low", "normal", "high", "urgent"]
BatchType = Literal["weekly", "monthly"]
StockOrderStatus = Literal["draft", "submitted", "confirmed", "shipped", "received", "cancelled"]
AllocationStatus = Literal["pending", "shipped", "received"]
PromoType = Literal["percentage", "fixed", "free_product"]
Role = Literal["customer", "driver", "franchise", "admin"]
NotificationType = Literal["status_update", "driver_assigned", "delivered", "payment_received"]
PricingMethod = Literal["margin", "markup"]
PeriodRange = Literal["today", "week", "month", "year", "all"]
RequestStatus = Literal["pending", "reviewing", "approved", "rejected", "fulfilled"]
WantStatus = Literal["active", "completed", "fulfilled", "cancelled"]
ApprovalType = Literal["good_idea", "want_it_too"]
AssignmentEvent = Literal["INSERT", "UPDATE"]

ROLE_ORDER: Final[dict[str, int]] = {
    "customer": 0,
    "driver": 1,
    "franchise": 2,
    "admin": 3,
}

# Orders that count towards revenue and product analytics
REVENUE_ORDER_STATUSES: Final[tuple[str, ...]] = (
    "confirmed",
    "processing",
    "shipped",
    "delivered",
)

# Drivers that can be shown on the assignment board
AVAILABLE_DRIVER_STATUSES: Final[tuple[str, ...]] = ("active", "busy")

ORDER_STATUS_MESSAGES: Final[dict[str, str]] = {
    "pending": "Your order has been received and is awaiting confirmation.",
    "confirmed": "Your order has been confirmed!",
    "processing": "Your order is being prepared.",
    "ready_for_delivery": "Your order is packed and ready for delivery.",
    "out_for_delivery": "Your order is out for delivery!",
    "shipped": "Your order has been shipped.",
    "delivered": "Your order has been delivered! Thank you for shopping with us.",
    "cancelled": "Your order has been cancelled.",
}

# ---------------------------------------------------------------------------
# Referrals and promo codes
# ---------------------------------------------------------------------------
CODE_ALPHABET: Final[str] = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
REFERRAL_CODE_PREFIX: Final[str] = "JEFFY-"
WELCOME_CODE_PREFIX: Final[str] = "WELCOME-"
FREE_PRODUCT_CODE_PREFIX: Final[str] = "FREE-"
CODE_GENERATION_ATTEMPTS: Final[int] = 10
VERIFICATION_TOKEN_LENGTH: Final[int] = 64
VERIFICATION_TOKEN_TTL_HOURS: Final[int] = 24
WELCOME_PROMO_VALID_DAYS: Final[int] = 30

DEFAULT_REFERRAL_SETTINGS: Final[dict[str, float | int]] = {
    "referrals_required": 10,
    "discount_percentage": 30,
    "max_free_product_value": 300,
    "campaign_expiry_days": 30,
}

DEFAULT_COUNTRY: Final[str] = "South Africa"
"""Shipping country used when a stock order does not name one."""

# Average urban driving speed used when Google Maps is unavailable
FALLBACK_SPEED_KMH: Final[float] = 40.0

HS_CODE_SEARCH_LIMIT: Final[int] = 20
SEARCH_MIN_QUERY_LENGTH: Final[int] = 2

# ---------------------------------------------------------------------------
# Jeffy Wants
# ---------------------------------------------------------------------------
WANT_CODE_LENGTH: Final[int] = 6
WANT_APPROVALS_NEEDED: Final[int] = 10
WANT_MAX_KEYWORDS: Final[int] = 10
# Requests shown on the public board
PUBLIC_WANT_STATUSES: Final[tuple[str, ...]] = ("active", "completed")
