"""
models/referrals.py — Referral programme settings and promo code payloads.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from jeffy_shared.constants import DEFAULT_REFERRAL_SETTINGS
from jeffy_shared.validators import normalize_email


class ReferralSettings(BaseModel):
    """The single active row of referral_settings."""

    referrals_required: int = Field(
        default=int(DEFAULT_REFERRAL_SETTINGS["referrals_required"]), ge=1, le=100
    )
    discount_percentage: float = Field(
        default=float(DEFAULT_REFERRAL_SETTINGS["discount_percentage"]), ge=1, le=100
    )
    max_free_product_value: float = Field(
        default=float(DEFAULT_REFERRAL_SETTINGS["max_free_product_value"]), gt=0
    )
    campaign_expiry_days: int = Field(
        default=int(DEFAULT_REFERRAL_SETTINGS["campaign_expiry_days"]), ge=1
    )

    @classmethod
    def from_db_row(cls, row: dict[str, Any] | None) -> "ReferralSettings":
        if not row:
            return cls()
        return cls(**{k: v for k, v in row.items() if k in cls.model_fields and v is not None})

    def to_update_dict(self) -> dict[str, Any]:
        return self.model_dump()


class ReferralSignup(BaseModel):
    referral_code: str = Field(min_length=1, validation_alias=AliasChoices("referral_code", "code"))
    email: str

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("referral_code")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()


class ReferralVerify(BaseModel):
    token: str = Field(min_length=1)
    user_id: str | None = None


class PromoValidate(BaseModel):
    code: str = Field(min_length=1)
    subtotal: float = Field(ge=0)

    @field_validator("code")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()


class PromoApply(PromoValidate):
    order_id: str | None = None
