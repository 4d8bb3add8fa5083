"""
models/wants.py — Jeffy Wants requests, approvals and launch sign-ups.

A shopper describes something they want Jeffy to stock and shares a
six-character code; friends approve it at /want/<code>. Enough
approvals earn the requester a free product.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from jeffy_shared.constants import (
    WANT_APPROVALS_NEEDED,
    WANT_MAX_KEYWORDS,
    ApprovalType,
    AssignmentEvent,
    WantStatus,
)
from jeffy_shared.validators import normalize_email

_NON_WORD_RE = re.compile(r"[^\w\s]")


def extract_keywords(text: str, limit: int = WANT_MAX_KEYWORDS) -> list[str]:
    """Lower-cased words longer than three letters, punctuation dropped, in order."""
    words = _NON_WORD_RE.sub("", text.lower()).split()
    return [w for w in words if len(w) > 3][:limit]


class WantRequestIn(BaseModel):
    request_text: str = Field(min_length=1)
    requester_name: str = Field(min_length=1)
    requester_email: str
    requester_phone: str | None = None
    voice_transcript: str | None = None
    image_urls: list[str] | None = None
    reference_links: list[str] | None = None
    product_category: str | None = None
    price_concern: str | None = None

    @field_validator("requester_email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return normalize_email(v)

    def to_insert_dict(self, referral_code: str) -> dict[str, Any]:
        keywords = extract_keywords(self.request_text)
        return {
            **self.model_dump(),
            "referral_code": referral_code,
            "product_keywords": keywords or None,
            "approvals_needed": WANT_APPROVALS_NEEDED,
            "approvals_received": 0,
            "status": "active",
        }


class WantApprovalIn(BaseModel):
    approver_email: str
    approver_name: str | None = None
    approver_phone: str | None = None
    approval_type: ApprovalType = "good_idea"
    comment: str | None = None
    wants_updates: bool = False
    wants_own_link: bool = False
    referral_source: str = "direct"

    @field_validator("approver_email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return normalize_email(v)


class WantShippingIn(BaseModel):
    requester_email: str = Field(min_length=1)
    shipping_address: dict[str, Any]


class WantStatusUpdate(BaseModel):
    status: WantStatus
    admin_notes: str | None = None


class ComingSoonSignupIn(BaseModel):
    email: str
    name: str | None = None

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return normalize_email(v)

    def to_insert_dict(self) -> dict[str, Any]:
        return {"email": self.email, "name": self.name or None, "notified": False}


class AssignmentNotify(BaseModel):
    """Database webhook body sent when a delivery_assignments row changes."""

    assignment_id: str = Field(
        min_length=1, validation_alias=AliasChoices("assignment_id", "assignmentId")
    )
    event_type: AssignmentEvent = Field(
        default="UPDATE", validation_alias=AliasChoices("event_type", "eventType")
    )
