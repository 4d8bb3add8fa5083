"""
models/users.py — Admin user management and customer account payloads.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from jeffy_shared.constants import Role
from jeffy_shared.validators import normalize_email


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=6)
    full_name: str | None = None
    auto_verify: bool = True
    role: Role = "customer"

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return normalize_email(v)

    @property
    def display_name(self) -> str:
        return self.full_name or self.email.split("@")[0]


class UserAction(BaseModel):
    action: Literal["verify_email", "reset_password", "update_profile"]
    new_password: str | None = Field(default=None, min_length=6)
    profile: dict[str, Any] = Field(default_factory=dict)


class ProfileUpdate(BaseModel):
    full_name: str | None = None
    phone: str | None = None
    avatar_url: str | None = None

    def to_update_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class SavedAddressIn(BaseModel):
    label: str = Field(default="Home", min_length=1)
    street_address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    province: str | None = None
    suburb: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    is_default: bool = False

    def to_insert_dict(self, user_id: str) -> dict[str, Any]:
        return {"user_id": user_id, **self.model_dump()}


class CartPayload(BaseModel):
    items: list[dict[str, Any]] = Field(default_factory=list)


class ProductRequestIn(BaseModel):
    product_name: str = Field(min_length=1)
    requester_email: str
    requester_name: str | None = None
    description: str | None = None
    product_link: str | None = None
    urgency: Literal["low", "normal", "high"] = "normal"

    @field_validator("requester_email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return normalize_email(v)

    def to_insert_dict(self, user_id: str | None) -> dict[str, Any]:
        return {**self.model_dump(), "user_id": user_id, "status": "pending"}
