"""
models/orders.py — Pydantic models for customer orders and status changes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from jeffy_shared.constants import OrderStatus
from jeffy_shared.validators import normalize_email


class OrderItemIn(BaseModel):
    product_id: str
    variant_id: str | None = None
    product_name: str | None = None
    quantity: int = Field(gt=0)
    price: float = Field(ge=0)
    cost: float = Field(default=0.0, ge=0)

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class OrderCreate(BaseModel):
    """Checkout payload posted by the storefront."""

    user_email: str
    items: list[OrderItemIn]
    shipping_address: dict[str, Any] = Field(default_factory=dict)
    delivery_location: dict[str, float] | None = None
    franchise_location_id: str | None = None
    promo_code: str | None = None
    discount: float = Field(default=0.0, ge=0)
    shipping_cost: float = Field(default=0.0, ge=0)
    payment_method: str | None = None
    notes: str | None = None

    @field_validator("user_email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("items")
    @classmethod
    def _items_not_empty(cls, v: list[OrderItemIn]) -> list[OrderItemIn]:
        if not v:
            raise ValueError("Order must contain at least one item")
        return v

    @property
    def subtotal(self) -> float:
        return sum(i.line_total for i in self.items)

    @property
    def total(self) -> float:
        return max(0.0, self.subtotal - self.discount + self.shipping_cost)

    @property
    def total_cost(self) -> float:
        return sum(i.cost * i.quantity for i in self.items)

    def to_insert_dict(self, user_id: str | None) -> dict[str, Any]:
        return {
            "user_id": user_id,
            "user_email": self.user_email,
            "items": [i.model_dump() for i in self.items],
            "subtotal": round(self.subtotal, 2),
            "discount": round(self.discount, 2),
            "shipping_cost": round(self.shipping_cost, 2),
            "total": round(self.total, 2),
            "shipping_address": self.shipping_address,
            "delivery_location": self.delivery_location,
            "franchise_location_id": self.franchise_location_id,
            "promo_code": self.promo_code,
            "payment_method": self.payment_method,
            "notes": self.notes,
            "status": "pending",
            "payment_status": "pending",
        }


class StatusUpdate(BaseModel):
    status: OrderStatus
    notes: str | None = None


class BulkStatusUpdate(BaseModel):
    order_ids: list[str] = Field(min_length=1)
    status: OrderStatus


class AssignDriver(BaseModel):
    driver_id: str
    estimated_delivery: str | None = None
    notes: str | None = None
