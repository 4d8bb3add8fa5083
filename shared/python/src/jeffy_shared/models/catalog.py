"""
models/catalog.py — Pydantic models for products, variants and categories.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ProductIn(BaseModel):
    """Admin create/update payload for the products table."""

    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    category: str = Field(min_length=1)
    description: str | None = None
    cost_price: float | None = Field(default=None, ge=0)
    stock: int = Field(default=0, ge=0)
    image_url: str | None = None
    images: list[str] = Field(default_factory=list)
    sku: str | None = None
    has_variants: bool = False
    is_active: bool = True
    reorder_point: int | None = Field(default=None, ge=0)
    hs_code: str | None = None

    def to_insert_dict(self) -> dict[str, Any]:
        return self.model_dump()


class ProductUpdate(BaseModel):
    """Partial update; only fields that were sent are written."""

    name: str | None = Field(default=None, min_length=1)
    price: float | None = Field(default=None, ge=0)
    category: str | None = None
    description: str | None = None
    cost_price: float | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)
    image_url: str | None = None
    images: list[str] | None = None
    sku: str | None = None
    has_variants: bool | None = None
    is_active: bool | None = None
    reorder_point: int | None = Field(default=None, ge=0)
    hs_code: str | None = None

    def to_update_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class VariantIn(BaseModel):
    name: str = Field(min_length=1)
    sku: str | None = None
    price: float | None = Field(default=None, ge=0)
    cost_price: float | None = Field(default=None, ge=0)
    stock: int = Field(default=0, ge=0)
    attributes: dict[str, Any] = Field(default_factory=dict)
    reorder_point: int | None = Field(default=None, ge=0)

    def to_insert_dict(self, product_id: str) -> dict[str, Any]:
        return {"product_id": product_id, **self.model_dump()}


class CategoryIn(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = None
    image_url: str | None = None
    is_active: bool = True

    def to_insert_dict(self) -> dict[str, Any]:
        return self.model_dump()
