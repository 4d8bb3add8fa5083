"""
models/procurement.py — Pydantic models for the import and supply chain.

Covers the procurement queue and batches sent to the sourcing agent,
inbound shipments, purchase (stock) orders, distributors and the
allocation of landed stock to franchise locations.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field, field_validator

from jeffy_shared.constants import (
    DEFAULT_COUNTRY,
    AllocationStatus,
    BatchType,
    Priority,
    ProcurementStatus,
    StockOrderStatus,
)
from jeffy_shared.validators import normalize_email


# ---------------------------------------------------------------------------
# Procurement queue / batches
# ---------------------------------------------------------------------------


class QueueItemCreate(BaseModel):
    product_id: str
    quantity_needed: int = Field(gt=0)
    variant_id: str | None = None
    location_id: str | None = None
    procurement_link: str | None = None
    target_cost_rmb: float | None = Field(default=None, ge=0)
    description: str | None = None
    china_agent_notes: str | None = None
    priority: Priority = "normal"

    def to_insert_dict(self) -> dict[str, Any]:
        return {**self.model_dump(), "status": "pending"}


class QueueItemUpdate(BaseModel):
    quantity_needed: int | None = Field(default=None, gt=0)
    procurement_link: str | None = None
    target_cost_rmb: float | None = Field(default=None, ge=0)
    description: str | None = None
    china_agent_notes: str | None = None
    priority: Priority | None = None
    status: ProcurementStatus | None = None

    def to_update_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class BatchCreate(BaseModel):
    batch_type: BatchType
    queue_item_ids: list[str] = Field(min_length=1)


# ---------------------------------------------------------------------------
# Shipments
# ---------------------------------------------------------------------------


class ShipmentItemIn(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(gt=0)
    unit_cost_rmb: float | None = Field(default=None, ge=0)
    unit_cost_zar: float | None = Field(default=None, ge=0)
    hs_code: str | None = None
    import_duty_rate: float | None = Field(default=None, ge=0)
    import_duty_amount: float = Field(default=0.0, ge=0)
    vat_amount: float = Field(default=0.0, ge=0)
    landed_cost_per_unit: float | None = Field(default=None, ge=0)
    weight_kg: float | None = Field(default=None, ge=0)
    length_cm: float | None = Field(default=None, ge=0)
    width_cm: float | None = Field(default=None, ge=0)
    height_cm: float | None = Field(default=None, ge=0)

    def to_insert_dict(self, shipment_id: str, exchange_rate: float | None) -> dict[str, Any]:
        row = {"shipment_id": shipment_id, **self.model_dump()}
        if self.unit_cost_rmb is not None:
            row["line_total_rmb"] = round(self.unit_cost_rmb * self.quantity, 2)
            if exchange_rate and self.unit_cost_zar is None:
                row["unit_cost_zar"] = round(self.unit_cost_rmb * exchange_rate, 2)
        if row.get("unit_cost_zar") is not None:
            row["line_total_zar"] = round(row["unit_cost_zar"] * self.quantity, 2)
        return row


class ShipmentCreate(BaseModel):
    procurement_batch_id: str
    items: list[ShipmentItemIn] = Field(min_length=1)
    total_cost_rmb: float = Field(default=0.0, ge=0)
    exchange_rate: float = Field(default=0.0, ge=0)
    shipping_cost: float = Field(default=0.0, ge=0)
    insurance_cost: float = Field(default=0.0, ge=0)
    tracking_number: str | None = None
    carrier: str | None = None
    notes: str | None = None


class ShipmentUpdate(BaseModel):
    status: str | None = None
    total_cost_rmb: float | None = Field(default=None, ge=0)
    exchange_rate: float | None = Field(default=None, ge=0)
    shipping_cost: float | None = Field(default=None, ge=0)
    insurance_cost: float | None = Field(default=None, ge=0)
    tracking_number: str | None = None
    carrier: str | None = None
    notes: str | None = None
    estimated_arrival: date | None = None

    def to_update_dict(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        if isinstance(data.get("estimated_arrival"), date):
            data["estimated_arrival"] = data["estimated_arrival"].isoformat()
        return data


# ---------------------------------------------------------------------------
# Stock (purchase) orders
# ---------------------------------------------------------------------------


class StockOrderItemIn(BaseModel):
    product_name: str = Field(min_length=1)
    quantity: int = Field(gt=0)
    unit_cost: float = Field(default=0.0, ge=0)
    product_id: str | None = None
    variant_id: str | None = None
    product_sku: str | None = None
    product_description: str | None = None
    variant_attributes: dict[str, Any] | None = None
    unit_weight_kg: float | None = Field(default=None, ge=0)
    unit_length_cm: float | None = Field(default=None, ge=0)
    unit_width_cm: float | None = Field(default=None, ge=0)
    unit_height_cm: float | None = Field(default=None, ge=0)
    notes: str | None = None

    @property
    def line_total(self) -> float:
        return round(self.quantity * self.unit_cost, 2)

    def to_insert_dict(self, stock_order_id: str) -> dict[str, Any]:
        return {
            "stock_order_id": stock_order_id,
            **self.model_dump(),
            "line_total": self.line_total,
        }


class StockOrderCreate(BaseModel):
    supplier_name: str = Field(min_length=1)
    shipping_address: str = Field(min_length=1)
    shipping_city: str = Field(min_length=1)
    shipping_postal_code: str = Field(min_length=1)
    items: list[StockOrderItemIn] = Field(min_length=1)
    supplier_email: str | None = None
    supplier_phone: str | None = None
    supplier_address: str | None = None
    supplier_city: str | None = None
    supplier_postal_code: str | None = None
    supplier_country: str = DEFAULT_COUNTRY
    shipping_country: str = DEFAULT_COUNTRY
    shipping_contact_name: str | None = None
    shipping_contact_phone: str | None = None
    shipping_method: str | None = None
    expected_delivery_date: date | None = None
    order_date: date | None = None
    notes: str | None = None

    def header_dict(self, order_number: str, created_by: str | None) -> dict[str, Any]:
        data = self.model_dump(exclude={"items"})
        for key in ("expected_delivery_date", "order_date"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        data["order_date"] = data["order_date"] or date.today().isoformat()
        subtotal = round(sum(i.line_total for i in self.items), 2)
        return {
            **data,
            "order_number": order_number,
            "order_status": "draft",
            "subtotal": subtotal,
            "total_amount": subtotal,
            "created_by": created_by,
        }


class StockOrderUpdate(BaseModel):
    supplier_name: str | None = Field(default=None, min_length=1)
    supplier_email: str | None = None
    supplier_phone: str | None = None
    shipping_address: str | None = None
    shipping_city: str | None = None
    shipping_postal_code: str | None = None
    shipping_method: str | None = None
    expected_delivery_date: date | None = None
    order_status: StockOrderStatus | None = None
    notes: str | None = None
    items: list[StockOrderItemIn] | None = None

    def to_update_dict(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True, exclude={"items"})
        if isinstance(data.get("expected_delivery_date"), date):
            data["expected_delivery_date"] = data["expected_delivery_date"].isoformat()
        return data


# ---------------------------------------------------------------------------
# Distributors and franchises
# ---------------------------------------------------------------------------


class DistributorIn(BaseModel):
    name: str = Field(min_length=1)
    email: str
    phone: str | None = None
    company_name: str | None = None
    location_id: str | None = None
    address: str | None = None
    city: str | None = None
    commission_rate: float | None = Field(default=None, ge=0, le=100)
    notes: str | None = None

    @field_validator("email")
    @classmethod
    def _valid_email(cls, v: str) -> str:
        return normalize_email(v)

    def to_insert_dict(self) -> dict[str, Any]:
        return {**self.model_dump(), "status": "active", "contract_signed": False}


class FranchiseIn(BaseModel):
    name: str = Field(min_length=1)
    franchise_code: str = Field(min_length=1)
    address: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None
    phone: str | None = None
    email: str | None = None
    manager_name: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    def to_insert_dict(self) -> dict[str, Any]:
        return {**self.model_dump(), "is_franchise": True, "is_active": True}


class AllocationIn(BaseModel):
    franchise_location_id: str
    product_id: str
    quantity: int = Field(gt=0)
    variant_id: str | None = None
    notes: str | None = None


class AllocationCreate(BaseModel):
    shipment_id: str
    allocations: list[AllocationIn] = Field(min_length=1)


class AllocationUpdate(BaseModel):
    status: AllocationStatus | None = None
    quantity_received: int | None = Field(default=None, ge=0)
    notes: str | None = None


class FinancialsRequest(BaseModel):
    franchise_location_id: str
    period_start: date
    period_end: date
    period_type: str = "monthly"

    @field_validator("period_end")
    @classmethod
    def _end_after_start(cls, v: date, info) -> date:
        start = info.data.get("period_start")
        if start is not None and v < start:
            raise ValueError("period_end must not be before period_start")
        return v


class ReorderRequestIn(BaseModel):
    product_id: str
    quantity: int = Field(gt=0)
    variant_id: str | None = None
    supplier: str | None = None
    notes: str | None = None

    def to_insert_dict(self, requested_by: str | None) -> dict[str, Any]:
        return {**self.model_dump(), "status": "pending", "requested_by": requested_by}
