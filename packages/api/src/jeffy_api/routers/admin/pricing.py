"""
Landed-cost pricing calculator.

The calculator itself lives in jeffy_shared.pricing so the ops jobs and
the API produce identical figures; these routes only look up inputs and
persist results.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import AliasChoices, BaseModel, Field

from jeffy_shared.pricing import CostBreakdownInput

from jeffy_api.dependencies import AuthUser, require_admin
from jeffy_api.responses import wrap_response
from jeffy_api.services import pricing_service

router = APIRouter(prefix="/pricing-calculator", tags=["admin-pricing"])


class SaveBreakdownRequest(BaseModel):
    product_id: str = Field(validation_alias=AliasChoices("product_id", "productId"))
    variant_id: str | None = Field(
        default=None, validation_alias=AliasChoices("variant_id", "variantId")
    )
    inputs: CostBreakdownInput
    notes: str | None = None


@router.get("/duty-rates")
async def list_duty_rates():
    data = pricing_service.list_duty_rates()
    return wrap_response(data, total_count=len(data))


@router.get("/duty-rates/{category}")
async def get_duty_rate(category: str):
    return wrap_response({"category": category, "duty_rate": pricing_service.duty_rate_for(category)})


@router.get("/breakdown")
async def get_breakdown(
    product_id: str = Query(..., alias="productId"),
    variant_id: str | None = Query(None, alias="variantId"),
):
    return wrap_response(pricing_service.get_breakdown(product_id, variant_id))


@router.get("/products/{product_id}")
async def get_product(product_id: str, variant_id: str | None = Query(None, alias="variantId")):
    data = pricing_service.get_product_for_calculator(product_id, variant_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return wrap_response(data)


@router.post("/calculate")
async def calculate(body: CostBreakdownInput):
    return wrap_response(pricing_service.calculate(body).rounded())


@router.post("/save")
async def save(body: SaveBreakdownRequest, user: AuthUser = Depends(require_admin)):
    row = pricing_service.save_breakdown(
        body.product_id,
        body.variant_id,
        body.inputs,
        calculated_by=user.user_id,
        notes=body.notes,
    )
    return wrap_response(row)
