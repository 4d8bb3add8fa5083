"""Public "request a product" form."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from jeffy_shared.models import ProductRequestIn

from jeffy_api.dependencies import AuthUser, get_current_user
from jeffy_api.responses import wrap_response
from jeffy_api.services import product_request_service

router = APIRouter(tags=["product-requests"])


@router.post("/product-requests", status_code=201)
async def create_product_request(
    body: ProductRequestIn,
    user: AuthUser | None = Depends(get_current_user),
):
    row = product_request_service.create_request(body, user.user_id if user else None)
    return wrap_response(row)
