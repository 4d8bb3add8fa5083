"""Customer order endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from jeffy_shared.models import OrderCreate

from jeffy_api.dependencies import AuthUser, require_customer
from jeffy_api.responses import wrap_response
from jeffy_api.services import delivery_service, order_service

router = APIRouter(prefix="/orders", tags=["orders"])


def _owned_order(order_id: str, user: AuthUser) -> dict:
    order = order_service.get_order(order_id)
    # Other customers' orders are reported as missing
    if order is None or (str(order.get("user_id")) != user.user_id and not user.is_admin):
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("", status_code=201)
async def create_order(body: OrderCreate, user: AuthUser = Depends(require_customer)):
    order = order_service.create_order(body, user.user_id)
    return wrap_response(order)


@router.get("")
async def list_my_orders(
    limit: int = Query(50, ge=1, le=200),
    user: AuthUser = Depends(require_customer),
):
    data = order_service.list_user_orders(user.user_id, limit=limit)
    return wrap_response(data, total_count=len(data))


@router.get("/{order_id}")
async def get_order(order_id: str, user: AuthUser = Depends(require_customer)):
    return wrap_response(_owned_order(order_id, user))


@router.get("/{order_id}/tracking")
async def track_order(order_id: str, user: AuthUser = Depends(require_customer)):
    order = _owned_order(order_id, user)
    data = await delivery_service.get_tracking(order)
    return wrap_response(data)
