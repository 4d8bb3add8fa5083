"""Signed-in customer data: favorites, addresses, cart and notifications."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from jeffy_shared.models import CartPayload, SavedAddressIn

from jeffy_api.dependencies import AuthUser, require_customer
from jeffy_api.responses import wrap_response
from jeffy_api.services import account_service, notification_service

router = APIRouter(tags=["account"])


class FavoriteBody(BaseModel):
    product_id: str


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------


@router.get("/favorites")
async def list_favorites(user: AuthUser = Depends(require_customer)):
    data = account_service.list_favorites(user.user_id)
    return wrap_response(data, total_count=len(data))


@router.post("/favorites", status_code=201)
async def add_favorite(body: FavoriteBody, user: AuthUser = Depends(require_customer)):
    return wrap_response(account_service.add_favorite(user.user_id, body.product_id))


@router.delete("/favorites")
async def remove_favorite(
    product_id: str = Query(..., alias="productId"),
    user: AuthUser = Depends(require_customer),
):
    removed = account_service.remove_favorite(user.user_id, product_id)
    return wrap_response({"removed": removed})


@router.post("/favorites/toggle")
async def toggle_favorite(body: FavoriteBody, user: AuthUser = Depends(require_customer)):
    state = account_service.toggle_favorite(user.user_id, body.product_id)
    return wrap_response({"product_id": body.product_id, "is_favorite": state})


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


@router.get("/addresses")
async def list_addresses(user: AuthUser = Depends(require_customer)):
    data = account_service.list_addresses(user.user_id)
    return wrap_response(data, total_count=len(data))


@router.post("/addresses", status_code=201)
async def create_address(body: SavedAddressIn, user: AuthUser = Depends(require_customer)):
    return wrap_response(account_service.create_address(user.user_id, body))


@router.put("/addresses/{address_id}")
async def update_address(
    address_id: str,
    body: SavedAddressIn,
    user: AuthUser = Depends(require_customer),
):
    data = account_service.update_address(user.user_id, address_id, body)
    if data is None:
        raise HTTPException(status_code=404, detail="Address not found")
    return wrap_response(data)


@router.delete("/addresses/{address_id}")
async def delete_address(address_id: str, user: AuthUser = Depends(require_customer)):
    if not account_service.delete_address(user.user_id, address_id):
        raise HTTPException(status_code=404, detail="Address not found")
    return wrap_response({"deleted": True})


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------


@router.get("/cart")
async def get_cart(user: AuthUser = Depends(require_customer)):
    return wrap_response({"items": account_service.get_cart(user.user_id)})


@router.put("/cart")
async def save_cart(body: CartPayload, user: AuthUser = Depends(require_customer)):
    return wrap_response({"items": account_service.save_cart(user.user_id, body.items)})


@router.delete("/cart")
async def clear_cart(user: AuthUser = Depends(require_customer)):
    account_service.clear_cart(user.user_id)
    return wrap_response({"items": []})


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


@router.get("/notifications")
async def list_notifications(
    unread: bool = Query(False),
    user: AuthUser = Depends(require_customer),
):
    data = notification_service.list_notifications(user.user_id, unread_only=unread)
    return wrap_response(data, total_count=len(data))


@router.post("/notifications/read-all")
async def mark_all_read(user: AuthUser = Depends(require_customer)):
    return wrap_response({"updated": notification_service.mark_all_read(user.user_id)})


@router.post("/notifications/{notification_id}/read")
async def mark_read(notification_id: str, user: AuthUser = Depends(require_customer)):
    data = notification_service.mark_read(user.user_id, notification_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return wrap_response(data)
