"""User management through the Supabase auth admin API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from jeffy_shared.models import UserAction, UserCreate

from jeffy_api.dependencies import AuthUser, require_admin
from jeffy_api.responses import wrap_response
from jeffy_api.services import user_service

router = APIRouter(prefix="/users", tags=["admin-users"])


@router.get("")
async def list_users():
    data = user_service.list_users()
    return wrap_response(data, total_count=len(data))


@router.post("", status_code=201)
async def create_user(body: UserCreate):
    return wrap_response(user_service.create_user(body))


@router.get("/{user_id}")
async def get_user(user_id: str):
    profile = user_service.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return wrap_response(profile)


@router.put("/{user_id}")
async def user_action(user_id: str, body: UserAction):
    return wrap_response(user_service.apply_action(user_id, body))


@router.delete("/{user_id}")
async def delete_user(user_id: str, user: AuthUser = Depends(require_admin)):
    if user_id == user.user_id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    user_service.delete_user(user_id)
    return wrap_response({"deleted": True})
