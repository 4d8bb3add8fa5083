"""Admin user management over Supabase Auth plus the user_profiles table."""

from __future__ import annotations

from typing import Any

import structlog
from supabase import AuthApiError

from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import UserAction, UserCreate
from jeffy_shared.time_utils import utc_now

from jeffy_api.errors import Conflict, ValidationFailed

logger = structlog.get_logger(__name__)


def _iso(value: Any) -> Any:
    return value.isoformat() if hasattr(value, "isoformat") else value


def _user_to_dict(user: Any) -> dict[str, Any]:
    return {
        "id": str(user.id),
        "email": user.email,
        "email_confirmed_at": _iso(getattr(user, "email_confirmed_at", None)),
        "created_at": _iso(getattr(user, "created_at", None)),
        "last_sign_in_at": _iso(getattr(user, "last_sign_in_at", None)),
        "user_metadata": getattr(user, "user_metadata", None) or {},
    }


def list_users() -> list[dict[str, Any]]:
    """Auth users joined with their profile rows."""
    supabase = get_supabase_client(service_role=True)
    users = [_user_to_dict(u) for u in supabase.auth.admin.list_users()]
    profiles = supabase.table("user_profiles").select("*").execute().data
    by_id = {str(p["id"]): p for p in profiles}
    for user in users:
        profile = by_id.get(user["id"]) or {}
        user["profile"] = profile or None
        user["role"] = profile.get("role", "customer")
        user["full_name"] = profile.get("full_name") or user["user_metadata"].get("full_name")
        user["email_verified"] = user["email_confirmed_at"] is not None
    return users


def create_user(payload: UserCreate) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    try:
        response = supabase.auth.admin.create_user(
            {
                "email": payload.email,
                "password": payload.password,
                "email_confirm": payload.auto_verify,
                "user_metadata": {"full_name": payload.display_name},
            }
        )
    except AuthApiError as exc:
        logger.warning("user_create_failed", email=payload.email, error=str(exc))
        raise Conflict(str(exc)) from exc

    user = _user_to_dict(response.user)
    profile = (
        supabase.table("user_profiles")
        .upsert(
            {
                "id": user["id"],
                "email": payload.email,
                "full_name": payload.display_name,
                "role": payload.role,
            }
        )
        .execute()
        .data
    )
    logger.info("user_created", user_id=user["id"], role=payload.role, verified=payload.auto_verify)
    return {**user, "profile": profile[0] if profile else None}


def apply_action(user_id: str, action: UserAction) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    admin = supabase.auth.admin

    if action.action == "verify_email":
        response = admin.update_user_by_id(user_id, {"email_confirm": True})
        logger.info("user_email_verified", user_id=user_id)
        return _user_to_dict(response.user)

    if action.action == "reset_password":
        if not action.new_password:
            raise ValidationFailed("new_password is required for reset_password")
        response = admin.update_user_by_id(user_id, {"password": action.new_password})
        logger.info("user_password_reset", user_id=user_id)
        return _user_to_dict(response.user)

    changes = {k: v for k, v in action.profile.items() if k in ("full_name", "phone", "role", "avatar_url")}
    if not changes:
        raise ValidationFailed("No profile fields to update")
    changes["updated_at"] = utc_now().isoformat()
    result = supabase.table("user_profiles").update(changes).eq("id", user_id).execute()
    logger.info("user_profile_updated", user_id=user_id, fields=sorted(changes))
    return result.data[0] if result.data else {"id": user_id, **changes}


def delete_user(user_id: str) -> None:
    supabase = get_supabase_client(service_role=True)
    supabase.auth.admin.delete_user(user_id)
    supabase.table("user_profiles").delete().eq("id", user_id).execute()
    logger.info("user_deleted", user_id=user_id)


def get_profile(user_id: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("user_profiles").select("*").eq("id", user_id).limit(1).execute()
    return result.data[0] if result.data else None
