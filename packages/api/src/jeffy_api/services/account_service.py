"""Customer account data: favorites, saved addresses and the persisted cart."""

from __future__ import annotations

from typing import Any

import structlog

from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import SavedAddressIn
from jeffy_shared.time_utils import utc_now

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------


def list_favorites(user_id: str) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    return (
        supabase.table("favorites")
        .select("*, products(*)")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .execute()
        .data
    )


def _find_favorite(user_id: str, product_id: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("favorites")
        .select("*")
        .eq("user_id", user_id)
        .eq("product_id", product_id)
        .limit(1)
        .execute()
    )
    return result.data[0] if result.data else None


def add_favorite(user_id: str, product_id: str) -> dict[str, Any]:
    existing = _find_favorite(user_id, product_id)
    if existing:
        return existing
    supabase = get_supabase_client(service_role=True)
    return (
        supabase.table("favorites")
        .insert({"user_id": user_id, "product_id": product_id})
        .execute()
        .data[0]
    )


def remove_favorite(user_id: str, product_id: str) -> bool:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("favorites")
        .delete()
        .eq("user_id", user_id)
        .eq("product_id", product_id)
        .execute()
    )
    return bool(result.data)


def toggle_favorite(user_id: str, product_id: str) -> bool:
    """Flip the favorite flag and return the new state."""
    if _find_favorite(user_id, product_id):
        remove_favorite(user_id, product_id)
        return False
    add_favorite(user_id, product_id)
    return True


# ---------------------------------------------------------------------------
# Saved addresses
# ---------------------------------------------------------------------------


def list_addresses(user_id: str) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    return (
        supabase.table("saved_addresses")
        .select("*")
        .eq("user_id", user_id)
        .order("is_default", desc=True)
        .order("created_at", desc=True)
        .execute()
        .data
    )


def _clear_default(user_id: str, keep_id: str | None = None) -> None:
    supabase = get_supabase_client(service_role=True)
    query = (
        supabase.table("saved_addresses")
        .update({"is_default": False})
        .eq("user_id", user_id)
        .eq("is_default", True)
    )
    if keep_id:
        query = query.neq("id", keep_id)
    query.execute()


def create_address(user_id: str, payload: SavedAddressIn) -> dict[str, Any]:
    if payload.is_default:
        _clear_default(user_id)
    supabase = get_supabase_client(service_role=True)
    return supabase.table("saved_addresses").insert(payload.to_insert_dict(user_id)).execute().data[0]


def update_address(user_id: str, address_id: str, payload: SavedAddressIn) -> dict[str, Any] | None:
    if payload.is_default:
        _clear_default(user_id, keep_id=address_id)
    changes = {**payload.model_dump(), "updated_at": utc_now().isoformat()}
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("saved_addresses")
        .update(changes)
        .eq("id", address_id)
        .eq("user_id", user_id)
        .execute()
    )
    return result.data[0] if result.data else None


def delete_address(user_id: str, address_id: str) -> bool:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("saved_addresses")
        .delete()
        .eq("id", address_id)
        .eq("user_id", user_id)
        .execute()
    )
    return bool(result.data)


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------


def get_cart(user_id: str) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("user_carts").select("items").eq("user_id", user_id).limit(1).execute()
    if not result.data:
        return []
    return result.data[0].get("items") or []


def save_cart(user_id: str, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    supabase.table("user_carts").upsert(
        {"user_id": user_id, "items": items, "updated_at": utc_now().isoformat()},
        on_conflict="user_id",
    ).execute()
    return items


def clear_cart(user_id: str) -> None:
    supabase = get_supabase_client(service_role=True)
    supabase.table("user_carts").delete().eq("user_id", user_id).execute()
