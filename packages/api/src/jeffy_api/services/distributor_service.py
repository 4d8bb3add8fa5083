"""Distributor CRUD."""

from __future__ import annotations

from typing import Any

import structlog

from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import DistributorIn
from jeffy_shared.time_utils import utc_now

from jeffy_api.utils.filtering import apply_status_filter

logger = structlog.get_logger(__name__)


def list_distributors(*, location_id: str | None = None, status: str | None = None) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("distributors").select("*")
    if location_id:
        query = query.eq("location_id", location_id)
    query = apply_status_filter(query, "status", status)
    return query.order("created_at", desc=True).execute().data


def get_distributor(distributor_id: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("distributors").select("*").eq("id", distributor_id).limit(1).execute()
    return result.data[0] if result.data else None


def create_distributor(payload: DistributorIn) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    row = supabase.table("distributors").insert(payload.to_insert_dict()).execute().data[0]
    logger.info("distributor_created", distributor_id=row.get("id"))
    return row


def update_distributor(distributor_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
    changes = {k: v for k, v in changes.items() if k not in ("id", "created_at")}
    changes["updated_at"] = utc_now().isoformat()
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("distributors").update(changes).eq("id", distributor_id).execute()
    return result.data[0] if result.data else None


def delete_distributor(distributor_id: str) -> bool:
    supabase = get_supabase_client(service_role=True)
    return bool(supabase.table("distributors").delete().eq("id", distributor_id).execute().data)
