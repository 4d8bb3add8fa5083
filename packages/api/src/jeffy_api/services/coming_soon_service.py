"""Launch mailing list collected by the coming-soon page."""

from __future__ import annotations

from typing import Any

import structlog

from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import ComingSoonSignupIn

from jeffy_api.errors import ValidationFailed

logger = structlog.get_logger(__name__)


def signup(payload: ComingSoonSignupIn) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    existing = (
        supabase.table("coming_soon_signups").select("id").eq("email", payload.email).limit(1).execute()
    )
    if existing.data:
        raise ValidationFailed("Email already registered")
    row = supabase.table("coming_soon_signups").insert(payload.to_insert_dict()).execute().data[0]
    logger.info("coming_soon_signup", signup_id=row.get("id"))
    return row


def list_signups() -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    return supabase.table("coming_soon_signups").select("*").order("created_at", desc=True).execute().data
