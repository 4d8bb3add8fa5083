"""
jobs/promos.py — Deactivate promo codes past their expiry.

Validation already refuses expired codes; this keeps the admin list and
the is_active flag honest.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from jeffy_shared.db import get_supabase_client
from jeffy_shared.logging import get_logger
from jeffy_shared.time_utils import utc_now

log = get_logger(__name__, job="promos")


def expire_promos(*, now: datetime | None = None, client: Any | None = None) -> list[str]:
    """Set is_active=False on active codes whose expires_at has passed. Returns the codes."""
    client = client or get_supabase_client(service_role=True)
    cutoff = (now or utc_now()).isoformat()

    expired = (
        client.table("promo_codes")
        .select("id, code")
        .eq("is_active", True)
        .lt("expires_at", cutoff)
        .execute()
        .data
    )
    if not expired:
        log.info("promos_expired", count=0)
        return []

    client.table("promo_codes").update(
        {"is_active": False, "updated_at": utc_now().isoformat()}
    ).in_("id", [p["id"] for p in expired]).execute()

    codes = [p["code"] for p in expired]
    log.info("promos_expired", count=len(codes), codes=codes)
    return codes
