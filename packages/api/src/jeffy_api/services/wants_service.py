"""
Jeffy Wants: shopper requests for products the store should stock.

Each request gets a shareable six-character code. Friends approve it
through the public page; the approval that reaches `approvals_needed`
completes the request and earns the requester a free product. Staff
work the queue and mark completed requests fulfilled once the free
product has shipped.
"""

from __future__ import annotations

from typing import Any

import structlog

from jeffy_shared.config import settings
from jeffy_shared.constants import (
    CODE_GENERATION_ATTEMPTS,
    PUBLIC_WANT_STATUSES,
    WANT_APPROVALS_NEEDED,
    WANT_CODE_LENGTH,
)
from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import WantApprovalIn, WantRequestIn, WantShippingIn
from jeffy_shared.promotions import generate_code
from jeffy_shared.time_utils import utc_now

from jeffy_api.errors import Conflict, Forbidden, NotFound, ValidationFailed
from jeffy_api.utils.filtering import apply_status_filter

logger = structlog.get_logger(__name__)

REQUESTS_TABLE = "jeffy_requests"
APPROVALS_TABLE = "jeffy_approvals"

# Columns anyone holding the code may see
PUBLIC_COLUMNS = (
    "id",
    "request_text",
    "requester_name",
    "referral_code",
    "approvals_needed",
    "approvals_received",
    "status",
    "is_free_product_earned",
    "matched_product_name",
    "created_at",
)
PUBLIC_APPROVAL_COLUMNS = ("id", "approver_name", "approval_type", "comment", "created_at")


def shareable_link(code: str) -> str:
    return f"{settings.site_url}/want/{code}"


def _unique_want_code() -> str:
    supabase = get_supabase_client(service_role=True)
    for _ in range(CODE_GENERATION_ATTEMPTS):
        code = generate_code(length=WANT_CODE_LENGTH)
        taken = supabase.table(REQUESTS_TABLE).select("id").eq("referral_code", code).limit(1).execute()
        if not taken.data:
            return code
    raise Conflict("Could not generate a unique code, please try again")


def _by_code(code: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table(REQUESTS_TABLE)
        .select("*")
        .eq("referral_code", code.strip().upper())
        .limit(1)
        .execute()
    )
    return result.data[0] if result.data else None


def _approvals_for(request_ids: list[str]) -> dict[str, list[dict[str, Any]]]:
    if not request_ids:
        return {}
    supabase = get_supabase_client(service_role=True)
    rows = (
        supabase.table(APPROVALS_TABLE)
        .select("*")
        .in_("request_id", request_ids)
        .order("created_at", desc=True)
        .execute()
        .data
    )
    grouped: dict[str, list[dict[str, Any]]] = {}
    for row in rows:
        grouped.setdefault(row["request_id"], []).append(row)
    return grouped


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


def create_request(payload: WantRequestIn) -> dict[str, Any]:
    code = _unique_want_code()
    supabase = get_supabase_client(service_role=True)
    row = supabase.table(REQUESTS_TABLE).insert(payload.to_insert_dict(code)).execute().data[0]
    logger.info("want_created", request_id=row.get("id"), code=code)
    return {**row, "shareable_link": shareable_link(code)}


def list_popular(limit: int = 20) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table(REQUESTS_TABLE)
        .select("*")
        .in_("status", list(PUBLIC_WANT_STATUSES))
        .order("approvals_received", desc=True)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return result.data


def get_public(
    code: str,
    *,
    track: bool = False,
    source: str = "direct",
    ip_address: str = "unknown",
    user_agent: str = "",
    referrer: str = "",
) -> dict[str, Any] | None:
    """The request behind `code` with its approvals; optionally log the link click."""
    request = _by_code(code)
    if request is None:
        return None
    approvals = _approvals_for([request["id"]]).get(request["id"], [])

    if track:
        supabase = get_supabase_client(service_role=True)
        supabase.table("jeffy_link_clicks").insert(
            {
                "request_id": request["id"],
                "ip_address": ip_address,
                "user_agent": user_agent,
                "referrer": referrer,
                "referral_source": source,
            }
        ).execute()

    return {
        **{k: request.get(k) for k in PUBLIC_COLUMNS},
        "approvals": [{k: a.get(k) for k in PUBLIC_APPROVAL_COLUMNS} for a in approvals],
    }


def approve(
    code: str,
    payload: WantApprovalIn,
    *,
    ip_address: str = "unknown",
    user_agent: str = "",
) -> dict[str, Any]:
    request = _by_code(code)
    if request is None:
        raise NotFound("Request not found")
    if request.get("status") != "active":
        raise ValidationFailed("This request is no longer accepting approvals")
    if payload.approver_email == str(request.get("requester_email") or "").lower():
        raise ValidationFailed("You cannot approve your own request")

    supabase = get_supabase_client(service_role=True)
    duplicate = (
        supabase.table(APPROVALS_TABLE)
        .select("id")
        .eq("request_id", request["id"])
        .eq("approver_email", payload.approver_email)
        .limit(1)
        .execute()
    )
    if duplicate.data:
        raise ValidationFailed("You have already approved this request")

    approval = (
        supabase.table(APPROVALS_TABLE)
        .insert(
            {
                **payload.model_dump(),
                "request_id": request["id"],
                "ip_address": ip_address,
                "user_agent": user_agent,
            }
        )
        .execute()
        .data[0]
    )

    received = int(request.get("approvals_received") or 0) + 1
    needed = int(request.get("approvals_needed") or WANT_APPROVALS_NEEDED)
    changes: dict[str, Any] = {"approvals_received": received, "updated_at": utc_now().isoformat()}
    if received >= needed:
        changes.update({"status": "completed", "is_free_product_earned": True})
    updated = supabase.table(REQUESTS_TABLE).update(changes).eq("id", request["id"]).execute().data[0]
    logger.info("want_approved", request_id=request["id"], received=received, needed=needed)

    if updated.get("is_free_product_earned"):
        message = "Congratulations! This request has earned a FREE product!"
    else:
        message = f"Thanks for your approval! {received}/{needed} approvals received."
    return {
        "approval": approval,
        "request": {
            k: updated.get(k)
            for k in ("approvals_received", "approvals_needed", "status", "is_free_product_earned")
        },
        "message": message,
    }


def save_shipping_address(code: str, payload: WantShippingIn) -> dict[str, Any]:
    """Record where the earned free product goes; only the requester may do this."""
    request = _by_code(code)
    if request is None:
        raise NotFound("Request not found")
    if str(request.get("requester_email") or "").lower() != payload.requester_email.strip().lower():
        raise Forbidden("Email does not match request owner")
    if not request.get("is_free_product_earned"):
        raise ValidationFailed("This request has not yet earned a free product")

    supabase = get_supabase_client(service_role=True)
    supabase.table(REQUESTS_TABLE).update(
        {"shipping_address": payload.shipping_address, "updated_at": utc_now().isoformat()}
    ).eq("id", request["id"]).execute()
    logger.info("want_shipping_saved", request_id=request["id"])
    return {"message": "Shipping address saved! We will process your free product soon."}


# ---------------------------------------------------------------------------
# Admin queue
# ---------------------------------------------------------------------------


def list_all(status: str | None = None, limit: int = 100) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table(REQUESTS_TABLE).select("*")
    query = apply_status_filter(query, "status", status)
    requests = query.order("created_at", desc=True).limit(limit).execute().data
    approvals = _approvals_for([r["id"] for r in requests])
    return [{**r, "approvals": approvals.get(r["id"], [])} for r in requests]


def status_counts(requests: list[dict[str, Any]]) -> dict[str, int]:
    counts = {"total": len(requests), "active": 0, "completed": 0, "fulfilled": 0}
    for r in requests:
        if r.get("status") in counts:
            counts[r["status"]] += 1
    return counts


def update_status(request_id: str, status: str, admin_notes: str | None = None) -> dict[str, Any] | None:
    now = utc_now().isoformat()
    changes: dict[str, Any] = {"status": status, "updated_at": now}
    if status == "fulfilled":
        changes["free_product_shipped"] = True
        changes["fulfilled_at"] = now
    if admin_notes is not None:
        changes["admin_notes"] = admin_notes
    supabase = get_supabase_client(service_role=True)
    result = supabase.table(REQUESTS_TABLE).update(changes).eq("id", request_id).execute()
    if result.data:
        logger.info("want_status_updated", request_id=request_id, status=status)
    return result.data[0] if result.data else None
