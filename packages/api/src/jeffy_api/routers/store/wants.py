"""Jeffy Wants: public product requests, approvals and the launch list."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Request

from jeffy_shared.models import ComingSoonSignupIn, WantApprovalIn, WantRequestIn, WantShippingIn

from jeffy_api.responses import wrap_response
from jeffy_api.services import coming_soon_service, wants_service

router = APIRouter(tags=["jeffy-wants"])


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@router.post("/jeffy-wants", status_code=201)
async def create_want(body: WantRequestIn):
    data = wants_service.create_request(body)
    return wrap_response(data, links={"share": data["shareable_link"]})


@router.get("/jeffy-wants")
async def popular_wants(limit: int = Query(20, ge=1, le=100)):
    data = wants_service.list_popular(limit)
    return wrap_response(data, total_count=len(data))


@router.get("/jeffy-wants/{code}")
async def get_want(
    code: str,
    request: Request,
    track: bool = Query(False),
    source: str = Query("direct"),
):
    data = wants_service.get_public(
        code,
        track=track,
        source=source,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("User-Agent", ""),
        referrer=request.headers.get("Referer", ""),
    )
    if data is None:
        raise HTTPException(status_code=404, detail="Request not found")
    return wrap_response(data)


@router.post("/jeffy-wants/{code}", status_code=201)
async def approve_want(code: str, body: WantApprovalIn, request: Request):
    data = wants_service.approve(
        code,
        body,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("User-Agent", ""),
    )
    return wrap_response(data)


@router.put("/jeffy-wants/{code}")
async def save_shipping_address(code: str, body: WantShippingIn):
    return wrap_response(wants_service.save_shipping_address(code, body))


@router.post("/coming-soon", status_code=201)
async def coming_soon_signup(body: ComingSoonSignupIn):
    return wrap_response(coming_soon_service.signup(body))
