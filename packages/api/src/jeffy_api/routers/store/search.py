"""Product search and HS code lookup."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from jeffy_shared.constants import HS_CODE_SEARCH_LIMIT, SEARCH_MIN_QUERY_LENGTH

from jeffy_api.responses import wrap_response
from jeffy_api.services import search_service

router = APIRouter(tags=["search"])


class SearchRequest(BaseModel):
    query: str
    filters: dict[str, Any] = Field(default_factory=dict)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


def _require_term(q: str | None) -> str:
    term = (q or "").strip()
    if len(term) < SEARCH_MIN_QUERY_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Search query must be at least {SEARCH_MIN_QUERY_LENGTH} characters",
        )
    return term


@router.get("/search")
async def search(
    q: str | None = Query(None, description="Search query"),
    category: str | None = Query(None),
    min_price: float | None = Query(None, alias="minPrice", ge=0),
    max_price: float | None = Query(None, alias="maxPrice", ge=0),
    in_stock: bool = Query(False, alias="inStock"),
    limit: int = Query(20, ge=1, le=100),
):
    term = _require_term(q)
    results = search_service.search_products(
        term,
        category=category,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        limit=limit,
    )
    return wrap_response(results, total_count=len(results))


@router.post("/search")
async def search_paginated(body: SearchRequest):
    term = _require_term(body.query)
    results, total = search_service.search_products_paginated(
        term, filters=body.filters, page=body.page, limit=body.limit
    )
    return wrap_response(results, total_count=total, page=body.page, page_size=body.limit)


@router.get("/hs-codes/search")
async def search_hs_codes(
    q: str | None = Query(None),
    limit: int = Query(HS_CODE_SEARCH_LIMIT, ge=1, le=100),
):
    term = _require_term(q)
    results = search_service.search_hs_codes(term, limit=limit)
    return wrap_response(results, total_count=len(results))
