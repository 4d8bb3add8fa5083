"""Storefront product search and HS code lookup."""

from __future__ import annotations

import re
from typing import Any

from jeffy_shared.constants import HS_CODE_SEARCH_LIMIT
from jeffy_shared.db import get_supabase_client

from jeffy_api.utils.cache import hs_code_cache
from jeffy_api.utils.filtering import apply_text_search, sanitize_search_term


def _apply_product_filters(
    query: Any,
    *,
    category: str | None,
    min_price: float | None,
    max_price: float | None,
    in_stock: bool,
) -> Any:
    if category and category != "all":
        query = query.eq("category", category)
    if min_price is not None:
        query = query.gte("price", min_price)
    if max_price is not None:
        query = query.lte("price", max_price)
    if in_stock:
        query = query.gt("stock", 0)
    return query


def rank_results(products: list[dict[str, Any]], term: str) -> list[dict[str, Any]]:
    """Exact name matches first, then names starting with the term; stable otherwise."""
    needle = term.strip().lower()

    def _rank(p: dict[str, Any]) -> int:
        name = str(p.get("name") or "").lower()
        if name == needle:
            return 0
        if name.startswith(needle):
            return 1
        return 2

    return sorted(products, key=_rank)


def highlight(text: str | None, term: str) -> str:
    """Wrap case-insensitive matches of `term` in **bold** markers."""
    if not text:
        return ""
    if not term:
        return text
    pattern = re.compile(re.escape(term), re.IGNORECASE)
    return pattern.sub(lambda m: f"**{m.group(0)}**", text)


def search_products(
    term: str,
    *,
    category: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    in_stock: bool = False,
    limit: int = 20,
) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("products").select("*").eq("is_active", True)
    query = apply_text_search(query, ["name", "description"], term)
    query = _apply_product_filters(
        query, category=category, min_price=min_price, max_price=max_price, in_stock=in_stock
    )
    result = query.order("stock", desc=True).limit(limit).execute()
    return rank_results(result.data, sanitize_search_term(term))


def search_products_paginated(
    term: str,
    *,
    filters: dict[str, Any],
    page: int,
    limit: int,
) -> tuple[list[dict[str, Any]], int]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("products").select("*", count="exact").eq("is_active", True)
    query = apply_text_search(query, ["name", "description"], term)
    query = _apply_product_filters(
        query,
        category=filters.get("category"),
        min_price=filters.get("minPrice", filters.get("min_price")),
        max_price=filters.get("maxPrice", filters.get("max_price")),
        in_stock=bool(filters.get("inStock", filters.get("in_stock", False))),
    )
    offset = (page - 1) * limit
    result = query.order("stock", desc=True).range(offset, offset + limit - 1).execute()

    clean = sanitize_search_term(term)
    rows = []
    for product in rank_results(result.data, clean):
        rows.append(
            {
                **product,
                "highlighted_name": highlight(product.get("name"), clean),
                "highlighted_description": highlight(product.get("description"), clean),
            }
        )
    total = result.count if result.count is not None else len(rows)
    return rows, total


def search_hs_codes(term: str, limit: int = HS_CODE_SEARCH_LIMIT) -> list[dict[str, Any]]:
    cache_key = f"hs:{term.lower()}:{limit}"
    cached = hs_code_cache.get(cache_key)
    if cached is not None:
        return cached

    supabase = get_supabase_client(service_role=True)
    query = supabase.table("hs_codes").select("*").eq("is_active", True)
    query = apply_text_search(query, ["hs_code", "description"], term)
    result = query.order("hs_code").limit(limit).execute()
    hs_code_cache.set(cache_key, result.data)
    return result.data
