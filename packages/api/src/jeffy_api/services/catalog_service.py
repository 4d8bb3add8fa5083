"""Products, variants, categories and store locations."""

from __future__ import annotations

from typing import Any

import structlog
from postgrest.exceptions import APIError

from jeffy_shared.config import settings
from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import CategoryIn, ProductIn, ProductUpdate, VariantIn
from jeffy_shared.time_utils import utc_now

from jeffy_api.errors import NotFound
from jeffy_api.utils.cache import catalog_cache
from jeffy_api.utils.filtering import apply_text_search

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


def _load_categories() -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("categories")
        .select("*")
        .eq("is_active", True)
        .order("name")
        .execute()
    )
    return result.data


def list_categories() -> list[dict[str, Any]]:
    """Active categories; the storefront renders an empty menu on DB failure."""
    try:
        return catalog_cache.get_or_load("categories", _load_categories)
    except APIError as exc:
        logger.warning("categories_unavailable", error=str(exc))
        return []


def create_category(payload: CategoryIn) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("categories").insert(payload.to_insert_dict()).execute()
    catalog_cache.delete("categories")
    logger.info("category_created", name=payload.name)
    return result.data[0]


def update_category(category_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("categories").update(changes).eq("id", category_id).execute()
    catalog_cache.delete("categories")
    return result.data[0] if result.data else None


def delete_category(category_id: str) -> bool:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("categories").delete().eq("id", category_id).execute()
    catalog_cache.delete("categories")
    return bool(result.data)


def category_map() -> dict[str, str]:
    """product_id -> category name, for analytics."""
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("products").select("id, category").execute()
    return {str(r["id"]): r.get("category") or "" for r in result.data}


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


def list_products(
    *,
    category: str | None = None,
    search: str | None = None,
    active_only: bool = True,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[dict[str, Any]], int | None]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("products").select("*", count="exact")
    if active_only:
        query = query.eq("is_active", True)
    if category and category != "all":
        query = query.eq("category", category)
    query = apply_text_search(query, ["name", "sku", "description"], search)
    result = query.order("name").range(offset, offset + limit - 1).execute()
    return result.data, result.count


def get_product(product_id: str, *, include_variants: bool = True) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("products").select("*").eq("id", product_id).limit(1).execute()
    if not result.data:
        return None
    product = result.data[0]
    if include_variants:
        product["variants"] = list_variants(product_id)
    return product


def get_variant(variant_id: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("product_variants").select("*").eq("id", variant_id).limit(1).execute()
    )
    return result.data[0] if result.data else None


def list_variants(product_id: str) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("product_variants")
        .select("*")
        .eq("product_id", product_id)
        .order("name")
        .execute()
    )
    return result.data


def create_product(payload: ProductIn) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("products").insert(payload.to_insert_dict()).execute()
    product = result.data[0]
    logger.info("product_created", product_id=product.get("id"), name=payload.name)
    return product


def update_product(product_id: str, payload: ProductUpdate) -> dict[str, Any] | None:
    changes = payload.to_update_dict()
    if not changes:
        return get_product(product_id, include_variants=False)
    changes["updated_at"] = utc_now().isoformat()
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("products").update(changes).eq("id", product_id).execute()
    return result.data[0] if result.data else None


def delete_product(product_id: str) -> bool:
    supabase = get_supabase_client(service_role=True)
    supabase.table("product_variants").delete().eq("product_id", product_id).execute()
    result = supabase.table("products").delete().eq("id", product_id).execute()
    if result.data:
        logger.info("product_deleted", product_id=product_id)
    return bool(result.data)


def create_variants(product_id: str, variants: list[VariantIn]) -> list[dict[str, Any]]:
    if get_product(product_id, include_variants=False) is None:
        raise NotFound("Product not found")
    supabase = get_supabase_client(service_role=True)
    rows = [v.to_insert_dict(product_id) for v in variants]
    result = supabase.table("product_variants").insert(rows).execute()
    supabase.table("products").update({"has_variants": True}).eq("id", product_id).execute()
    logger.info("variants_created", product_id=product_id, count=len(rows))
    return result.data


def delete_variants(product_id: str, variant_ids: list[str] | None = None) -> int:
    """Delete the given variants, or all of them when no ids are passed."""
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("product_variants").delete().eq("product_id", product_id)
    if variant_ids:
        query = query.in_("id", variant_ids)
    result = query.execute()
    if not list_variants(product_id):
        supabase.table("products").update({"has_variants": False}).eq("id", product_id).execute()
    return len(result.data)


def upload_product_image(
    product_id: str,
    filename: str,
    content: bytes,
    content_type: str,
) -> str:
    """Store an image in the products bucket and return its public URL."""
    supabase = get_supabase_client(service_role=True)
    path = f"{product_id}/{int(utc_now().timestamp())}-{filename}"
    bucket = supabase.storage.from_(settings.storage_bucket_products)
    bucket.upload(path, content, {"content-type": content_type})
    url = bucket.get_public_url(path)
    logger.info("product_image_uploaded", product_id=product_id, path=path)
    return url


def export_products() -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    return supabase.table("products").select("*").order("name").execute().data


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------


def _load_locations() -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("locations")
        .select("*")
        .eq("is_active", True)
        .order("name")
        .execute()
    )
    return result.data


def list_locations() -> list[dict[str, Any]]:
    return catalog_cache.get_or_load("locations", _load_locations)
