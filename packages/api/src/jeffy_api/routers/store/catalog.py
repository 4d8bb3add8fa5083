"""Public catalog endpoints: categories, products and store locations."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from jeffy_api.dependencies import PaginationParams
from jeffy_api.responses import wrap_response
from jeffy_api.services import catalog_service
from jeffy_api.utils.pagination import build_links

router = APIRouter(tags=["catalog"])


@router.get("/categories")
async def list_categories():
    data = catalog_service.list_categories()
    return wrap_response(data, total_count=len(data))


@router.get("/products")
async def list_products(
    pagination: PaginationParams = Depends(),
    category: str | None = Query(None),
):
    data, total = catalog_service.list_products(
        category=category, offset=pagination.offset, limit=pagination.page_size
    )
    links = build_links(
        "/api/products", {"category": category}, pagination.page, pagination.page_size, total
    )
    return wrap_response(
        data,
        total_count=total,
        page=pagination.page,
        page_size=pagination.page_size,
        links=links,
    )


@router.get("/products/{product_id}")
async def get_product(product_id: str):
    product = catalog_service.get_product(product_id)
    if product is None or not product.get("is_active", True):
        raise HTTPException(status_code=404, detail="Product not found")
    return wrap_response(product)


@router.get("/locations")
async def list_locations():
    data = catalog_service.list_locations()
    return wrap_response(data, total_count=len(data))
