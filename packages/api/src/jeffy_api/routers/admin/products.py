"""Catalog management: products, variants, images and categories."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from pydantic import BaseModel

from jeffy_shared.exports import PRODUCT_EXPORT_COLUMNS
from jeffy_shared.models import CategoryIn, ProductIn, ProductUpdate, VariantIn

from jeffy_api.dependencies import PaginationParams
from jeffy_api.responses import wrap_response
from jeffy_api.services import catalog_service
from jeffy_api.utils.exports import csv_response

router = APIRouter(tags=["admin-catalog"])

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")


class VariantsBody(BaseModel):
    variants: list[VariantIn]


class VariantDelete(BaseModel):
    variant_ids: list[str] | None = None


@router.get("/products")
async def list_products(
    pagination: PaginationParams = Depends(),
    category: str | None = Query(None),
    search: str | None = Query(None),
    include_inactive: bool = Query(True),
):
    data, total = catalog_service.list_products(
        category=category,
        search=search,
        active_only=not include_inactive,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return wrap_response(data, total_count=total, page=pagination.page, page_size=pagination.page_size)


@router.get("/products/export")
async def export_products():
    return csv_response(catalog_service.export_products(), PRODUCT_EXPORT_COLUMNS, "products")


@router.post("/products", status_code=201)
async def create_product(body: ProductIn):
    return wrap_response(catalog_service.create_product(body))


@router.get("/products/{product_id}")
async def get_product(product_id: str):
    product = catalog_service.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return wrap_response(product)


@router.put("/products/{product_id}")
async def update_product(product_id: str, body: ProductUpdate):
    product = catalog_service.update_product(product_id, body)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return wrap_response(product)


@router.delete("/products/{product_id}")
async def delete_product(product_id: str):
    if not catalog_service.delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return wrap_response({"deleted": True})


@router.get("/products/{product_id}/variants")
async def list_variants(product_id: str):
    data = catalog_service.list_variants(product_id)
    return wrap_response(data, total_count=len(data))


@router.post("/products/{product_id}/variants", status_code=201)
async def create_variants(product_id: str, body: VariantsBody):
    data = catalog_service.create_variants(product_id, body.variants)
    return wrap_response(data, total_count=len(data))


@router.delete("/products/{product_id}/variants")
async def delete_variants(product_id: str, body: VariantDelete | None = None):
    ids = body.variant_ids if body else None
    return wrap_response({"deleted": catalog_service.delete_variants(product_id, ids)})


@router.post("/products/{product_id}/images", status_code=201)
async def upload_image(product_id: str, file: UploadFile = File(...)):
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported image type: {file.content_type}")
    if catalog_service.get_product(product_id, include_variants=False) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    content = await file.read()
    url = catalog_service.upload_product_image(
        product_id, file.filename or "image", content, file.content_type
    )
    return wrap_response({"url": url})


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


@router.post("/categories", status_code=201)
async def create_category(body: CategoryIn):
    return wrap_response(catalog_service.create_category(body))


@router.put("/categories/{category_id}")
async def update_category(category_id: str, body: CategoryIn):
    data = catalog_service.update_category(category_id, body.model_dump(exclude_unset=True))
    if data is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return wrap_response(data)


@router.delete("/categories/{category_id}")
async def delete_category(category_id: str):
    if not catalog_service.delete_category(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return wrap_response({"deleted": True})
