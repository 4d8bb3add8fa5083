"""Accounting dashboard, tax configuration and transaction export."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from jeffy_shared.config import settings
from jeffy_shared.exports import TRANSACTION_EXPORT_COLUMNS

from jeffy_api.responses import wrap_response
from jeffy_api.services import accounting_service, catalog_service
from jeffy_api.utils.exports import csv_response
from jeffy_api.utils.filtering import PeriodParams

router = APIRouter(prefix="/accounting", tags=["admin-accounting"])


@router.get("/dashboard")
async def dashboard(period: PeriodParams = Depends()):
    data = accounting_service.dashboard(period.start, period.end)
    return wrap_response(data, currency=settings.currency)


@router.get("/products-profit")
async def products_profit(period: PeriodParams = Depends()):
    data = accounting_service.products_profit(
        period.start, period.end, catalog_service.category_map()
    )
    return wrap_response(data, total_count=len(data), currency=settings.currency)


@router.get("/tax-config")
async def get_tax_config():
    return wrap_response(accounting_service.get_tax_config())


@router.put("/tax-config")
async def update_tax_config(body: dict[str, Any] = Body(...)):
    return wrap_response(accounting_service.update_tax_config(body))


@router.get("/export")
async def export_transactions(period: PeriodParams = Depends()):
    rows = accounting_service.list_transactions(period.start, period.end, transaction_type=None)
    return csv_response(rows, TRANSACTION_EXPORT_COLUMNS, "transactions")
