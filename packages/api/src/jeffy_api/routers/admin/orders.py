"""Order management for staff: listing, status changes, driver assignment, labels."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from jeffy_shared.exports import ORDER_EXPORT_COLUMNS
from jeffy_shared.models import AssignDriver, BulkStatusUpdate, StatusUpdate
from jeffy_shared.time_utils import resolve_period

from jeffy_api.dependencies import PaginationParams
from jeffy_api.responses import wrap_response
from jeffy_api.services import order_service
from jeffy_api.utils.exports import csv_response, pdf_response
from jeffy_api.utils.filtering import PeriodParams
from jeffy_api.utils.pdf import render_invoice, render_shipping_label

router = APIRouter(prefix="/orders", tags=["admin-orders"])


@router.get("")
async def list_orders(
    pagination: PaginationParams = Depends(),
    status: str | None = Query(None),
    search: str | None = Query(None),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
):
    start, end = (None, None)
    if start_date or end_date:
        start, end = resolve_period(start=start_date, end=end_date)
    data, total = order_service.list_orders(
        status=status,
        search=search,
        start=start,
        end=end,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return wrap_response(data, total_count=total, page=pagination.page, page_size=pagination.page_size)


@router.get("/export")
async def export_orders(
    period: PeriodParams = Depends(),
    status: str | None = Query(None),
):
    rows = order_service.export_orders(period.start, period.end, status)
    return csv_response(rows, ORDER_EXPORT_COLUMNS, "orders")


@router.put("/bulk-status")
async def bulk_status(body: BulkStatusUpdate):
    data = order_service.bulk_update_status(body.order_ids, body.status)
    return wrap_response(data, total_count=len(data))


@router.get("/{order_id}")
async def get_order(order_id: str):
    order = order_service.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return wrap_response(order)


@router.put("/{order_id}/status")
async def update_status(order_id: str, body: StatusUpdate):
    order = order_service.update_status(order_id, body.status, body.notes)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return wrap_response(order)


@router.post("/{order_id}/assign-driver")
async def assign_driver(order_id: str, body: AssignDriver):
    return wrap_response(order_service.assign_driver(order_id, body))


@router.get("/{order_id}/label")
async def shipping_label(order_id: str):
    order = order_service.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return pdf_response(render_shipping_label(order), f"label-{order_id[:8]}.pdf")


@router.get("/{order_id}/invoice")
async def invoice(order_id: str):
    order = order_service.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return pdf_response(render_invoice(order), f"invoice-{order_id[:8]}.pdf")
