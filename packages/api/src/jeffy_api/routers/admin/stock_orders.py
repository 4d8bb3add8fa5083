"""Purchase orders to local suppliers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from jeffy_shared.models import StockOrderCreate, StockOrderUpdate

from jeffy_api.dependencies import AuthUser, require_admin
from jeffy_api.responses import wrap_response
from jeffy_api.services import stock_order_service
from jeffy_api.utils.exports import pdf_response
from jeffy_api.utils.pdf import render_purchase_order

router = APIRouter(prefix="/stock-orders", tags=["admin-stock-orders"])


@router.get("")
async def list_stock_orders(
    status: str | None = Query(None),
    search: str | None = Query(None),
):
    data = stock_order_service.list_stock_orders(status=status, search=search)
    return wrap_response(data, total_count=len(data))


@router.post("", status_code=201)
async def create_stock_order(body: StockOrderCreate, user: AuthUser = Depends(require_admin)):
    return wrap_response(stock_order_service.create_stock_order(body, created_by=user.user_id))


@router.get("/{stock_order_id}")
async def get_stock_order(stock_order_id: str):
    data = stock_order_service.get_stock_order(stock_order_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Stock order not found")
    return wrap_response(data)


@router.put("/{stock_order_id}")
async def update_stock_order(stock_order_id: str, body: StockOrderUpdate):
    data = stock_order_service.update_stock_order(stock_order_id, body)
    if data is None:
        raise HTTPException(status_code=404, detail="Stock order not found")
    return wrap_response(data)


@router.delete("/{stock_order_id}")
async def delete_stock_order(stock_order_id: str):
    if not stock_order_service.delete_stock_order(stock_order_id):
        raise HTTPException(status_code=404, detail="Stock order not found")
    return wrap_response({"deleted": True})


@router.get("/{stock_order_id}/pdf")
async def purchase_order_pdf(stock_order_id: str):
    order = stock_order_service.get_stock_order(stock_order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Stock order not found")
    content = render_purchase_order(order, order.get("items") or [])
    return pdf_response(content, f"{order.get('order_number', stock_order_id)}.pdf")
