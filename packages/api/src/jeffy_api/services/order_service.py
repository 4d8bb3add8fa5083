"""Customer orders: checkout, stock movements, status changes and driver assignment."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import structlog
from postgrest.exceptions import APIError

from jeffy_shared.db import get_supabase_client
from jeffy_shared.models import AssignDriver, OrderCreate, OrderItemIn
from jeffy_shared.pricing import compute_sale_financials
from jeffy_shared.time_utils import utc_now

from jeffy_api.errors import InsufficientStock, NotFound, ValidationFailed
from jeffy_api.services import notification_service
from jeffy_api.services.accounting_service import get_tax_config
from jeffy_api.utils.filtering import apply_period_filter, apply_status_filter, apply_text_search

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


def _stock_source(item: OrderItemIn) -> tuple[str, dict[str, Any]]:
    """Return (table, row) holding the stock count for an order line."""
    supabase = get_supabase_client(service_role=True)
    if item.variant_id:
        result = (
            supabase.table("product_variants")
            .select("id, product_id, name, stock")
            .eq("id", item.variant_id)
            .limit(1)
            .execute()
        )
        if not result.data:
            raise NotFound(f"Variant {item.variant_id} not found")
        return "product_variants", result.data[0]

    result = (
        supabase.table("products")
        .select("id, name, stock, has_variants")
        .eq("id", item.product_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFound(f"Product {item.product_id} not found")
    product = result.data[0]
    if product.get("has_variants"):
        raise ValidationFailed(
            f"Please select an option for {product.get('name') or item.product_name}",
            details={"product_id": item.product_id},
        )
    return "products", product


def check_stock(items: list[OrderItemIn]) -> list[tuple[OrderItemIn, str, dict[str, Any]]]:
    """
    Verify every line can be fulfilled before anything is written.

    Lines for the same product and variant are summed, so splitting a
    quantity across several lines cannot oversell.
    """
    checked = []
    sources: dict[tuple[str, str | None], tuple[str, dict[str, Any]]] = {}
    requested: dict[tuple[str, str | None], int] = {}
    for item in items:
        key = (item.product_id, item.variant_id)
        if key not in sources:
            sources[key] = _stock_source(item)
        requested[key] = requested.get(key, 0) + item.quantity
        table, row = sources[key]
        checked.append((item, table, row))

    for (product_id, variant_id), quantity in requested.items():
        _, row = sources[(product_id, variant_id)]
        available = int(row.get("stock") or 0)
        if available < quantity:
            raise InsufficientStock(
                f"Only {available} left in stock for {row.get('name') or product_id}",
                details={
                    "product_id": product_id,
                    "variant_id": variant_id,
                    "available": available,
                    "requested": quantity,
                },
            )
    return checked


def _decrement_stock(order_id: str, checked: list[tuple[OrderItemIn, str, dict[str, Any]]]) -> None:
    supabase = get_supabase_client(service_role=True)
    history = []
    running: dict[tuple[str, str], int] = {}
    for item, table, row in checked:
        key = (table, row["id"])
        previous = running.get(key, int(row.get("stock") or 0))
        new_stock = previous - item.quantity
        running[key] = new_stock
        supabase.table(table).update({"stock": new_stock}).eq("id", row["id"]).execute()
        history.append(
            {
                "product_id": item.product_id,
                "variant_id": item.variant_id,
                "change_type": "sale",
                "quantity_change": -item.quantity,
                "previous_stock": previous,
                "new_stock": new_stock,
                "reference_id": order_id,
                "notes": f"Order {order_id}",
            }
        )
        logger.info(
            "stock_decremented",
            product_id=item.product_id,
            variant_id=item.variant_id,
            previous=previous,
            new=new_stock,
        )
    if history:
        supabase.table("stock_history").insert(history).execute()


def record_sale_transaction(order: dict[str, Any], total_cost: float) -> dict[str, Any]:
    """Insert the financial_transactions row for a new order."""
    config = get_tax_config()
    fin = compute_sale_financials(
        float(order.get("total") or 0),
        total_cost,
        tax_rate=float(config["tax_rate"]),
        tax_inclusive=bool(config["tax_inclusive"]),
        import_vat_rate=float(config["import_vat_rate"]),
        corporate_tax_rate=float(config["corporate_tax_rate"]),
    )
    row = {
        "order_id": order["id"],
        "transaction_type": "sale",
        "amount": round(fin.revenue, 2),
        "cost_amount": round(fin.cost_amount, 2),
        "tax_amount": round(fin.tax_amount, 2),
        "import_vat_amount": round(fin.import_vat_amount, 2),
        "profit_amount": round(fin.profit_amount, 2),
        "corporate_tax_amount": round(fin.corporate_tax_amount, 2),
        "net_profit_after_tax": round(fin.net_profit_after_tax, 2),
        "currency": "ZAR",
        "description": f"Sale - order {str(order['id'])[:8].upper()}",
        "transaction_date": order.get("created_at") or utc_now().isoformat(),
    }
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("financial_transactions").insert(row).execute()
    return result.data[0]


def create_order(payload: OrderCreate, user_id: str | None) -> dict[str, Any]:
    checked = check_stock(payload.items)

    supabase = get_supabase_client(service_role=True)
    result = supabase.table("orders").insert(payload.to_insert_dict(user_id)).execute()
    order = result.data[0]
    logger.info("order_created", order_id=order["id"], total=order.get("total"), items=len(payload.items))

    _decrement_stock(order["id"], checked)

    # The order stands even if bookkeeping fails; accounting can be recomputed
    try:
        record_sale_transaction(order, payload.total_cost)
    except APIError as exc:
        logger.error("sale_transaction_failed", order_id=order["id"], error=str(exc))

    notification_service.notify_order(order)
    return order


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def get_order(order_id: str) -> dict[str, Any] | None:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("orders").select("*").eq("id", order_id).limit(1).execute()
    return result.data[0] if result.data else None


def list_user_orders(user_id: str, *, limit: int = 50) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("orders")
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return result.data


def _apply_order_search(query: Any, search: str | None) -> Any:
    """Match a full order id exactly, anything else against the customer email."""
    term = (search or "").strip()
    if not term:
        return query
    try:
        return query.eq("id", str(uuid.UUID(term)))
    except ValueError:
        return apply_text_search(query, ["user_email"], term)


def list_orders(
    *,
    status: str | None = None,
    search: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[dict[str, Any]], int | None]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("orders").select("*", count="exact")
    query = apply_status_filter(query, "status", status)
    query = _apply_order_search(query, search)
    query = apply_period_filter(query, "created_at", start, end)
    result = query.order("created_at", desc=True).range(offset, offset + limit - 1).execute()
    return result.data, result.count


def export_orders(start: datetime | None, end: datetime | None, status: str | None = None) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    query = supabase.table("orders").select("*")
    query = apply_status_filter(query, "status", status)
    query = apply_period_filter(query, "created_at", start, end)
    return query.order("created_at", desc=True).execute().data


# ---------------------------------------------------------------------------
# Status changes
# ---------------------------------------------------------------------------


def _status_changes(status: str) -> dict[str, Any]:
    now = utc_now().isoformat()
    changes: dict[str, Any] = {"status": status, "updated_at": now}
    if status == "ready_for_delivery":
        changes["ready_for_delivery"] = True
        changes["ready_for_delivery_at"] = now
    elif status == "delivered":
        changes["delivered_at"] = now
    return changes


def update_status(order_id: str, status: str, notes: str | None = None) -> dict[str, Any] | None:
    changes = _status_changes(status)
    if notes:
        changes["admin_notes"] = notes
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("orders").update(changes).eq("id", order_id).execute()
    if not result.data:
        return None
    order = result.data[0]
    logger.info("order_status_updated", order_id=order_id, status=status)
    notification_service.notify_order(order)
    return order


def bulk_update_status(order_ids: list[str], status: str) -> list[dict[str, Any]]:
    supabase = get_supabase_client(service_role=True)
    result = supabase.table("orders").update(_status_changes(status)).in_("id", order_ids).execute()
    logger.info("order_status_bulk_updated", count=len(result.data), status=status)
    for order in result.data:
        notification_service.notify_order(order)
    return result.data


def assign_driver(order_id: str, payload: AssignDriver) -> dict[str, Any]:
    supabase = get_supabase_client(service_role=True)
    driver_result = supabase.table("drivers").select("*").eq("id", payload.driver_id).limit(1).execute()
    if not driver_result.data:
        raise NotFound("Driver not found")
    driver = driver_result.data[0]
    if get_order(order_id) is None:
        raise NotFound("Order not found")

    now = utc_now().isoformat()
    order_result = (
        supabase.table("orders")
        .update({"assigned_driver_id": driver["id"], "status": "out_for_delivery", "updated_at": now})
        .eq("id", order_id)
        .execute()
    )
    order = order_result.data[0]

    assignment = (
        supabase.table("delivery_assignments")
        .insert(
            {
                "order_id": order_id,
                "driver_id": driver["id"],
                "status": "assigned",
                "assigned_at": now,
                "estimated_delivery_time": payload.estimated_delivery,
                "notes": payload.notes,
            }
        )
        .execute()
        .data[0]
    )
    supabase.table("drivers").update({"status": "busy"}).eq("id", driver["id"]).execute()

    notification_service.notify_order(
        order,
        message=notification_service.driver_assigned_message(driver.get("name")),
        notification_type="driver_assigned",
    )
    logger.info("driver_assigned", order_id=order_id, driver_id=driver["id"])
    return {"order": order, "assignment": assignment, "driver": driver}
