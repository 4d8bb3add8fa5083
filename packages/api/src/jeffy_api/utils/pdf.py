"""
PDF documents rendered with reportlab.

    render_purchase_order(order, items)   stock order sent to a supplier
    render_shipping_label(order)          A6 label stuck on a customer parcel
    render_invoice(order)                 customer invoice

All renderers return the PDF bytes; routers wrap them with pdf_response().
"""

from __future__ import annotations

import io
from typing import Any

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, A6
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from jeffy_shared.pricing import format_currency

JEFFY_YELLOW = colors.Color(0.92, 0.70, 0.03)
DARK = colors.Color(0.1, 0.1, 0.1)
GRAY = colors.Color(0.5, 0.5, 0.5)

COMPANY_NAME = "JEFFY COMMERCE"


class _Writer:
    """Tracks the cursor on a canvas and starts new pages as needed."""

    def __init__(self, c: canvas.Canvas, width: float, height: float, margin: float) -> None:
        self.c = c
        self.width = width
        self.height = height
        self.margin = margin
        self.y = height - margin

    def text(self, x: float, value: Any, *, bold: bool = False, size: int = 10, step: float = 14) -> None:
        font = "Helvetica-Bold" if bold else "Helvetica"
        self.c.setFont(font, size)
        self.c.setFillColor(DARK)
        for line in simpleSplit(str(value), font, size, self.width - x - self.margin):
            self.c.drawString(x, self.y, line)
            self.y -= step

    def rule(self, gap: float = 10) -> None:
        self.c.setLineWidth(0.6)
        self.c.line(self.margin, self.y, self.width - self.margin, self.y)
        self.y -= gap

    def ensure_space(self, needed: float) -> None:
        if self.y - needed < self.margin:
            self.c.showPage()
            self.y = self.height - self.margin


def _header_band(c: canvas.Canvas, width: float, height: float, title: str, right: list[str]) -> None:
    c.setFillColor(JEFFY_YELLOW)
    c.rect(0, height - 62, width, 62, stroke=0, fill=1)
    c.setFillColor(DARK)
    c.setFont("Helvetica-Bold", 22)
    c.drawString(18 * mm, height - 38, title)
    c.setFont("Helvetica", 10)
    for i, line in enumerate(right):
        c.drawRightString(width - 18 * mm, height - 28 - i * 14, line)


def render_purchase_order(order: dict[str, Any], items: list[dict[str, Any]]) -> bytes:
    buf = io.BytesIO()
    width, height = A4
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle(f"Purchase Order {order.get('order_number', '')}")

    _header_band(
        c,
        width,
        height,
        "PURCHASE ORDER",
        [f"PO Number: {order.get('order_number', '')}", f"Date: {order.get('order_date') or ''}"],
    )
    w = _Writer(c, width, height, 18 * mm)
    w.y = height - 90

    w.text(w.margin, "SUPPLIER INFORMATION", bold=True, size=12)
    w.text(w.margin, order.get("supplier_name", ""), bold=True)
    city_line = " ".join(
        part for part in (order.get("supplier_city"), order.get("supplier_postal_code")) if part
    )
    for line in (
        order.get("supplier_address"),
        f"{city_line}, {order.get('supplier_country')}" if city_line else None,
        f"Phone: {order['supplier_phone']}" if order.get("supplier_phone") else None,
        f"Email: {order['supplier_email']}" if order.get("supplier_email") else None,
    ):
        if line:
            w.text(w.margin, line)
    w.y -= 8

    w.text(w.margin, "SHIP TO:", bold=True, size=12)
    if order.get("shipping_contact_name"):
        w.text(w.margin, order["shipping_contact_name"], bold=True)
    w.text(w.margin, order.get("shipping_address", ""))
    w.text(
        w.margin,
        f"{order.get('shipping_city', '')} {order.get('shipping_postal_code', '')}, "
        f"{order.get('shipping_country', '')}",
    )
    if order.get("shipping_contact_phone"):
        w.text(w.margin, f"Phone: {order['shipping_contact_phone']}")
    if order.get("shipping_method"):
        w.text(w.margin, f"Shipping method: {order['shipping_method']}")
    w.y -= 8
    w.rule()

    cols = [w.margin, w.margin + 80 * mm, w.margin + 110 * mm, w.margin + 140 * mm]
    for x, label in zip(cols, ("Item", "Qty", "Unit cost", "Line total")):
        c.setFont("Helvetica-Bold", 10)
        c.drawString(x, w.y, label)
    w.y -= 6
    w.rule(14)

    total = 0.0
    for item in items:
        w.ensure_space(30)
        line_total = float(item.get("line_total") or 0)
        total += line_total
        row_y = w.y
        name = item.get("product_name", "")
        if item.get("product_sku"):
            name = f"{name} ({item['product_sku']})"
        w.text(cols[0], name)
        after_name = w.y
        w.y = row_y
        c.setFont("Helvetica", 10)
        c.drawString(cols[1], row_y, str(item.get("quantity", "")))
        c.drawString(cols[2], row_y, format_currency(float(item.get("unit_cost") or 0)))
        c.drawString(cols[3], row_y, format_currency(line_total))
        w.y = after_name - 2

    w.rule(16)
    c.setFont("Helvetica-Bold", 11)
    c.drawString(cols[2], w.y, "TOTAL:")
    c.drawString(cols[3], w.y, format_currency(total))
    w.y -= 24

    if order.get("notes"):
        w.text(w.margin, "NOTES", bold=True)
        w.text(w.margin, order["notes"])
    if order.get("expected_delivery_date"):
        w.text(w.margin, f"Expected delivery: {order['expected_delivery_date']}")

    c.showPage()
    c.save()
    return buf.getvalue()


def render_shipping_label(order: dict[str, Any], return_address: str | None = None) -> bytes:
    buf = io.BytesIO()
    width, height = A6
    c = canvas.Canvas(buf, pagesize=A6)
    w = _Writer(c, width, height, 8 * mm)

    address = order.get("shipping_address") or {}
    if isinstance(address, str):
        address = {"street_address": address}
    w.text(w.margin, COMPANY_NAME, bold=True, size=12)
    if return_address:
        w.text(w.margin, f"From: {return_address}", size=8, step=10)
    w.rule(14)

    w.text(w.margin, "DELIVER TO", bold=True, size=9)
    for line in (
        address.get("name") or order.get("user_email", ""),
        address.get("street_address") or address.get("address"),
        address.get("suburb"),
        " ".join(p for p in (address.get("city"), address.get("postal_code")) if p),
        address.get("phone"),
    ):
        if line:
            w.text(w.margin, line, size=11, step=14)
    w.rule(14)

    order_id = str(order.get("id", ""))
    w.text(w.margin, f"Order: {order_id[:8].upper()}", bold=True, size=12)
    item_count = sum(int(i.get("quantity") or 0) for i in order.get("items") or [])
    w.text(w.margin, f"Items: {item_count}")
    if order.get("created_at"):
        w.text(w.margin, f"Ordered: {str(order['created_at'])[:10]}")

    c.showPage()
    c.save()
    return buf.getvalue()


def render_invoice(order: dict[str, Any]) -> bytes:
    buf = io.BytesIO()
    width, height = A4
    c = canvas.Canvas(buf, pagesize=A4)
    order_id = str(order.get("id", ""))
    _header_band(
        c,
        width,
        height,
        COMPANY_NAME,
        [f"Invoice {order_id[:8].upper()}", f"Date: {str(order.get('created_at') or '')[:10]}"],
    )
    w = _Writer(c, width, height, 18 * mm)
    w.y = height - 90
    w.text(w.margin, f"Bill to: {order.get('user_email', '')}")
    w.y -= 6
    w.rule()

    for item in order.get("items") or []:
        w.ensure_space(20)
        qty = int(item.get("quantity") or 0)
        price = float(item.get("price") or 0)
        row_y = w.y
        w.text(w.margin, f"{qty} x {item.get('product_name') or item.get('name', '')}")
        c.setFont("Helvetica", 10)
        c.drawRightString(width - w.margin, row_y, format_currency(qty * price))

    w.rule(16)
    for label, key in (("Subtotal", "subtotal"), ("Discount", "discount"), ("Shipping", "shipping_cost"), ("Total", "total")):
        if order.get(key) is None:
            continue
        c.setFont("Helvetica-Bold" if key == "total" else "Helvetica", 10)
        c.drawString(width - w.margin - 70 * mm, w.y, label)
        c.drawRightString(width - w.margin, w.y, format_currency(float(order[key])))
        w.y -= 14

    c.setFillColor(GRAY)
    c.setFont("Helvetica", 8)
    c.drawString(w.margin, w.margin, "Thank you for shopping with Jeffy.")
    c.showPage()
    c.save()
    return buf.getvalue()
