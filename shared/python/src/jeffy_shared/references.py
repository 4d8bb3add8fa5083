"""
references.py — Human-readable document numbers.

    SHIP-2024-007      shipments (sequence within the year)
    PROC-2024-W03      weekly procurement batch (week of the month)
    PROC-2024-M03      monthly procurement batch
    PO-2024-0012       stock (purchase) orders
"""

from __future__ import annotations

import math
import re
from datetime import date

from jeffy_shared.constants import BatchType

_PO_RE = re.compile(r"^PO-(\d{4})-(\d+)$")


def shipment_reference(year: int, sequence: int) -> str:
    return f"SHIP-{year}-{sequence:03d}"


def batch_number(batch_type: BatchType, today: date) -> str:
    """Batch number for the week of the month (ceil(day / 7)) or the month."""
    if batch_type == "weekly":
        week = math.ceil(today.day / 7)
        return f"PROC-{today.year}-W{week:02d}"
    return f"PROC-{today.year}-M{today.month:02d}"


def next_stock_order_number(last_number: str | None, year: int) -> str:
    """
    Next purchase order number for `year`.

    `last_number` is the highest existing number for that year, or None.
    Numbers from another year or in an unexpected format restart at 1.
    """
    seq = 1
    if last_number:
        match = _PO_RE.match(last_number)
        if match and int(match.group(1)) == year:
            seq = int(match.group(2)) + 1
    return f"PO-{year}-{seq:04d}"
