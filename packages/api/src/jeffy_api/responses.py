"""
Response envelopes shared by every router.

Success bodies are {"data", "meta", "links"}; errors are
{"error": {"code", "message", "details"?}}. Money endpoints pass
`currency` so clients never have to assume ZAR.
"""

from __future__ import annotations

import math
from typing import Any


def wrap_response(
    data: Any,
    *,
    total_count: int | None = None,
    page: int | None = None,
    page_size: int | None = None,
    currency: str | None = None,
    links: dict[str, str] | None = None,
) -> dict[str, Any]:
    meta: dict[str, Any] = {}
    if total_count is not None:
        meta["total_count"] = total_count
        if page_size:
            meta["total_pages"] = max(1, math.ceil(total_count / page_size))
    if page is not None:
        meta["page"] = page
    if page_size is not None:
        meta["page_size"] = page_size
    if currency is not None:
        meta["currency"] = currency
    return {"data": data, "meta": meta, "links": links or {}}


def error_response(
    code: str,
    message: str,
    *,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Error body; `details` is omitted when empty."""
    body: dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    return {"error": body}
