"""Page-number pagination helpers for list endpoints."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from fastapi import Query


class PaginationParams:
    """Dependency for extracting page/page_size query params."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="1-based page number"),
        page_size: int = Query(50, ge=1, le=500, description="Number of results per page"),
    ) -> None:
        self.page = page
        self.page_size = page_size

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def apply(self, query: Any) -> Any:
        """Restrict a Supabase query builder to this page (range is inclusive)."""
        return query.range(self.offset, self.offset + self.page_size - 1)


def build_links(
    path: str,
    params: dict[str, Any],
    page: int,
    page_size: int,
    total_count: int | None,
) -> dict[str, str]:
    """Build self/prev/next links for a paginated response."""
    base = {k: v for k, v in params.items() if v is not None}

    def _link(p: int) -> str:
        return f"{path}?{urlencode({**base, 'page': p, 'page_size': page_size})}"

    links = {"self": _link(page)}
    if page > 1:
        links["prev"] = _link(page - 1)
    if total_count is not None and page * page_size < total_count:
        links["next"] = _link(page + 1)
    return links
