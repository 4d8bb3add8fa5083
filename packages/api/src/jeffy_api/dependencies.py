"""Shared FastAPI dependencies."""

from __future__ import annotations

from jeffy_shared.db import get_supabase_client

from jeffy_api.middleware.auth import (
    AuthUser,
    get_current_user,
    require_admin,
    require_auth,
    require_customer,
    require_driver,
)
from jeffy_api.utils.pagination import PaginationParams

__all__ = [
    "AuthUser",
    "PaginationParams",
    "get_current_user",
    "get_supabase_client",
    "require_admin",
    "require_auth",
    "require_customer",
    "require_driver",
]
