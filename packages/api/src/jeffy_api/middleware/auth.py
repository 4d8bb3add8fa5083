"""Supabase JWT and API key authentication with role checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog
from fastapi import Depends, HTTPException, Request
from jose import JWTError, jwt

from jeffy_shared.config import settings
from jeffy_shared.constants import ROLE_ORDER, Role
from jeffy_shared.db import get_supabase_client

logger = structlog.get_logger(__name__)


@dataclass
class AuthUser:
    user_id: str
    role: Role = "customer"
    email: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def _validate_jwt(token: str) -> dict[str, Any] | None:
    """Validate a Supabase access token and return its claims."""
    try:
        return jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience="authenticated",
        )
    except JWTError as exc:
        logger.info("jwt_rejected", error=str(exc))
        return None


def _profile_role(user_id: str) -> tuple[str, str | None]:
    """Role and email from user_profiles; customers may not have a row yet."""
    supabase = get_supabase_client(service_role=True)
    result = (
        supabase.table("user_profiles")
        .select("role, email")
        .eq("id", user_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        return "customer", None
    row = result.data[0]
    return row.get("role") or "customer", row.get("email")


async def get_current_user(request: Request) -> AuthUser | None:
    """Extract and validate the caller from a Bearer token or API key.

    Returns None if no credentials are provided (public access).
    Raises 401 if credentials are invalid.
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        claims = _validate_jwt(auth_header[7:])
        if claims is None or not claims.get("sub"):
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        user_id = claims["sub"]
        role, email = _profile_role(user_id)
        user = AuthUser(
            user_id=user_id,
            role=role if role in ROLE_ORDER else "customer",
            email=email or claims.get("email"),
            metadata=claims.get("user_metadata") or {},
        )
        request.state.user = user
        structlog.contextvars.bind_contextvars(user_id=user_id)
        return user

    # Service integrations (driver app, POS) authenticate with a key
    api_key = request.headers.get("X-API-Key")
    if api_key:
        supabase = get_supabase_client(service_role=True)
        result = (
            supabase.table("api_keys")
            .select("user_id, role, email, metadata")
            .eq("key", api_key)
            .eq("active", True)
            .limit(1)
            .execute()
        )
        if not result.data:
            raise HTTPException(status_code=401, detail="Invalid API key")
        row = result.data[0]
        user = AuthUser(
            user_id=row["user_id"],
            role=row.get("role") or "customer",
            email=row.get("email"),
            metadata=row.get("metadata") or {},
        )
        request.state.user = user
        return user

    return None


def require_auth(min_role: Role = "customer"):
    """Dependency factory that requires authentication at a minimum role."""

    async def _dependency(
        user: AuthUser | None = Depends(get_current_user),
    ) -> AuthUser:
        if user is None:
            raise HTTPException(status_code=401, detail="Authentication required")
        if ROLE_ORDER.get(user.role, 0) < ROLE_ORDER[min_role]:
            logger.warning(
                "access_denied", user_id=user.user_id, role=user.role, required=min_role
            )
            raise HTTPException(
                status_code=403,
                detail=f"This endpoint requires the '{min_role}' role.",
            )
        return user

    return _dependency


require_customer = require_auth("customer")
require_driver = require_auth("driver")
require_admin = require_auth("admin")
