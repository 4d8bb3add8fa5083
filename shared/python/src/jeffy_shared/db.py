"""
db.py — Supabase client singletons.

Usage:
    from jeffy_shared.db import get_supabase_client

    supabase = get_supabase_client()                    # anon key (RLS applies)
    supabase = get_supabase_client(service_role=True)   # service key (API + ops)
"""

from __future__ import annotations

import threading
from typing import Optional

import structlog
from supabase import Client, create_client

from jeffy_shared.config import settings

logger = structlog.get_logger(__name__)

_supabase_lock = threading.Lock()
_clients: dict[str, Client] = {}


def _key_for(role: str) -> str:
    if role == "service_role":
        if not settings.supabase_service_key:
            raise RuntimeError(
                "SUPABASE_SERVICE_KEY is not set. "
                "Set it in .env before using service_role=True."
            )
        return settings.supabase_service_key
    if not settings.supabase_anon_key:
        raise RuntimeError("SUPABASE_ANON_KEY is not set. Set it in .env.")
    return settings.supabase_anon_key


def get_supabase_client(*, service_role: bool = False) -> Client:
    """
    Return a singleton Supabase client, one per role per process.

    Args:
        service_role: If True, uses the service role key (bypasses RLS).
                      If False (default), uses the anon key.
    """
    role = "service_role" if service_role else "anon"
    with _supabase_lock:
        client: Optional[Client] = _clients.get(role)
        if client is None:
            client = create_client(settings.supabase_url, _key_for(role))
            _clients[role] = client
            logger.info("supabase_client_created", role=role)
        return client


def reset_supabase_clients() -> None:
    """Drop cached clients (used by tests and after key rotation)."""
    with _supabase_lock:
        _clients.clear()
