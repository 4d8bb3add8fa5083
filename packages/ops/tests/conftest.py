"""
tests/conftest.py — Shared pytest fixtures for the ops test suite.

Provides:
  mock_supabase_client  — MagicMock client with one query mock per table,
                          installed as the service-role singleton
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from jeffy_shared import db
from query_mocks import query_mock


@pytest.fixture
def mock_supabase_client(monkeypatch) -> MagicMock:
    """
    A MagicMock that simulates the supabase.Client interface.

    client.tables maps table name -> query mock; tables that were not
    seeded return empty data. Seed with client.tables["orders"] = query_mock([...]).
    """
    client = MagicMock()
    client.tables = {}
    client.table.side_effect = lambda name: client.tables.setdefault(name, query_mock())
    client.rpc.return_value.execute.return_value.data = []
    monkeypatch.setitem(db._clients, "service_role", client)
    return client
