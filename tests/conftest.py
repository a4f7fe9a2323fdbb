"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add project directory to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Settings are loaded at import time
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-key")

import pytest
from unittest.mock import patch
from typing import Generator
from uuid import uuid4

from services import preview_cache_service


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data=None, count: int = None):
        self.data = data if data is not None else []
        self.count = count if count is not None else (len(self.data) if isinstance(self.data, list) else 0)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable, filtering methods."""

    def __init__(self, data: list = None, count: int = None):
        self._data = [dict(row) for row in (data or [])]
        self._count = count
        self._is_single = False

    def select(self, *args, **kwargs):
        return self

    def eq(self, column, value):
        self._data = [row for row in self._data if row.get(column) == value]
        return self

    def neq(self, column, value):
        self._data = [row for row in self._data if row.get(column) != value]
        return self

    def single(self):
        self._is_single = True
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self._data.sort(key=lambda row: str(row.get(column) or ""), reverse=desc)
        return self

    def range(self, start, end):
        self._data = self._data[start:end + 1]
        return self

    def limit(self, count):
        self._data = self._data[:count]
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._is_single:
            # Return first item or empty for single()
            data = self._data[0] if self._data else None
            return MockSupabaseResponse(
                data=data,
                count=1 if data else 0
            )
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, data: list = None, count: int = None):
        self._data = data or []
        self._count = count

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._data, self._count)


class MockSupabaseRpc:
    """Mock call to a database function."""

    def __init__(self, client: "MockSupabaseClient", name: str, params: dict):
        self._client = client
        self._name = name
        self._params = params

    def execute(self) -> MockSupabaseResponse:
        if self._client.rpc_error is not None:
            raise self._client.rpc_error
        self._client.apply_changes(self._params["changes"])
        return MockSupabaseResponse(data=None)


class MockSupabaseClient:
    """
    Mock Supabase client.

    rpc() applies a commit payload to the in-memory tables the way the
    catalog commit function does, so tests can read back what was written.
    """

    def __init__(self):
        self._tables = {}
        self.rpc_calls = []
        self.rpc_error = None

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": list(data), "count": count}

    def get_table_data(self, table_name: str) -> list:
        """Current rows of a table."""
        return self._tables.get(table_name, {"data": []})["data"]

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None})
        return MockSupabaseTable(config["data"], config["count"])

    def rpc(self, name: str, params: dict) -> MockSupabaseRpc:
        """Record and return a database function call."""
        self.rpc_calls.append((name, params))
        return MockSupabaseRpc(self, name, params)

    def _rows(self, table_name: str) -> list:
        if table_name not in self._tables:
            self._tables[table_name] = {"data": [], "count": None}
        return self._tables[table_name]["data"]

    def _named_id(self, table_name: str, name) -> str:
        if name is None:
            return None
        for row in self._rows(table_name):
            if row["name"] == name:
                return row["id"]
        return None

    def apply_changes(self, changes: dict) -> None:
        """Apply a commit payload to the in-memory tables."""
        for table_name in ("suppliers", "categories"):
            for entry in changes.get(table_name, []):
                if self._named_id(table_name, entry["name"]) is None:
                    self._rows(table_name).append({"id": str(uuid4()), "name": entry["name"]})

        products = self._rows("products")
        for entry in changes.get("products", []):
            row = {
                key: value for key, value in entry.items()
                if key not in ("supplier_name", "category_name")
            }
            supplier_name = entry.get("supplier_name")
            category_name = entry.get("category_name")
            row["supplier_id"] = self._named_id("suppliers", supplier_name)
            row["suppliers"] = {"name": supplier_name} if supplier_name is not None else None
            row["category_id"] = self._named_id("categories", category_name)
            row["categories"] = {"name": category_name} if category_name is not None else None

            existing = next((p for p in products if p["barcode"] == row["barcode"]), None)
            if existing is None:
                row["id"] = str(uuid4())
                products.append(row)
            else:
                existing.update(row)

        for entry in changes.get("prices", []):
            self._rows("product_prices").append({"id": str(uuid4()), **entry})

        sessions = self._rows("inventory_sessions")
        for entry in changes.get("inventory_sessions", []):
            existing = next((s for s in sessions if s["id"] == entry["id"]), None)
            if existing is None:
                sessions.append(dict(entry))
            else:
                existing.update(entry)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("products", [
                ProductRowFactory.create(barcode="B1")
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.catalog_session.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def catalog_session(mock_supabase):
    """CatalogSession bound to the mock client."""
    from services.catalog_session import CatalogSession
    return CatalogSession(client=mock_supabase)


@pytest.fixture(autouse=True)
def clear_preview_cache():
    """Previews are module-level state."""
    preview_cache_service._cache.clear()
    yield
    preview_cache_service._cache.clear()


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_supabase):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            response = test_client_with_mock_db.get("/api/products/B1/price-history")
    """
    from fastapi.testclient import TestClient
    from main import app

    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.catalog_session.get_supabase_client", return_value=mock_supabase):
            yield TestClient(app)
