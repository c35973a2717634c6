"""
Shared test fixtures.

The Supabase mock keeps rows per table, applies eq() filters and enforces
unique columns, so services can be exercised end to end against it.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

# Settings require Supabase credentials at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from copy import deepcopy
from unittest.mock import patch
from datetime import datetime
from typing import Generator, Optional
from uuid import uuid4


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockAPIError(Exception):
    """Stand-in for postgrest APIError (carries a SQLSTATE code)."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)


class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, table: "MockSupabaseTable", operation: str, payload: dict = None):
        self._table = table
        self._operation = operation
        self._payload = payload
        self._columns = "*"
        self._filters = []
        self._limit = None

    def select(self, columns: str = "*", **kwargs):
        self._columns = columns
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def limit(self, count):
        self._limit = count
        return self

    def order(self, column, **kwargs):
        return self

    def _matches(self, row: dict) -> bool:
        return all(row.get(column) == value for column, value in self._filters)

    def _project(self, row: dict) -> dict:
        if self._columns == "*":
            return deepcopy(row)
        columns = [c.strip() for c in self._columns.split(",")]
        return {c: row.get(c) for c in columns}

    def execute(self) -> MockSupabaseResponse:
        self._table.calls.append(self._operation)
        error = self._table.failures.get(self._operation)
        if error is not None:
            raise error

        if self._operation == "select":
            rows = [self._project(r) for r in self._table.rows if self._matches(r)]
            if self._limit is not None:
                rows = rows[:self._limit]
            return MockSupabaseResponse(data=rows)

        if self._operation == "insert":
            row = deepcopy(self._payload)
            for column in self._table.unique_columns:
                if any(r.get(column) == row.get(column) for r in self._table.rows):
                    raise MockAPIError(
                        f'duplicate key value violates unique constraint "{self._table.name}_{column}_key"',
                        code="23505"
                    )
            row.setdefault("id", str(uuid4()))
            row.setdefault("created_at", datetime.utcnow().isoformat() + "Z")
            self._table.rows.append(row)
            return MockSupabaseResponse(data=[deepcopy(row)])

        if self._operation == "update":
            updated = []
            for row in self._table.rows:
                if self._matches(row):
                    row.update(deepcopy(self._payload))
                    updated.append(deepcopy(row))
            return MockSupabaseResponse(data=updated)

        if self._operation == "delete":
            removed = [r for r in self._table.rows if self._matches(r)]
            self._table.rows[:] = [r for r in self._table.rows if not self._matches(r)]
            return MockSupabaseResponse(data=removed)

        raise AssertionError(f"Unknown operation: {self._operation}")


class MockSupabaseTable:
    """Mock Supabase table holding rows in insertion order."""

    def __init__(self, name: str, rows: list = None, unique_columns: tuple = ()):
        self.name = name
        self.rows = deepcopy(rows or [])
        self.unique_columns = unique_columns
        self.failures: dict[str, Exception] = {}
        self.calls: list[str] = []

    def select(self, columns: str = "*", **kwargs):
        return MockSupabaseQuery(self, "select").select(columns)

    def insert(self, data: dict):
        return MockSupabaseQuery(self, "insert", data)

    def update(self, data: dict):
        return MockSupabaseQuery(self, "update", data)

    def delete(self):
        return MockSupabaseQuery(self, "delete")


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables: dict[str, MockSupabaseTable] = {}

    def set_table_data(self, table_name: str, data: list, unique_columns: tuple = ("email",)):
        """Configure rows for a table."""
        self._tables[table_name] = MockSupabaseTable(table_name, data, unique_columns)

    def fail_on(self, table_name: str, operation: str, error: Exception = None):
        """Make every call of an operation on a table raise."""
        table = self.table(table_name)
        table.failures[operation] = error or MockAPIError("connection reset by peer")

    def rows(self, table_name: str) -> list:
        return self.table(table_name).rows

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable(name, unique_columns=("email",))
        return self._tables[name]


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("companies", [
                {"email": "a@x.com", "name": "A", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock and reset service singletons.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("companies", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.company_store.get_supabase_client", return_value=mock_supabase):
            with patch("services.company_store._company_store", None):
                with patch("services.company_import_service._company_import_service", None):
                    yield mock_supabase


@pytest.fixture
def sample_company_data() -> dict:
    """Sample stored company for testing."""
    return {
        "id": "test-uuid-123",
        "name": "",
        "industry": "Tech",
        "location": None,
        "email": "a@x.com",
        "phone": None,
        "created_at": "2025-12-05T10:00:00Z",
        "updated_at": None
    }


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_db):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("companies", [...])
            response = test_client_with_mock_db.get("/api/companies")
    """
    from fastapi.testclient import TestClient
    from main import app

    yield TestClient(app)
