"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings require Supabase credentials at import time
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("REPORT_TIMEZONE", "UTC")

import pytest
from unittest.mock import patch
from typing import Generator

from utils.date_utils import FixedClock
from tests.factories import NOW, ORG_ID, USER_ID


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    Filters are recorded but not applied; callers filter rows themselves.
    """

    def __init__(self, data: list = None, count: int = None, error: Exception = None):
        self._data = data or []
        self._count = count
        self._error = error
        self._is_single = False
        self.filters = []

    def _record(self, op, *args):
        self.filters.append((op, *args))
        return self

    def select(self, *args, **kwargs):
        return self

    def eq(self, column, value):
        return self._record("eq", column, value)

    def neq(self, column, value):
        return self._record("neq", column, value)

    def lt(self, column, value):
        return self._record("lt", column, value)

    def lte(self, column, value):
        return self._record("lte", column, value)

    def gt(self, column, value):
        return self._record("gt", column, value)

    def gte(self, column, value):
        return self._record("gte", column, value)

    def in_(self, column, values):
        return self._record("in", column, list(values))

    def or_(self, filters):
        return self._record("or", filters)

    def single(self):
        self._is_single = True
        return self

    def order(self, column, **kwargs):
        return self

    def range(self, start, end):
        return self

    def limit(self, count):
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._error is not None:
            raise self._error
        if self._is_single:
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

    def __init__(self, data: list = None, count: int = None, error: Exception = None):
        self._data = data or []
        self._count = count
        self._error = error

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._data.copy(), self._count, self._error)


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}
        self.requested_tables = []

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count, "error": None}

    def set_table_error(self, table_name: str, error: Exception):
        """Make every query against a table fail on execute()."""
        self._tables[table_name] = {"data": [], "count": None, "error": error}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        self.requested_tables.append(name)
        config = self._tables.get(name, {"data": [], "count": None, "error": None})
        return MockSupabaseTable(config["data"], config["count"], config["error"])


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client with one organization owned by USER_ID.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("rentals", [
                RentalFactory.create(vehicle_id="car-1", ...)
            ])
    """
    client = MockSupabaseClient()
    client.set_table_data("organizations", [{"id": ORG_ID, "user_id": USER_ID}])
    return client


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("vehicles", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.report_service.get_supabase_client", return_value=mock_supabase):
            with patch("services.organization_service.get_supabase_client", return_value=mock_supabase):
                yield mock_supabase


@pytest.fixture
def fixed_clock() -> FixedClock:
    """Clock pinned to NOW."""
    return FixedClock(NOW)


@pytest.fixture
def report_service(mock_db, fixed_clock):
    """ReportService wired to the mock client and the fixed clock."""
    from services.report_service import ReportService

    return ReportService(clock=fixed_clock)


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


@pytest.fixture
def test_client_with_mock_db(mock_supabase, report_service):
    """
    Create FastAPI test client with mocked database and fixed clock.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("rentals", [...])
            response = test_client_with_mock_db.get(
                "/api/reports/summary?preset=last30d",
                headers={"X-User-Id": USER_ID},
            )
    """
    from fastapi.testclient import TestClient
    from main import app

    with patch("routes.reports.get_report_service", return_value=report_service):
        yield TestClient(app)
