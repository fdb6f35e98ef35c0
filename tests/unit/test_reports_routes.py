"""
API tests for the reports routes.

Exercises request parsing and the error-to-status mapping through the
FastAPI test client.
"""

from datetime import date

from tests.factories import (
    USER_ID,
    RentalFactory,
    TargetFactory,
    VehicleFactory,
    utc,
)

HEADERS = {"X-User-Id": USER_ID}


def seed(mock_supabase):
    mock_supabase.set_table_data("vehicles", [
        VehicleFactory.create(id="car-1", insurance_expiry_date=date(2025, 6, 17)),
    ])
    mock_supabase.set_table_data("rentals", [
        RentalFactory.create(
            id="r1", vehicle_id="car-1",
            start_date=utc(2025, 6, 1), returned_at=utc(2025, 6, 5),
            total_price=500, total_paid=500,
        ),
    ])
    mock_supabase.set_table_data("vehicle_targets", [
        TargetFactory.create(id="t1", vehicle_id="car-1", revenue_goal=1000),
    ])


class TestSummaryEndpoint:
    """GET /api/reports/summary"""

    def test_preset_summary(self, test_client_with_mock_db, mock_supabase):
        seed(mock_supabase)
        response = test_client_with_mock_db.get(
            "/api/reports/summary", params={"preset": "last30d"}, headers=HEADERS
        )

        assert response.status_code == 200
        body = response.json()
        assert body["filters"]["org_id"] == "org-1"
        assert body["snapshot"]["total_rents"] == 1
        assert float(body["snapshot"]["revenue_billed"]) == 500
        assert body["insurance"]["critical"] == 1
        assert [t["id"] for t in body["targets"]] == ["t1"]
        assert len(body["trends"]) == 31

    def test_explicit_range(self, test_client_with_mock_db, mock_supabase):
        seed(mock_supabase)
        response = test_client_with_mock_db.get(
            "/api/reports/summary",
            params={"from": "2025-06-01T00:00:00Z", "to": "2025-06-30T23:59:59Z", "interval": "month"},
            headers=HEADERS,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["filters"]["interval"] == "month"
        assert [p["date"] for p in body["trends"]] == ["2025-06"]

    def test_missing_range_is_400(self, test_client_with_mock_db):
        response = test_client_with_mock_db.get("/api/reports/summary", headers=HEADERS)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "REPORT_RANGE_REQUIRED"

    def test_missing_user_is_403(self, test_client_with_mock_db):
        response = test_client_with_mock_db.get("/api/reports/summary", params={"preset": "today"})

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ORGANIZATION_NOT_FOUND"

    def test_reversed_range_is_422(self, test_client_with_mock_db):
        response = test_client_with_mock_db.get(
            "/api/reports/summary",
            params={"from": "2025-06-30T00:00:00Z", "to": "2025-06-01T00:00:00Z"},
            headers=HEADERS,
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_RANGE"

    def test_unknown_interval_is_422(self, test_client_with_mock_db):
        response = test_client_with_mock_db.get(
            "/api/reports/summary",
            params={"preset": "last7d", "interval": "hour"},
            headers=HEADERS,
        )
        assert response.status_code == 422

    def test_database_failure_is_500(self, test_client_with_mock_db, mock_supabase):
        mock_supabase.set_table_error("rentals", RuntimeError("statement timeout"))
        response = test_client_with_mock_db.get(
            "/api/reports/summary", params={"preset": "last7d"}, headers=HEADERS
        )

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "DATABASE_ERROR"


class TestActiveTargetEndpoint:
    """GET /api/reports/vehicles/{vehicle_id}/active-target"""

    def test_running_target(self, test_client_with_mock_db, mock_supabase):
        seed(mock_supabase)
        response = test_client_with_mock_db.get(
            "/api/reports/vehicles/car-1/active-target", headers=HEADERS
        )

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == "t1"
        assert float(body["actual_revenue"]) == 500
        assert body["is_active"] is True

    def test_no_target_is_null(self, test_client_with_mock_db):
        response = test_client_with_mock_db.get(
            "/api/reports/vehicles/car-1/active-target", headers=HEADERS
        )

        assert response.status_code == 200
        assert response.json() is None


class TestRootEndpoint:
    """GET /"""

    def test_lists_report_endpoints(self, test_client):
        response = test_client.get("/")

        assert response.status_code == 200
        assert "summary" in response.json()["endpoints"]
