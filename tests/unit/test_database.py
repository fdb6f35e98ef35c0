"""
Unit tests for database health checks.
"""

from unittest.mock import patch

from config.database import check_connection, reset_connection
from tests.factories import RentalFactory, VehicleFactory


class TestCheckConnection:
    """Health status reported by check_connection()."""

    def test_healthy(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("vehicles", VehicleFactory.create_batch(3))
        mock_supabase.set_table_data("rentals", RentalFactory.create_batch(5))

        status = check_connection()

        assert status == {"status": "healthy", "vehicles_count": 3, "rentals_count": 5}

    def test_unhealthy(self, mock_db, mock_supabase):
        mock_supabase.set_table_error("vehicles", RuntimeError("connection refused"))

        status = check_connection()

        assert status["status"] == "unhealthy"
        assert "connection refused" in status["error"]

    def test_reset_clears_cached_client(self):
        with patch("config.database.get_supabase_client") as client_factory:
            reset_connection()
        client_factory.cache_clear.assert_called_once()


class TestHealthEndpoint:
    """GET /health"""

    def test_degraded_when_database_down(self, mock_db, mock_supabase, test_client):
        mock_supabase.set_table_error("vehicles", RuntimeError("connection refused"))

        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    def test_healthy(self, mock_db, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
