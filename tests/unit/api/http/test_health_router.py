"""HTTP tests for the health check router."""

from src.users_api.core.services import StorageConnectionError


class TestHealth:
    def test_liveness(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["status"] == "healthy"
        assert body["environment"] == "test"

    def test_readiness(self, client):
        response = client.get("/api/health/ready")

        assert response.status_code == 200
        assert response.json()["checks"]["database"] == {
            "status": "healthy",
            "type": "sqlite",
        }

    def test_readiness_reports_database_outage(self, client, monkeypatch):
        gateway = client.app.state.app_dependencies.storage_gateway
        monkeypatch.setattr(gateway, "health_check", lambda: False)

        response = client.get("/api/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"

    def test_database_details(self, client):
        response = client.get("/api/health/database")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["pool"]["open"] is True

    def test_database_unavailable(self, client, monkeypatch):
        gateway = client.app.state.app_dependencies.storage_gateway

        def failing():
            raise StorageConnectionError("unable to open database file")

        monkeypatch.setattr(gateway, "ensure_ready", failing)

        response = client.get("/api/health/database")

        assert response.status_code == 503
        assert response.json()["error"] == "Database unavailable"
