"""
Integration Tests - Health and Info Endpoints
"""


class TestHealthAPI:
    """Tests for the probes"""

    async def test_liveness(self, client):
        response = await client.get("/api/v1/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    async def test_readiness_without_database(self, client):
        """The probes use the application engine, which tests never start"""
        response = await client.get("/api/v1/health/ready")

        assert response.status_code == 503
        assert response.json()["reason"] == "database_unavailable"

    async def test_health_reports_cache_disabled(self, client):
        body = (await client.get("/api/v1/health")).json()

        assert body["status"] == "unhealthy"
        assert body["checks"]["redis"] == {"status": "disabled"}

    async def test_response_headers(self, client):
        response = await client.get("/api/v1/info")

        assert response.status_code == 200
        assert response.json()["name"]
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Request-ID"]
        assert response.headers["X-Response-Time"].endswith("ms")
