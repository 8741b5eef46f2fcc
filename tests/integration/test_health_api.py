"""API tests for health and root endpoints."""

import feedback_triage.main as main_module


class TestHealthApi:

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"] == "connected"
        assert body["checks"]["llm_client"] == "not_configured"
        assert body["checks"]["detection_rules"] == "loaded (4 rules)"
        assert body["checks"]["detection_scheduler"] == "stopped"

    async def test_api_health_reports_llm_circuit(self, llm_app, client):
        body = (await client.get("/api/health")).json()

        assert body["checks"]["llm_client"] == "available (circuit closed)"

    async def test_health_degraded_without_database(self, client, monkeypatch):
        async def failing_ping():
            raise ConnectionError("connection refused")

        monkeypatch.setattr(main_module, "ping_database", failing_ping)

        body = (await client.get("/health")).json()

        assert body["status"] == "degraded"
        assert body["checks"]["database"].startswith("error:")

    async def test_connection(self, client):
        response = await client.get("/api/test-connection")

        assert response.json() == {"success": True, "message": "Database connection successful"}

    async def test_connection_failure(self, client, monkeypatch):
        async def failing_ping():
            raise ConnectionError("connection refused")

        monkeypatch.setattr(main_module, "ping_database", failing_ping)

        response = await client.get("/api/test-connection")

        assert response.status_code == 503
        assert response.json()["success"] is False
        assert response.json()["details"] == "connection refused"

    async def test_root_lists_modules(self, client):
        body = (await client.get("/")).json()

        assert body["docs"] == "/docs"
        assert set(body["modules"]) == {"feedback", "issues", "employees", "analytics"}


class TestRequestContext:

    async def test_correlation_id_is_echoed_in_errors(self, client):
        response = await client.get("/api/feedback/missing", headers={"X-Correlation-ID": "req-42"})

        assert response.headers["X-Correlation-ID"] == "req-42"
        assert "X-Response-Time" in response.headers
        body = response.json()
        assert body["correlation_id"] == "req-42"
        assert body["detail"] == "Feedback with id 'missing' not found"

    async def test_health_counts_requests(self, client):
        await client.get("/")

        body = (await client.get("/health")).json()

        assert body["requests"]["requests"] >= 1
