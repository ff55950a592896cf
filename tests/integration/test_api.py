"""Integration tests for FastAPI API endpoints using TestClient."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from museflow.api.middleware import ErrorHandlingMiddleware
from museflow.main import AppContext, create_app
from museflow.utils.errors import StorageError
from tests.conftest import SAMPLE_TEXT, RecordingProvider


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def client(app_context: AppContext) -> Iterator[TestClient]:
    """TestClient whose lifespan installs the prebuilt in-memory context."""
    with TestClient(create_app(context=app_context)) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# POST /api/v1/actions
# ---------------------------------------------------------------------------


class TestActionEndpoint:
    def test_summarize_round_trip(self, client: TestClient, primary: RecordingProvider) -> None:
        response = client.post(
            "/api/v1/actions",
            json={"action": "summarize", "text": SAMPLE_TEXT, "requestId": "web-1", "source": "popup"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["requestId"] == "web-1"
        assert body["data"]["provider"] == "primary"
        assert body["data"]["cached"] is False
        assert "error" not in body
        assert set(body["metadata"]) == {"processingTimeMs", "timestampIso", "action"}

    def test_second_request_hits_cache(self, client: TestClient, primary: RecordingProvider) -> None:
        payload = {"action": "rewrite", "text": SAMPLE_TEXT, "options": {"tone": "casual"}}

        client.post("/api/v1/actions", json=payload)
        body = client.post("/api/v1/actions", json=payload).json()

        assert body["data"]["cached"] is True
        assert primary.call_count == 1

    def test_failure_is_still_http_200(self, client: TestClient) -> None:
        response = client.post("/api/v1/actions", json={"action": "teleport"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Unknown action: teleport"
        assert "data" not in body

    def test_invalid_json_body(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/actions",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json()["error"] == "Invalid request: Request must be a JSON object"

    def test_update_settings_over_http(self, client: TestClient) -> None:
        body = client.post(
            "/api/v1/actions",
            json={"action": "updateSettings", "options": {"limits": {"maxCacheEntries": 5}}},
        ).json()

        assert body["data"]["limits"]["maxCacheEntries"] == 5
        settings = client.post("/api/v1/actions", json={"action": "getSettings"}).json()
        assert settings["data"]["limits"]["maxCacheEntries"] == 5


# ---------------------------------------------------------------------------
# POST /api/v1/actions/batch
# ---------------------------------------------------------------------------


class TestBatchEndpoint:
    def test_array_body(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/actions/batch",
            json=[
                {"action": "ping", "requestId": "1"},
                {"action": "summarize", "text": "short", "requestId": "2"},
            ],
        )

        assert response.status_code == 200
        first, second = response.json()
        assert first["requestId"] == "1" and first["success"] is True
        assert second["requestId"] == "2" and second["error"].startswith("INSUFFICIENT_CONTEXT")

    def test_wrapped_body(self, client: TestClient) -> None:
        response = client.post("/api/v1/actions/batch", json={"requests": [{"action": "ping"}]})
        assert [r["data"] for r in response.json()] == [{"status": "ok"}]

    def test_non_list_body_rejected(self, client: TestClient) -> None:
        response = client.post("/api/v1/actions/batch", json={"action": "ping"})
        assert response.status_code == 400


# ---------------------------------------------------------------------------
# Health and cache endpoints
# ---------------------------------------------------------------------------


class TestHealthAndCache:
    def test_health(self, client: TestClient) -> None:
        body = client.get("/api/v1/health").json()

        assert body["status"] == "healthy"
        assert body["version"] == "0.1.0"
        assert body["providers"] == {"primary": True}
        assert body["kv_backend"] == "memory"
        assert body["features"]["enableFallback"] is True

    def test_stats_then_clear(self, client: TestClient) -> None:
        client.post("/api/v1/actions", json={"action": "summarize", "text": SAMPLE_TEXT})

        stats = client.get("/api/v1/cache/stats").json()
        assert stats["totalEntries"] == 1
        assert stats["misses"] == 1

        cleared = client.delete("/api/v1/cache")
        assert cleared.status_code == 200
        assert cleared.json() == {"cleared": 1}
        assert client.get("/api/v1/cache/stats").json()["totalEntries"] == 0

    def test_cors_preflight(self, client: TestClient) -> None:
        response = client.options(
            "/api/v1/actions",
            headers={
                "Origin": "chrome-extension://abc",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers


# ---------------------------------------------------------------------------
# Error middleware
# ---------------------------------------------------------------------------


class TestErrorHandlingMiddleware:
    def test_escaped_application_error_becomes_json(self) -> None:
        app = FastAPI()
        app.add_middleware(ErrorHandlingMiddleware)

        @app.get("/boom")
        async def boom() -> None:
            raise StorageError("disk unavailable", provider_name="sqlite")

        response = TestClient(app).get("/boom")

        assert response.status_code == 500
        assert response.json() == {"error": "StorageError", "detail": "disk unavailable"}
