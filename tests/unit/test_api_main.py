"""Tests for the FastAPI application and exception handlers."""

import pytest
from httpx import ASGITransport, AsyncClient

from resume_interview import __version__
from resume_interview.core.config import settings
from resume_interview.core.errors import APIError, ValidationError
from resume_interview.main import create_app


@pytest.fixture
def app():
    """Create test application instance."""
    return create_app()


@pytest.fixture
async def app_client(app):
    """Async HTTP client that turns unhandled errors into 500 responses."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_returns_healthy_status(self, app_client):
        """Health endpoint should return 200 and a healthy status."""
        response = await app_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_app_version(self, app):
        assert app.version == __version__


class TestAPIVersioning:
    @pytest.mark.asyncio
    async def test_v1_router_mounted(self, app_client):
        """Known v1 routes resolve; unknown ones are a plain 404."""
        assert (await app_client.get("/api/v1/interview/sections")).status_code == 200
        assert (await app_client.get("/api/v1/nonexistent")).status_code == 404


class TestExceptionHandlers:
    """Custom exceptions are converted to the error envelope."""

    @pytest.mark.asyncio
    async def test_validation_error_returns_400(self, app, app_client):
        @app.get("/test/validation-error")
        async def raise_validation_error():
            raise ValidationError("Invalid input", details=[{"field": "test"}])

        response = await app_client.get("/test/validation-error")
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"] == [{"field": "test"}]

    @pytest.mark.asyncio
    async def test_api_error_keeps_its_status(self, app, app_client):
        @app.get("/test/api-error")
        async def raise_api_error():
            raise APIError(code="TEAPOT", message="Short and stout", status_code=418)

        response = await app_client.get("/test/api-error")
        assert response.status_code == 418
        assert response.json()["error"]["code"] == "TEAPOT"

    @pytest.mark.asyncio
    async def test_unhandled_exception_returns_500(self, app, app_client):
        """Unhandled exceptions never leak their message."""

        @app.get("/test/unhandled")
        async def raise_unhandled():
            raise RuntimeError("database password is hunter2")

        response = await app_client.get("/test/unhandled")
        assert response.status_code == 500
        body = response.json()
        assert body["error"]["code"] == "INTERNAL_ERROR"
        assert "hunter2" not in response.text

    @pytest.mark.asyncio
    async def test_request_validation_returns_400(self, app_client):
        """Pydantic errors become VALIDATION_ERROR without echoing input."""
        response = await app_client.post(
            "/api/v1/interview/turns", json={"user_message": 42, "follow_up_count": -1}
        )
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        for detail in error["details"]:
            assert set(detail) == {"loc", "msg", "type"}


class TestSecurityHeaders:
    """Tests for SecurityHeadersMiddleware."""

    @pytest.mark.asyncio
    async def test_headers_on_every_response(self, app_client):
        response = await app_client.get("/health")
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "default-src 'none'" in response.headers["Content-Security-Policy"]

    @pytest.mark.asyncio
    async def test_api_responses_not_cached(self, app_client):
        response = await app_client.get("/api/v1/interview/sections")
        assert response.headers["Cache-Control"] == "no-store, max-age=0"

    @pytest.mark.asyncio
    async def test_health_may_be_cached(self, app_client):
        response = await app_client.get("/health")
        assert "Cache-Control" not in response.headers

    @pytest.mark.asyncio
    async def test_hsts_only_in_production(self, app_client, monkeypatch):
        response = await app_client.get("/health")
        assert "Strict-Transport-Security" not in response.headers

        monkeypatch.setattr(settings, "environment", "production")
        response = await app_client.get("/health")
        assert "max-age=31536000" in response.headers["Strict-Transport-Security"]


class TestCORS:
    @pytest.mark.asyncio
    async def test_preflight_from_allowed_origin(self, app_client):
        origin = settings.allowed_origins[0]
        response = await app_client.options(
            "/api/v1/interview/turns",
            headers={
                "Origin": origin,
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == origin

    @pytest.mark.asyncio
    async def test_unknown_origin_not_allowed(self, app_client):
        response = await app_client.get("/health", headers={"Origin": "https://evil.example"})
        assert "access-control-allow-origin" not in response.headers
