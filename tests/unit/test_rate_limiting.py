"""Tests for rate limiting.

The handler is tested directly; enforcement is tested end-to-end against
a minimal app with a low limit so the real app's limiter stays untouched.
"""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request as StarletteRequest

from resume_interview.core.rate_limiting import limiter, rate_limit_exceeded_handler

_TEST_LIMIT = "3/minute"


def _request() -> StarletteRequest:
    return StarletteRequest({"type": "http", "method": "POST", "path": "/api/v1/interview/turns"})


def _build_test_app(*, enabled: bool = True) -> FastAPI:
    test_limiter = Limiter(key_func=get_remote_address, enabled=enabled)
    app = FastAPI()
    app.state.limiter = test_limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    @app.post("/turns")
    @test_limiter.limit(_TEST_LIMIT)
    async def turns(request: Request) -> dict[str, str]:  # noqa: ARG001
        return {"status": "ok"}

    return app


class TestRateLimitExceededHandler:
    """Tests for the 429 response format."""

    def test_returns_429_with_error_envelope(self):
        exc = MagicMock()
        exc.detail = "20 per 1 minute"

        response = rate_limit_exceeded_handler(_request(), exc)
        body = json.loads(response.body.decode())

        assert response.status_code == 429
        assert body["error"]["code"] == "RATE_LIMITED"
        assert "Rate limit exceeded" in body["error"]["message"]

    def test_retry_after_falls_back_to_60(self):
        exc = MagicMock()
        exc.detail = "unexpected format"

        response = rate_limit_exceeded_handler(_request(), exc)

        assert response.headers.get("Retry-After") == "60"

    def test_retry_after_handles_none_detail(self):
        exc = MagicMock()
        exc.detail = None

        response = rate_limit_exceeded_handler(_request(), exc)

        assert response.headers.get("Retry-After") == "60"


class TestRateLimitEnforcement:
    """slowapi blocks requests past the limit."""

    @pytest.mark.asyncio
    async def test_requests_over_limit_get_429(self):
        transport = ASGITransport(app=_build_test_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            statuses = [(await ac.post("/turns")).status_code for _ in range(4)]

        assert statuses == [200, 200, 200, 429]

    @pytest.mark.asyncio
    async def test_disabled_limiter_never_blocks(self):
        transport = ASGITransport(app=_build_test_app(enabled=False))
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            statuses = [(await ac.post("/turns")).status_code for _ in range(5)]

        assert set(statuses) == {200}


class TestAppLimiter:
    def test_tests_run_with_limiter_disabled(self):
        """The autouse fixture switches the shared limiter off."""
        assert limiter.enabled is False
