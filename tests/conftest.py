from collections.abc import AsyncGenerator, Iterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from resume_interview.agents.interviewer_graph import reset_interviewer_graph
from resume_interview.providers import factory
from resume_interview.providers.llm.mock_adapter import MockLLMProvider


@pytest.fixture
def mock_llm() -> Iterator[MockLLMProvider]:
    """Fixture that provides mock LLM and resets after test.

    Injects the mock into the factory singleton so both the graph's
    fallback lookup and the API dependency pick it up.

    Yields:
        MockLLMProvider instance with no scripted replies.
    """
    mock = MockLLMProvider()

    # Inject mock into factory singleton
    factory._llm_provider = mock

    yield mock

    # Reset after test
    factory.reset_providers()


@pytest_asyncio.fixture
async def client(mock_llm: MockLLMProvider) -> AsyncGenerator[AsyncClient, None]:  # noqa: ARG001
    """Async HTTP client wired to the app with the mock backend.

    Yields:
        Configured AsyncClient for making API requests.
    """
    from resume_interview.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_graph() -> Iterator[None]:
    """Rebuild the compiled interviewer graph for every test."""
    reset_interviewer_graph()
    yield
    reset_interviewer_graph()


@pytest.fixture(autouse=True)
def disable_rate_limiting() -> Iterator[None]:
    """Disable rate limiting during tests.

    Rate limiting is tested separately; disable for other tests to avoid
    flaky failures from rate limit triggers.

    Yields:
        None (autouse fixture).
    """
    from resume_interview.core.rate_limiting import limiter

    original_enabled = limiter.enabled
    limiter.enabled = False

    yield

    limiter.enabled = original_enabled
