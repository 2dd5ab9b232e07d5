"""Mock LLM provider for testing.

MockLLMProvider enables testing interview turns without hitting real LLM APIs.
"""

from collections import deque
from typing import Any

from resume_interview.providers.errors import ProviderError
from resume_interview.providers.llm.base import (
    LLMMessage,
    LLMProvider,
    LLMResponse,
    TaskType,
)


class MockLLMProvider(LLMProvider):
    """Mock provider for testing.

    WHY MOCK:
    - Unit tests shouldn't hit real APIs (cost, speed, flakiness)
    - Enables deterministic testing
    - Can simulate error conditions

    Replies are served from a FIFO queue first (for multi-turn scripts), then
    from the per-task ``responses`` table, then a default string.

    Attributes:
        responses: Pre-configured responses keyed by TaskType.
        calls: Record of all method invocations for test assertions.
        last_task: The most recent TaskType used in a call.
    """

    @property
    def provider_name(self) -> str:
        """Return 'mock' for testing."""
        return "mock"

    def __init__(self, responses: dict[TaskType, str | None] | None = None) -> None:
        """Initialize mock provider with optional pre-configured responses.

        Args:
            responses: Dict mapping TaskType to response content. If not provided
                for a task, returns a default "Mock response for {task}" string.
        """
        # Don't call super().__init__() - we don't need a config for mock
        self.responses: dict[TaskType, str | None] = (
            dict(responses) if responses else {}
        )
        self.calls: list[dict[str, Any]] = []
        self.last_task: TaskType | None = None
        self._queued: deque[str | None] = deque()
        self._error: ProviderError | None = None

    def set_response(self, task: TaskType, content: str | None) -> None:
        """Set or update the response for a specific task type."""
        self.responses[task] = content

    def queue_reply(self, *contents: str | None) -> None:
        """Queue replies returned by successive calls, oldest first."""
        self._queued.extend(contents)

    def set_error(self, error: ProviderError | None) -> None:
        """Make every following call raise ``error`` (None clears it)."""
        self._error = error

    async def complete(
        self,
        messages: list[LLMMessage],
        task: TaskType,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        """Generate a mock completion.

        Records the call for test assertions and returns a queued,
        pre-configured, or default response.

        Raises:
            ProviderError: If an error was injected with ``set_error``.
        """
        self.calls.append(
            {
                "method": "complete",
                "messages": messages,
                "task": task,
                "kwargs": {
                    "max_tokens": max_tokens,
                    "temperature": temperature,
                },
            }
        )
        self.last_task = task

        if self._error is not None:
            raise self._error

        if self._queued:
            content = self._queued.popleft()
        else:
            content = self.responses.get(task, f"Mock response for {task.value}")

        return LLMResponse(
            content=content,
            model="mock-model",
            input_tokens=100,
            output_tokens=50,
            finish_reason="stop",
            latency_ms=10,
        )

    def get_model_for_task(self, _task: TaskType) -> str:
        """Return 'mock-model' for any task."""
        return "mock-model"

    def assert_called_with_task(self, task: TaskType) -> None:
        """Test helper to verify a task was called.

        Raises:
            AssertionError: If the task was not called.
        """
        tasks_called = [c["task"] for c in self.calls]
        assert task in tasks_called, f"Expected {task}, got {tasks_called}"
