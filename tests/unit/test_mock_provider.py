"""Tests for MockLLMProvider and the provider factory."""

import pytest

from resume_interview.providers import factory
from resume_interview.providers.config import ProviderConfig
from resume_interview.providers.errors import TransientError
from resume_interview.providers.llm.base import LLMMessage, LLMResponse, TaskType
from resume_interview.providers.llm.mock_adapter import MockLLMProvider

_HELLO = [LLMMessage(role="user", content="Hello")]


class TestMockLLMProvider:
    """Test MockLLMProvider.complete()."""

    def test_responses_are_copied(self):
        responses = {TaskType.INTERVIEW_TURN: "Hi"}
        mock = MockLLMProvider(responses=responses)
        mock.set_response(TaskType.INTERVIEW_TURN, "Changed")
        assert responses == {TaskType.INTERVIEW_TURN: "Hi"}

    @pytest.mark.asyncio
    async def test_default_response(self):
        mock = MockLLMProvider()
        response = await mock.complete(_HELLO, TaskType.INTERVIEW_TURN)
        assert isinstance(response, LLMResponse)
        assert response.content == "Mock response for interview_turn"
        assert response.model == "mock-model"

    @pytest.mark.asyncio
    async def test_queued_replies_served_in_order(self):
        mock = MockLLMProvider(responses={TaskType.INTERVIEW_TURN: "configured"})
        mock.queue_reply("first", None)

        contents = [
            (await mock.complete(_HELLO, TaskType.INTERVIEW_TURN)).content for _ in range(3)
        ]

        assert contents == ["first", None, "configured"]

    @pytest.mark.asyncio
    async def test_calls_recorded(self):
        mock = MockLLMProvider()
        await mock.complete(_HELLO, TaskType.INTERVIEW_TURN, max_tokens=10)

        assert len(mock.calls) == 1
        assert mock.calls[0]["messages"] == _HELLO
        assert mock.calls[0]["kwargs"]["max_tokens"] == 10
        assert mock.last_task == TaskType.INTERVIEW_TURN
        mock.assert_called_with_task(TaskType.INTERVIEW_TURN)

    @pytest.mark.asyncio
    async def test_injected_error_raised_until_cleared(self):
        mock = MockLLMProvider()
        mock.set_error(TransientError("down"))

        with pytest.raises(TransientError):
            await mock.complete(_HELLO, TaskType.INTERVIEW_TURN)

        mock.set_error(None)
        assert (await mock.complete(_HELLO, TaskType.INTERVIEW_TURN)).content


class TestProviderFactory:
    """Tests for the provider singleton."""

    def test_injected_provider_returned(self, mock_llm):
        assert factory.get_llm_provider() is mock_llm

    def test_unknown_provider_rejected(self):
        factory.reset_providers()
        try:
            with pytest.raises(ValueError, match="Unknown LLM provider"):
                factory.get_llm_provider(ProviderConfig(llm_provider="nope"))
        finally:
            factory.reset_providers()

    def test_config_from_settings(self):
        from resume_interview.core.config import Settings

        config = ProviderConfig.from_settings(
            Settings(
                llm_provider="openai",
                openai_api_key="k",
                anthropic_api_key="",
                llm_timeout_seconds=5.0,
            )
        )

        assert config.llm_provider == "openai"
        assert config.openai_api_key == "k"
        assert config.anthropic_api_key is None
        assert config.timeout_seconds == 5.0
