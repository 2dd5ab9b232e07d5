"""Tests for the OpenAI and Gemini adapters' message handling."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from resume_interview.providers.config import ProviderConfig
from resume_interview.providers.errors import (
    AuthenticationError,
    ContentFilterError,
    ProviderError,
    RateLimitError,
    TransientError,
)
from resume_interview.providers.llm.base import LLMMessage, TaskType
from resume_interview.providers.llm.gemini_adapter import (
    _classify_gemini_error,
    _convert_gemini_messages,
)
from resume_interview.providers.llm.openai_adapter import (
    DEFAULT_OPENAI_MODEL,
    OpenAIAdapter,
    _convert_openai_messages,
)

_MESSAGES = [
    LLMMessage(role="system", content="You are an interviewer."),
    LLMMessage(role="assistant", content="**What is your full name?**"),
    LLMMessage(role="user", content="Jane Doe"),
]


class TestOpenAIAdapter:
    """Tests for OpenAIAdapter."""

    def test_system_message_stays_in_list(self):
        converted = _convert_openai_messages(_MESSAGES)
        assert converted[0] == {"role": "system", "content": "You are an interviewer."}
        assert len(converted) == 3

    @pytest.mark.asyncio
    async def test_complete_reads_choice_and_usage(self):
        config = ProviderConfig(llm_provider="openai", openai_api_key="test-key")
        response = MagicMock()
        response.choices = [
            MagicMock(message=MagicMock(content="Thanks!"), finish_reason="stop")
        ]
        response.usage = MagicMock(prompt_tokens=12, completion_tokens=3)

        with patch(
            "resume_interview.providers.llm.openai_adapter.AsyncOpenAI"
        ) as mock_client_cls:
            mock_client = AsyncMock()
            mock_client.chat.completions.create = AsyncMock(return_value=response)
            mock_client_cls.return_value = mock_client
            adapter = OpenAIAdapter(config)

            result = await adapter.complete(_MESSAGES, TaskType.INTERVIEW_TURN)

        assert result.content == "Thanks!"
        assert result.input_tokens == 12
        assert result.output_tokens == 3
        assert adapter.provider_name == "openai"
        assert adapter.get_model_for_task(TaskType.INTERVIEW_TURN) == DEFAULT_OPENAI_MODEL


class TestGeminiHelpers:
    """Tests for Gemini message conversion and error mapping."""

    def test_system_instruction_extracted_and_roles_renamed(self):
        system, contents = _convert_gemini_messages(_MESSAGES)
        assert system == "You are an interviewer."
        assert [c.role for c in contents] == ["model", "user"]
        assert contents[1].parts[0].text == "Jane Doe"

    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("429 RESOURCE_EXHAUSTED", RateLimitError),
            ("403 PERMISSION_DENIED", AuthenticationError),
            ("response blocked by safety settings", ContentFilterError),
            ("503 UNAVAILABLE", TransientError),
            ("something odd", ProviderError),
        ],
    )
    def test_error_classification(self, message, expected):
        assert type(_classify_gemini_error(Exception(message))) is expected
