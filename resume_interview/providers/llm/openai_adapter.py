"""OpenAI GPT LLM adapter.

WHY SUPPORT OPENAI:
- Deployments that already hold OpenAI credits
- Second option if Anthropic has an outage
"""

import contextlib
import time
from typing import TYPE_CHECKING

import openai
import structlog
from openai import AsyncOpenAI

from resume_interview.providers.errors import (
    AuthenticationError,
    ContentFilterError,
    ContextLengthError,
    ModelNotFoundError,
    ProviderError,
    RateLimitError,
    TransientError,
)
from resume_interview.providers.llm.base import (
    LLMMessage,
    LLMProvider,
    LLMResponse,
    TaskType,
)

if TYPE_CHECKING:
    from resume_interview.providers.config import ProviderConfig

logger = structlog.get_logger()


DEFAULT_OPENAI_ROUTING: dict[str, str] = {
    "interview_turn": "gpt-4o-mini",
}

# Fallback if task type not in routing table
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


def _classify_openai_error(error: Exception) -> ProviderError:
    """Map OpenAI SDK exceptions to internal error taxonomy.

    Returns a ProviderError subclass instance (does not raise).
    The caller is responsible for raising via ``raise _classify_openai_error(e) from e``.
    """
    if isinstance(error, openai.RateLimitError):
        retry_after = None
        if hasattr(error, "response") and error.response is not None:
            retry_header = error.response.headers.get("retry-after")
            if retry_header is not None:
                with contextlib.suppress(ValueError):
                    retry_after = float(retry_header)
        return RateLimitError(str(error), retry_after_seconds=retry_after)

    if isinstance(error, openai.AuthenticationError):
        return AuthenticationError(str(error))

    if isinstance(error, openai.NotFoundError):
        return ModelNotFoundError(str(error))

    if isinstance(error, openai.BadRequestError):
        error_msg = str(error).lower()
        if "context_length" in error_msg:
            return ContextLengthError(str(error))
        if "content_policy" in error_msg:
            return ContentFilterError(str(error))
        return ProviderError(str(error))

    # APITimeoutError is a subclass of APIConnectionError
    if isinstance(error, openai.APIConnectionError | openai.InternalServerError):
        return TransientError(str(error))

    return ProviderError(str(error))


def _convert_openai_messages(messages: list[LLMMessage]) -> list[dict]:
    """Convert LLMMessages to OpenAI chat-completions message format.

    OpenAI keeps system messages in the messages array (unlike Claude which
    separates them).
    """
    return [{"role": msg.role, "content": msg.content} for msg in messages]


class OpenAIAdapter(LLMProvider):
    """OpenAI GPT adapter using OpenAI SDK."""

    @property
    def provider_name(self) -> str:
        """Return 'openai'."""
        return "openai"

    def __init__(self, config: "ProviderConfig") -> None:
        """Initialize OpenAI adapter.

        Args:
            config: Provider configuration with OpenAI API key.
        """
        super().__init__(config)
        self.client = AsyncOpenAI(
            api_key=config.openai_api_key,
            timeout=config.timeout_seconds,
            max_retries=0,
        )
        self.model_routing = {**DEFAULT_OPENAI_ROUTING}
        if config.openai_model_routing:
            self.model_routing.update(config.openai_model_routing)

    async def complete(
        self,
        messages: list[LLMMessage],
        task: TaskType,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        """Generate completion using OpenAI GPT.

        Args:
            messages: Conversation as list of LLMMessage.
            task: Task type for model routing.
            max_tokens: Override default max tokens.
            temperature: Override default temperature.

        Returns:
            LLMResponse with the reply text.
        """
        model = self.get_model_for_task(task)
        api_messages = _convert_openai_messages(messages)

        logger.info(
            "llm_request_start",
            provider="openai",
            model=model,
            task=task.value,
            message_count=len(messages),
        )

        start_time = time.monotonic()

        try:
            response = await self.client.chat.completions.create(
                model=model,
                max_tokens=max_tokens
                if max_tokens is not None
                else self.config.default_max_tokens,
                temperature=temperature
                if temperature is not None
                else self.config.default_temperature,
                messages=api_messages,  # type: ignore[arg-type]
            )
        except openai.APIError as e:
            logger.error(
                "llm_request_failed",
                provider="openai",
                model=model,
                task=task.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise _classify_openai_error(e) from e

        latency_ms = (time.monotonic() - start_time) * 1000
        choice = response.choices[0]
        input_tokens = response.usage.prompt_tokens if response.usage else 0
        output_tokens = response.usage.completion_tokens if response.usage else 0

        logger.info(
            "llm_request_complete",
            provider="openai",
            model=model,
            task=task.value,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            latency_ms=latency_ms,
        )

        return LLMResponse(
            content=choice.message.content,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            finish_reason=choice.finish_reason or "unknown",
            latency_ms=latency_ms,
        )

    def get_model_for_task(self, task: TaskType) -> str:
        """Get model for task using routing table.

        Args:
            task: The task type to get the model for.

        Returns:
            Model identifier string.
        """
        return self.model_routing.get(task.value, DEFAULT_OPENAI_MODEL)
