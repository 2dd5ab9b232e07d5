"""Abstract base class and types for LLM providers.

The interview makes exactly one completion call per turn, so the interface
is deliberately narrow: plain-text messages in, one text reply out.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from resume_interview.providers.config import ProviderConfig


class TaskType(Enum):
    """Task types for model routing.

    WHY ENUM: Explicit task types prevent typos and enable IDE autocomplete.
    Each adapter's routing table maps these to specific models.
    """

    INTERVIEW_TURN = "interview_turn"


@dataclass
class LLMMessage:
    """Provider-agnostic message format.

    WHY CUSTOM CLASS: Decouples from provider-specific message formats.
    Anthropic takes the system prompt as a separate parameter, Gemini calls
    the assistant role "model"; adapters normalize from this shape.

    Attributes:
        role: Message role ("system", "user", "assistant").
        content: Text content.
    """

    role: str
    content: str


@dataclass
class LLMResponse:
    """Provider-agnostic response format.

    Attributes:
        content: Text response (None if the provider returned no text).
        model: Actual model used (for logging).
        input_tokens: Number of input tokens used.
        output_tokens: Number of output tokens generated.
        finish_reason: Why generation stopped ("stop", "max_tokens", ...).
        latency_ms: Response time in milliseconds.
    """

    content: str | None
    model: str
    input_tokens: int
    output_tokens: int
    finish_reason: str
    latency_ms: float


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    WHY ABSTRACT CLASS:
    - Enforces consistent interface across providers
    - Makes testing via mock implementations trivial
    """

    def __init__(self, config: "ProviderConfig") -> None:
        """Initialize with provider configuration.

        Args:
            config: Provider configuration including API keys and defaults.
        """
        self.config = config

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider identifier (e.g., 'claude', 'openai', 'gemini')."""
        ...

    @abstractmethod
    async def complete(
        self,
        messages: list[LLMMessage],
        task: TaskType,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        """Generate a completion.

        Args:
            messages: Conversation as list of LLMMessage. A leading "system"
                message carries the interview instructions.
            task: Task type for model routing.
            max_tokens: Override default max tokens.
            temperature: Override default temperature.

        Returns:
            LLMResponse with the reply text.

        Raises:
            ProviderError: On any API failure. Adapters never retry.
        """
        ...

    @abstractmethod
    def get_model_for_task(self, task: TaskType) -> str:
        """Return the model identifier for a given task.

        Args:
            task: The task type to get the model for.

        Returns:
            Model identifier string.
        """
        ...
