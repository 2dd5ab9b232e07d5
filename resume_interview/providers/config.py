"""Provider configuration management."""

from dataclasses import dataclass

from resume_interview.core.config import Settings, settings


@dataclass
class ProviderConfig:
    """Centralized provider configuration.

    Attributes:
        llm_provider: Which LLM provider to use ("claude", "openai", "gemini").
        anthropic_api_key: Anthropic API key.
        openai_api_key: OpenAI API key.
        google_api_key: Google AI API key.
        claude_model_routing: Override model routing for Claude.
        openai_model_routing: Override model routing for OpenAI.
        gemini_model_routing: Override model routing for Gemini.
        default_max_tokens: Default max output tokens.
        default_temperature: Default sampling temperature.
        timeout_seconds: Per-call timeout. A turn makes one call, no retries.
    """

    # Provider selection
    llm_provider: str = "claude"

    # API keys
    anthropic_api_key: str | None = None
    openai_api_key: str | None = None
    google_api_key: str | None = None

    # Model routing (can override defaults)
    claude_model_routing: dict[str, str] | None = None
    openai_model_routing: dict[str, str] | None = None
    gemini_model_routing: dict[str, str] | None = None

    # Defaults
    default_max_tokens: int = 1024
    default_temperature: float = 0.7
    timeout_seconds: float = 30.0

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "ProviderConfig":
        """Build configuration from application settings.

        Args:
            source: Settings instance. Defaults to the module-level settings.

        Returns:
            ProviderConfig instance with values from the environment.
        """
        source = source or settings
        return cls(
            llm_provider=source.llm_provider,
            anthropic_api_key=source.anthropic_api_key or None,
            openai_api_key=source.openai_api_key or None,
            google_api_key=source.google_api_key or None,
            default_max_tokens=source.llm_max_tokens,
            default_temperature=source.llm_temperature,
            timeout_seconds=source.llm_timeout_seconds,
        )
