"""Provider factory functions.

Singleton pattern for the LLM provider instance.
"""

from resume_interview.providers.config import ProviderConfig
from resume_interview.providers.llm.base import LLMProvider
from resume_interview.providers.llm.claude_adapter import ClaudeAdapter
from resume_interview.providers.llm.gemini_adapter import GeminiAdapter
from resume_interview.providers.llm.openai_adapter import OpenAIAdapter

_llm_provider: LLMProvider | None = None


def get_llm_provider(config: ProviderConfig | None = None) -> LLMProvider:
    """Get or create the LLM provider singleton.

    WHY SINGLETON:
    - Reuses HTTP connections (performance)
    - Consistent configuration across app

    Args:
        config: Optional provider configuration. If None and no provider
            exists, loads from settings.

    Returns:
        LLMProvider instance.

    Raises:
        ValueError: If the configured provider is unknown.
    """
    global _llm_provider  # noqa: PLW0603

    if _llm_provider is None:
        if config is None:
            config = ProviderConfig.from_settings()

        if config.llm_provider == "claude":
            _llm_provider = ClaudeAdapter(config)
        elif config.llm_provider == "openai":
            _llm_provider = OpenAIAdapter(config)
        elif config.llm_provider == "gemini":
            _llm_provider = GeminiAdapter(config)
        else:
            raise ValueError(f"Unknown LLM provider: {config.llm_provider}")

    return _llm_provider


def reset_providers() -> None:
    """Reset provider singletons.

    Used in tests to ensure isolation between test cases.
    """
    global _llm_provider  # noqa: PLW0603
    _llm_provider = None
