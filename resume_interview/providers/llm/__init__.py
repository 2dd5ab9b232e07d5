"""LLM provider module.

LLM provider interface and adapters.
"""

from resume_interview.providers.llm.base import (
    LLMMessage,
    LLMProvider,
    LLMResponse,
    TaskType,
)
from resume_interview.providers.llm.claude_adapter import ClaudeAdapter
from resume_interview.providers.llm.gemini_adapter import GeminiAdapter
from resume_interview.providers.llm.mock_adapter import MockLLMProvider
from resume_interview.providers.llm.openai_adapter import OpenAIAdapter

__all__ = [
    # Base types
    "LLMMessage",
    "LLMProvider",
    "LLMResponse",
    "TaskType",
    # Adapters
    "ClaudeAdapter",
    "GeminiAdapter",
    "MockLLMProvider",
    "OpenAIAdapter",
]
