"""Shared dependencies for API endpoints.

WHY DEPENDENCY INJECTION:
- The interview endpoint never builds its own provider
- Tests swap the backend with app.dependency_overrides
"""

from typing import Annotated

from fastapi import Depends

from resume_interview.providers.factory import get_llm_provider
from resume_interview.providers.llm.base import LLMProvider


def get_interview_provider() -> LLMProvider:
    """Get the conversational backend for interview turns.

    Returns:
        The factory's LLMProvider singleton.
    """
    return get_llm_provider()


InterviewProvider = Annotated[LLMProvider, Depends(get_interview_provider)]
