"""Pydantic request/response schemas for API endpoints."""

from resume_interview.schemas.interview import (
    CandidateFieldSchema,
    ConversationContext,
    ConversationMessage,
    SectionInfo,
    SpecialContent,
    TokenUsage,
    TurnRequest,
    TurnResponse,
)

__all__ = [
    # Requests
    "ConversationContext",
    "ConversationMessage",
    "TurnRequest",
    # Responses
    "CandidateFieldSchema",
    "SectionInfo",
    "SpecialContent",
    "TokenUsage",
    "TurnResponse",
]
