"""Interview API request/response schemas.

Wire contract for one conversational turn. Field names follow the client's
JSON (snake_case); résumé draft keys keep the client's camelCase because the
draft is stored and rendered by the client.

Conversion to and from the agent's own types lives here so the agents
package never imports the HTTP layer.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, NonNegativeInt, field_validator, model_validator

from resume_interview.agents.fields import CandidateField
from resume_interview.agents.state import (
    ContradictionRecord,
    ConversationSession,
    Section,
    TurnInput,
    TurnResult,
    UserTone,
)

MAX_USER_MESSAGE_LENGTH = 4000

# Has-flags a client may already hold in the draft from an earlier turn.
_DRAFT_FLAGS = (
    "hasWorkExperience",
    "hasEducation",
    "hasVolunteering",
    "hasReferences",
    "hasTechnicalSkills",
    "hasCertifications",
    "hasLanguages",
    "hasSoftSkills",
)

# =============================================================================
# Request Schemas
# =============================================================================


class ConversationMessage(BaseModel):
    """One prior message in the conversation."""

    role: Literal["user", "assistant"]
    content: str

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        """Reject messages that are empty after stripping."""
        if not v.strip():
            msg = "Message content cannot be empty"
            raise ValueError(msg)
        return v


class ConversationContext(BaseModel):
    """Lightweight context kept by clients that do not echo a full session.

    Attributes:
        mentioned_entities: Names, companies and schools seen so far.
        answered_topics: Topics already covered.
        user_tone: Tone of the previous user message.
    """

    mentioned_entities: list[str] = Field(default_factory=list)
    answered_topics: list[str] = Field(default_factory=list)
    user_tone: UserTone = UserTone.NEUTRAL


class TurnRequest(BaseModel):
    """Request body for POST /interview/turns.

    Attributes:
        messages: Conversation so far, oldest first.
        resume_data: Current résumé draft.
        current_section: Section the client believes it is in. Required
            unless a session snapshot is sent.
        user_message: The user's new message.
        follow_up_count: Follow-ups asked in current_section so far.
        language: ISO code of the interview language.
        conversation_context: Optional context for session reconstruction.
        session: Session snapshot returned by the previous turn, if any.
    """

    messages: list[ConversationMessage] = Field(default_factory=list)
    resume_data: dict[str, Any] = Field(default_factory=dict)
    current_section: Section | None = None
    user_message: str = Field(..., max_length=MAX_USER_MESSAGE_LENGTH)
    follow_up_count: NonNegativeInt = 0
    language: str = Field(default="en", min_length=2, max_length=10)
    conversation_context: ConversationContext | None = None
    session: ConversationSession | None = None

    @field_validator("user_message", mode="before")
    @classmethod
    def strip_user_message(cls, v: Any) -> Any:
        """Strip whitespace from the user message."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("user_message")
    @classmethod
    def user_message_not_empty(cls, v: str) -> str:
        """Validate the user message is not empty after stripping."""
        if not v:
            msg = "User message cannot be empty"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def section_or_session(self) -> "TurnRequest":
        """Require a section to rebuild the session from when none is echoed."""
        if self.session is None and self.current_section is None:
            msg = "current_section is required when no session is sent"
            raise ValueError(msg)
        return self

    def build_session(self) -> ConversationSession:
        """Session for this turn: the echoed snapshot, else one rebuilt
        from current_section, follow_up_count and the optional context."""
        if self.session is not None:
            return self.session.model_copy(deep=True)

        context = self.conversation_context or ConversationContext()
        flags = {
            name: self.resume_data[name]
            for name in _DRAFT_FLAGS
            if isinstance(self.resume_data.get(name), bool)
        }
        return ConversationSession(
            current_section=self.current_section,
            follow_up_counts={self.current_section: self.follow_up_count},
            flags=flags,
            mentioned_entities=list(context.mentioned_entities),
            answered_topics=list(context.answered_topics),
            user_tone=context.user_tone,
            language=self.language,
        )

    def to_turn_input(self) -> TurnInput:
        """Convert to the agent's turn input."""
        return TurnInput(
            history=[message.model_dump() for message in self.messages],
            resume_data=self.resume_data,
            user_message=self.user_message,
            session=self.build_session(),
        )


# =============================================================================
# Response Schemas
# =============================================================================


class CandidateFieldSchema(BaseModel):
    """Extracted field on the wire: ``{"path", "value", "confidence"}``."""

    path: str
    value: Any
    confidence: float = Field(..., ge=0.0, le=1.0)

    @classmethod
    def from_field(cls, field: CandidateField) -> "CandidateFieldSchema":
        return cls(**field.to_dict())


class SpecialContent(BaseModel):
    """Inline content the client renders under the reply.

    Attributes:
        type: "email_guide" or "email_tip".
        content: Markdown body.
        expandable: Whether the client may collapse it.
        suggestions: Professional address suggestions, if a name is known.
        issues: Problems found with the user's address (email_tip only).
    """

    type: str
    content: str
    expandable: bool = False
    suggestions: list[str] = Field(default_factory=list)
    issues: list[str] = Field(default_factory=list)


class TokenUsage(BaseModel):
    """Token counts reported by the backend for this turn."""

    input_tokens: int = 0
    output_tokens: int = 0


class TurnResponse(BaseModel):
    """Response body for POST /interview/turns.

    Attributes:
        success: False when the backend failed and the reply is a rephrase
            request.
        assistant_message: Reply to show the user.
        extracted_fields: Every field gathered this turn.
        needs_confirmation: Fields below the confidence threshold, not merged.
        suggested_section: Section the interview moved to, if it moved.
        is_complete: Whether the interview is finished.
        special_content: Inline content (email guide or tip).
        follow_up_needed: Whether the reply asks a follow-up question.
        contradiction: Denial awaiting a keep/remove answer.
        resume_data: Draft with the confident fields merged.
        session: Updated session snapshot to echo on the next turn.
        confidence: Mean confidence of the extracted fields.
        suggest_form_mode: Whether the client should offer form mode.
        error_code: Failure code when success is False.
        usage: Backend token counts.
    """

    success: bool
    assistant_message: str
    extracted_fields: list[CandidateFieldSchema] = Field(default_factory=list)
    needs_confirmation: list[CandidateFieldSchema] = Field(default_factory=list)
    suggested_section: Section | None = None
    is_complete: bool = False
    special_content: SpecialContent | None = None
    follow_up_needed: bool = False
    contradiction: ContradictionRecord | None = None
    resume_data: dict[str, Any] = Field(default_factory=dict)
    session: ConversationSession
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    suggest_form_mode: bool = False
    error_code: str | None = None
    usage: TokenUsage | None = None

    @classmethod
    def from_result(cls, result: TurnResult) -> "TurnResponse":
        """Convert the agent's TurnResult to the wire schema."""
        return cls(
            success=result.success,
            assistant_message=result.assistant_message,
            extracted_fields=[
                CandidateFieldSchema.from_field(f) for f in result.extracted_fields
            ],
            needs_confirmation=[
                CandidateFieldSchema.from_field(f) for f in result.needs_confirmation
            ],
            suggested_section=result.suggested_section,
            is_complete=result.is_complete,
            special_content=(
                SpecialContent(**result.special_content)
                if result.special_content
                else None
            ),
            follow_up_needed=result.follow_up_needed,
            contradiction=result.contradiction,
            resume_data=result.resume_data,
            session=result.session,
            confidence=result.confidence,
            suggest_form_mode=result.suggest_form_mode,
            error_code=result.error_code,
            usage=TokenUsage(**result.usage) if result.usage else None,
        )


class SectionInfo(BaseModel):
    """One section of the interview, for linear form-mode clients.

    Attributes:
        section: Section identifier.
        gate_question: Canonical yes/no question, for gated sections.
        transition_message: Canonical message after a "no" at the gate.
        follow_up_limit: Most follow-up questions asked in the section.
        fallback_question: Question used when the backend says nothing.
    """

    section: Section
    gate_question: str | None = None
    transition_message: str | None = None
    follow_up_limit: int
    fallback_question: str
