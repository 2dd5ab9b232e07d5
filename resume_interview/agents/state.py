"""Interview state schemas.

The interview is stateless on the server: every turn arrives with the
conversation so far, the résumé draft, and a ConversationSession snapshot,
and leaves with an updated snapshot. Nothing here is persisted.

Architecture:
    ┌──────────────────────┐
    │ ConversationSession  │  Progress that survives between turns
    └──────────┬───────────┘
               │ carried by
    ┌──────────▼───────────┐
    │ InterviewTurnState   │  Scratch state for one pass of the turn graph
    └──────────────────────┘
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypedDict

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from resume_interview.agents.fields import CandidateField


class Section(str, Enum):
    """Interview sections, in interview order.

    The declaration order is the interview order; SECTION_ORDER in
    sections.py is derived from it.
    """

    LANGUAGE = "language"
    INTRO = "intro"
    PERSONAL = "personal"
    WORK = "work"
    EDUCATION = "education"
    VOLUNTEERING = "volunteering"
    SKILLS = "skills"
    REFERENCES = "references"
    REVIEW = "review"
    COMPLETE = "complete"


class SkillsSubCategory(str, Enum):
    """Position inside the skills section."""

    TECHNICAL = "technical"
    CERTIFICATIONS = "certifications"
    LANGUAGES = "languages"
    SOFT_SKILLS = "softSkills"
    DONE = "done"


class UserTone(str, Enum):
    """Tone inferred from the latest user message."""

    CONFIDENT = "confident"
    UNCERTAIN = "uncertain"
    FRUSTRATED = "frustrated"
    NEUTRAL = "neutral"


class ContradictionRecord(BaseModel):
    """A user denial that conflicts with data already in the draft.

    Attributes:
        section: Draft list key the denial refers to ("workExperience", ...).
        existing_data_summary: Human-readable list of the entries at stake.
        proposed_clear: Always True; clearing needs the user's confirmation.
    """

    section: str
    existing_data_summary: str
    proposed_clear: bool = True


class ConversationSession(BaseModel):
    """Per-conversation progress handed back and forth with the client.

    Attributes:
        current_section: Section the interview is in.
        follow_up_counts: Follow-up questions asked so far, per section.
        entry_indices: Index of the entry being filled, per multi-entry section.
        skills_cursor: Next skills sub-category to ask about.
        flags: Has-flags the user answered (hasWorkExperience, ...).
        completed_sections: Sections the interview has moved past.
        mentioned_entities: Names, companies and schools seen so far.
        answered_topics: Topics already covered, to avoid re-asking.
        user_tone: Tone of the latest user message.
        consecutive_errors: Backend failures in a row.
        pending_contradiction: Denial awaiting keep/remove from the user.
        language: ISO code of the interview language.
    """

    model_config = ConfigDict(extra="forbid")

    current_section: Section = Section.LANGUAGE
    follow_up_counts: dict[Section, NonNegativeInt] = Field(default_factory=dict)
    entry_indices: dict[Section, NonNegativeInt] = Field(default_factory=dict)
    skills_cursor: SkillsSubCategory = SkillsSubCategory.TECHNICAL
    flags: dict[str, bool] = Field(default_factory=dict)
    completed_sections: list[Section] = Field(default_factory=list)
    mentioned_entities: list[str] = Field(default_factory=list)
    answered_topics: list[str] = Field(default_factory=list)
    user_tone: UserTone = UserTone.NEUTRAL
    consecutive_errors: NonNegativeInt = 0
    pending_contradiction: ContradictionRecord | None = None
    language: str = "en"

    def follow_up_count(self, section: Section) -> int:
        """Follow-up questions asked in ``section`` so far."""
        return self.follow_up_counts.get(section, 0)

    def entry_index(self, section: Section) -> int:
        """Index of the entry currently being filled in ``section``."""
        return self.entry_indices.get(section, 0)


@dataclass
class TurnInput:
    """Everything one turn needs, already validated by the API layer.

    Attributes:
        history: Prior messages as {"role", "content"} dicts, oldest first.
        resume_data: Current résumé draft.
        user_message: The user's new message.
        session: Session snapshot at the start of the turn.
    """

    history: list[dict[str, str]]
    resume_data: dict[str, Any]
    user_message: str
    session: ConversationSession


@dataclass
class TurnResult:
    """Outcome of one turn, before conversion to the wire schema."""

    success: bool
    assistant_message: str
    session: ConversationSession
    resume_data: dict[str, Any]
    extracted_fields: list[CandidateField] = field(default_factory=list)
    needs_confirmation: list[CandidateField] = field(default_factory=list)
    suggested_section: Section | None = None
    follow_up_needed: bool = False
    is_complete: bool = False
    special_content: dict[str, Any] | None = None
    contradiction: ContradictionRecord | None = None
    confidence: float = 0.5
    suggest_form_mode: bool = False
    error_code: str | None = None
    usage: dict[str, int] | None = None


class TurnSignals(TypedDict, total=False):
    """Classifier verdicts on the user message, computed once per turn.

    Attributes:
        effective_section: Section the user is answering in.
        effective_follow_up: Follow-up count that goes with it.
        said_no_to_gate: Declined the section's yes/no gate question.
        said_yes_to_gate: Accepted the section's yes/no gate question.
        escape: Asked to move on.
        frustrated: Showed frustration.
        needs_email_help: Has no email address or does not know how to get one.
        export_requested: Asked for the finished résumé (review/complete only).
        tone: Inferred tone.
    """

    effective_section: Section
    effective_follow_up: int
    said_no_to_gate: bool
    said_yes_to_gate: bool
    escape: bool
    frustrated: bool
    needs_email_help: bool
    export_requested: bool
    tone: UserTone


class InterviewTurnState(TypedDict, total=False):
    """State for one pass of the interview turn graph.

    Attributes:
        turn: Validated turn input.
        previous_assistant: Last assistant message in the history, or "".
        signals: Classifier verdicts on the user message.
        system_prompt: Instructions sent to the backend.
        backend_reply: Raw reply text from the backend.
        backend_failed: True when the backend call raised or returned nothing.
        error_code: Machine-readable failure code for the response.
        usage: Token counts reported by the backend.
        reply_text: Reply text after payload removal and corrections.
        payload: Parsed structured payload, or None.
        fields: Candidate fields gathered this turn.
        suggested_section: Section the turn moves to, if any.
        follow_up_needed: Whether the reply asks a follow-up question.
        is_complete: Whether the interview is finished.
        special_content: Inline content for the client (email guide).
        contradiction: Contradiction raised this turn.
        escaped: The user asked to move on and the turn moves to the next
            section.
        session: Session snapshot being updated.
        draft: Draft with confident fields merged.
        applied: Fields merged into the draft.
        needs_confirmation: Fields held back for confirmation.
        result: Final TurnResult.
    """

    turn: TurnInput
    previous_assistant: str
    signals: TurnSignals
    system_prompt: str
    backend_reply: str | None
    backend_failed: bool
    error_code: str | None
    usage: dict[str, int] | None
    reply_text: str
    payload: Any
    fields: list[CandidateField]
    suggested_section: Section | None
    follow_up_needed: bool
    is_complete: bool
    special_content: dict[str, Any] | None
    contradiction: ContradictionRecord | None
    escaped: bool
    session: ConversationSession
    draft: dict[str, Any]
    applied: list[CandidateField]
    needs_confirmation: list[CandidateField]
    result: TurnResult
