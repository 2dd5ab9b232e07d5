"""Interview agent for the résumé interview service.

The interviewer is a LangGraph turn pipeline. Each HTTP turn runs the graph
once: the user message is classified, the conversational backend drafts a
reply, and deterministic checks keep the reply and the extracted fields
inside the interview protocol before anything reaches the client.

Modules:
    state: Session, turn and graph state types
    sections: Section order, gate questions and transitions
    classifiers: Pattern classifiers over user messages
    skills: Skills sub-sequencer
    entries: Add-another loop for multi-entry sections
    interviewer_prompts: System prompt and message assembly
    reply_parser: Payload extraction from backend replies
    validator: Gate and transition enforcement
    fallback_extraction: Rule-based field extraction
    fields: Field paths and confidence-gated merging
    contradictions: Keep/remove handling for denials
    interviewer_graph: The turn graph itself
"""

from resume_interview.agents.contradictions import (
    KEEP_OR_REMOVE_QUESTION,
    detect_contradiction,
    resolve_contradiction,
)
from resume_interview.agents.fallback_extraction import (
    FallbackResult,
    fallback_extract,
)
from resume_interview.agents.fields import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    ApplyResult,
    CandidateField,
    FieldPath,
    apply_fields,
)
from resume_interview.agents.interviewer_graph import (
    FORM_MODE_MESSAGE,
    REPHRASE_MESSAGE,
    create_interviewer_graph,
    get_interviewer_graph,
    reset_interviewer_graph,
    run_interview_turn,
)
from resume_interview.agents.reply_parser import ParsedReply, ReplyPayload, parse_reply
from resume_interview.agents.sections import (
    GATED_SECTIONS,
    REQUIRED_FIRST_MESSAGES,
    SECTION_FALLBACK_QUESTIONS,
    SECTION_ORDER,
    SECTION_TRANSITION_MESSAGES,
    advance_session,
    follow_up_limit,
    get_next_section,
)
from resume_interview.agents.state import (
    ContradictionRecord,
    ConversationSession,
    Section,
    SkillsSubCategory,
    TurnInput,
    TurnResult,
    UserTone,
)
from resume_interview.agents.validator import ValidationResult, validate_reply

__all__ = [
    # State
    "ContradictionRecord",
    "ConversationSession",
    "Section",
    "SkillsSubCategory",
    "TurnInput",
    "TurnResult",
    "UserTone",
    # Sections
    "GATED_SECTIONS",
    "REQUIRED_FIRST_MESSAGES",
    "SECTION_FALLBACK_QUESTIONS",
    "SECTION_ORDER",
    "SECTION_TRANSITION_MESSAGES",
    "advance_session",
    "follow_up_limit",
    "get_next_section",
    # Fields
    "DEFAULT_CONFIDENCE_THRESHOLD",
    "ApplyResult",
    "CandidateField",
    "FieldPath",
    "apply_fields",
    # Reply handling
    "ParsedReply",
    "ReplyPayload",
    "ValidationResult",
    "parse_reply",
    "validate_reply",
    # Extraction
    "FallbackResult",
    "fallback_extract",
    # Contradictions
    "KEEP_OR_REMOVE_QUESTION",
    "detect_contradiction",
    "resolve_contradiction",
    # Graph
    "FORM_MODE_MESSAGE",
    "REPHRASE_MESSAGE",
    "create_interviewer_graph",
    "get_interviewer_graph",
    "reset_interviewer_graph",
    "run_interview_turn",
]
