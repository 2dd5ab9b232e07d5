"""Interviewer LangGraph graph implementation.

One pass of the graph is one interview turn. The backend writes the reply;
every node after call_backend decides how much of it to trust.

    classify_turn → [route_turn]
        ├─ "export" → compose_export → apply_fields
        └─ "converse" → build_instructions → call_backend → [route_backend]
              ├─ "failed" → handle_backend_failure → END
              └─ "ok" → parse_reply → enforce_protocol → sequence_skills →
                   sequence_entries → extract_fallback →
                   handle_contradiction → apply_fields

    apply_fields → finalize_turn → END

The LLM provider is passed in the run config (``configurable.provider``)
and falls back to the factory singleton.
"""

import copy
import logging
from typing import Any

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, StateGraph

from resume_interview.agents.classifiers import (
    classify_tone,
    is_escape_phrase,
    is_export_intent,
    is_frustrated,
    is_missing_email,
    is_no,
    user_said_no_to_section,
    user_said_yes_to_section,
)
from resume_interview.agents.contradictions import (
    DRAFT_KEY_FLAGS,
    clearing_fields,
    contradiction_message,
    detect_contradiction,
    resolve_contradiction,
)
from resume_interview.agents.entries import (
    LOOP_RULES,
    decide_entry_loop,
    is_add_another_question,
)
from resume_interview.agents.fallback_extraction import FLAG_CONFIDENCE, fallback_extract
from resume_interview.agents.fields import (
    CandidateField,
    FieldPath,
    apply_fields,
    get_path,
)
from resume_interview.agents.interviewer_prompts import (
    EXPORT_READY_MESSAGE,
    build_messages,
    build_system_prompt,
    build_turn_hints,
)
from resume_interview.agents.reply_parser import parse_reply
from resume_interview.agents.sections import (
    FORCED_TRANSITION_SECTIONS,
    SECTION_ADVANCE_MAP,
    SECTION_FALLBACK_QUESTIONS,
    SECTION_FLAG_MAP,
    SECTION_TRANSITION_MESSAGES,
    advance_session,
    contains_canonical,
    detect_section_from_question,
    get_next_section,
    section_index,
)
from resume_interview.agents.skills import SKILLS_FLAGS, sequence_skills
from resume_interview.agents.state import (
    ConversationSession,
    InterviewTurnState,
    Section,
    TurnInput,
    TurnResult,
    TurnSignals,
)
from resume_interview.agents.validator import validate_reply
from resume_interview.core.config import settings
from resume_interview.providers import factory
from resume_interview.providers.errors import ProviderError
from resume_interview.providers.llm.base import LLMProvider, TaskType
from resume_interview.services.email_guide import (
    build_email_guide_content,
    is_email_professional,
    suggestions_for_name,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Canonical Messages
# =============================================================================

REPHRASE_MESSAGE = (
    "I'm sorry, I had trouble understanding that. Could you please rephrase or try again?"
)

FORM_MODE_MESSAGE = "Having trouble? Try our simpler step-by-step mode instead."

ESCAPE_ACKNOWLEDGMENT = "No problem, let's move on."

GRADUATION_QUESTION = (
    "Great! **What year did you graduate from your program? (Or are you still studying?)**"
)

DEFAULT_TURN_CONFIDENCE = 0.5

_ALL_FLAGS = frozenset(SECTION_FLAG_MAP.values()) | frozenset(SKILLS_FLAGS.values())

# Entry fields whose values are worth remembering as mentioned entities.
_ENTITY_FIELDS = frozenset({"fullName", "companyName", "schoolName", "organization", "name"})

_FIELD_OF_STUDY_QUESTIONS = ("what did you study", "field of study", "your major")

# =============================================================================
# Helpers
# =============================================================================


def _merge_fields(
    current: list[CandidateField], extra: list[CandidateField]
) -> list[CandidateField]:
    """Add ``extra`` fields, replacing any current field with the same path."""
    paths = {field.path for field in extra}
    return [field for field in current if field.path not in paths] + list(extra)


def _flag_field(name: str, value: bool) -> CandidateField:
    return CandidateField(path=FieldPath.of(name), value=value, confidence=FLAG_CONFIDENCE)


def _signals(state: InterviewTurnState) -> TurnSignals:
    return state.get("signals", {})


def _effective_section(state: InterviewTurnState) -> Section:
    return _signals(state).get("effective_section", state["session"].current_section)


def _contradiction_active(state: InterviewTurnState) -> bool:
    """A denial was raised this turn or a keep-or-remove answer is due."""
    return (
        state.get("contradiction") is not None
        or state["turn"].session.pending_contradiction is not None
    )


def _moves_on(state: InterviewTurnState, section: Section) -> bool:
    """The user asked to skip ahead and nothing else claims the answer.

    A one-word "no", "none" or "skip" answers the question asked, while
    "skip this" or "can we move on" leaves the section. Answers to an
    add-another question stay with the loop controller, and review and
    complete only end through an export request.
    """
    return (
        bool(_signals(state).get("escape"))
        and not is_no(state["turn"].user_message)
        and not _contradiction_active(state)
        and section not in (Section.REVIEW, Section.COMPLETE)
        and not is_add_another_question(state.get("previous_assistant", ""), section)
    )


def _config_value(config: RunnableConfig, key: str, default: Any) -> Any:
    configurable = (config or {}).get("configurable", {})
    value = configurable.get(key)
    return default if value is None else value


# =============================================================================
# Node Functions
# =============================================================================


def classify_turn_node(state: InterviewTurnState) -> InterviewTurnState:
    """Run the classifiers and work out which section the user is answering.

    The client's section can lag one step behind: a transition message ends
    with the next section's gate question, so the answer belongs to that
    next section at follow-up 0.
    """
    turn = state["turn"]
    session = turn.session.model_copy(deep=True)
    message = turn.user_message
    previous = state.get("previous_assistant", "")

    section = session.current_section
    follow_up = session.follow_up_count(section)
    detected = detect_section_from_question(previous, section)
    if detected is not None:
        section, follow_up = detected, 0

    awaiting_answer = session.pending_contradiction is not None
    contradiction = None
    if not awaiting_answer:
        contradiction = detect_contradiction(message, turn.resume_data)
    # Keep-or-remove answers and denials of existing data are not gate answers.
    gate_answer_possible = contradiction is None and not awaiting_answer

    tone = classify_tone(message)
    session.user_tone = tone
    signals: TurnSignals = {
        "effective_section": section,
        "effective_follow_up": follow_up,
        "said_no_to_gate": gate_answer_possible
        and user_said_no_to_section(message, section, follow_up),
        "said_yes_to_gate": gate_answer_possible
        and user_said_yes_to_section(message, section, follow_up),
        "escape": is_escape_phrase(message, section),
        "frustrated": is_frustrated(message),
        "needs_email_help": is_missing_email(message),
        "export_requested": section in (Section.REVIEW, Section.COMPLETE)
        and is_export_intent(message),
        "tone": tone,
    }

    logger.info(
        "Interview turn in %s (effective %s, follow-up %d, history %d)",
        session.current_section.value,
        section.value,
        follow_up,
        len(turn.history),
    )

    return {
        **state,
        "session": session,
        "signals": signals,
        "contradiction": contradiction,
        "fields": [],
        "escaped": False,
        "suggested_section": None,
        "special_content": None,
    }


def compose_export_node(state: InterviewTurnState) -> InterviewTurnState:
    """Answer an export request without calling the backend."""
    logger.info("Export requested in %s", _effective_section(state).value)
    return {
        **state,
        "reply_text": EXPORT_READY_MESSAGE,
        "payload": None,
        "is_complete": True,
        "follow_up_needed": False,
        "suggested_section": Section.COMPLETE,
    }


def build_instructions_node(state: InterviewTurnState) -> InterviewTurnState:
    """Compose the system prompt from the section guidance and turn hints."""
    session = state["session"]
    hints = build_turn_hints(_signals(state), session, state.get("contradiction"))
    system_prompt = build_system_prompt(
        _effective_section(state), session, state["turn"].resume_data, hints
    )
    return {**state, "system_prompt": system_prompt}


async def call_backend_node(
    state: InterviewTurnState,
    config: RunnableConfig,
) -> InterviewTurnState:
    """Make the turn's single backend call. No retries.

    Provider errors never propagate; they mark the turn as failed so the
    failure handler can keep the conversation alive.
    """
    provider: LLMProvider = _config_value(config, "provider", None) or factory.get_llm_provider()
    max_history = _config_value(config, "max_history_messages", settings.max_history_messages)
    turn = state["turn"]
    messages = build_messages(
        state["system_prompt"], turn.history, turn.user_message, max_history
    )

    try:
        response = await provider.complete(messages=messages, task=TaskType.INTERVIEW_TURN)
    except ProviderError as exc:
        logger.warning(
            "Interview backend %s failed in %s: %s",
            provider.provider_name,
            _effective_section(state).value,
            type(exc).__name__,
        )
        return {**state, "backend_failed": True, "error_code": "BACKEND_UNAVAILABLE"}

    usage = {"input_tokens": response.input_tokens, "output_tokens": response.output_tokens}
    if not response.content or not response.content.strip():
        logger.warning(
            "Interview backend %s returned an empty reply in %s",
            provider.provider_name,
            _effective_section(state).value,
        )
        return {
            **state,
            "backend_failed": True,
            "error_code": "BACKEND_EMPTY_REPLY",
            "usage": usage,
        }

    return {
        **state,
        "backend_failed": False,
        "backend_reply": response.content,
        "usage": usage,
    }


def handle_backend_failure_node(
    state: InterviewTurnState,
    config: RunnableConfig,
) -> InterviewTurnState:
    """Keep the conversation alive after a failed backend call.

    Nothing but the error counter changes. After enough failures in a row
    the user is offered the step-by-step form instead.
    """
    turn = state["turn"]
    max_errors = _config_value(config, "max_consecutive_errors", settings.max_consecutive_errors)
    session = turn.session.model_copy(deep=True)
    session.consecutive_errors += 1
    suggest_form_mode = session.consecutive_errors >= max_errors

    message = REPHRASE_MESSAGE
    if suggest_form_mode:
        message = f"{message}\n\n{FORM_MODE_MESSAGE}"
        logger.warning(
            "Suggesting form mode after %d consecutive errors", session.consecutive_errors
        )

    result = TurnResult(
        success=False,
        assistant_message=message,
        session=session,
        resume_data=copy.deepcopy(turn.resume_data),
        suggested_section=None,
        follow_up_needed=True,
        confidence=0.0,
        suggest_form_mode=suggest_form_mode,
        error_code=state.get("error_code"),
        usage=state.get("usage"),
    )
    return {**state, "session": session, "result": result}


def parse_reply_node(state: InterviewTurnState) -> InterviewTurnState:
    """Split the reply into display text and the structured payload."""
    parsed = parse_reply(state.get("backend_reply"))
    payload = parsed.payload
    if payload is None:
        return {
            **state,
            "reply_text": parsed.text,
            "payload": None,
            "fields": [],
            "suggested_section": None,
            "follow_up_needed": "?" in parsed.text,
            "is_complete": False,
        }

    follow_up = payload.follow_up_needed
    return {
        **state,
        "reply_text": parsed.text,
        "payload": payload,
        "fields": list(payload.fields),
        "suggested_section": payload.suggested_section,
        "follow_up_needed": follow_up if follow_up is not None else "?" in parsed.text,
        "is_complete": payload.is_complete,
    }


def enforce_protocol_node(state: InterviewTurnState) -> InterviewTurnState:
    """Apply the gate rules to the backend's reply.

    A "no" at a gate always yields the canonical transition; otherwise the
    reply goes through the validator. Skills gates are left to the skills
    sequencer, which still has three more categories to ask about.
    """
    signals = _signals(state)
    section = _effective_section(state)
    follow_up = signals.get("effective_follow_up", 0)
    said_no = signals.get("said_no_to_gate", False)
    said_yes = signals.get("said_yes_to_gate", False)
    session = state["session"]

    reply = state.get("reply_text", "")
    fields = state.get("fields", [])
    suggested = state.get("suggested_section")
    follow_up_needed = state.get("follow_up_needed", False)

    if said_no and section in FORCED_TRANSITION_SECTIONS:
        transition = SECTION_TRANSITION_MESSAGES[section]
        if reply != transition:
            logger.info("Forcing gate transition out of %s", section.value)
        fields = _merge_fields(fields, [_flag_field(SECTION_FLAG_MAP[section], False)])
        return {
            **state,
            "reply_text": transition,
            "fields": fields,
            "suggested_section": SECTION_ADVANCE_MAP[section],
            "follow_up_needed": False,
        }

    if _moves_on(state, section):
        if suggested is None or section_index(suggested) <= section_index(section):
            suggested = get_next_section(section, session.flags)
        opening = SECTION_FALLBACK_QUESTIONS[suggested]
        if not contains_canonical(reply, opening):
            reply = f"{ESCAPE_ACKNOWLEDGMENT} {opening}"
        logger.info("Moving on from %s to %s on request", section.value, suggested.value)
        return {
            **state,
            "reply_text": reply,
            "suggested_section": suggested,
            "follow_up_needed": True,
            "escaped": True,
        }

    gate_answer = "no" if said_no else "yes" if said_yes else None
    if not (section == Section.SKILLS and gate_answer) and not _contradiction_active(state):
        verdict = validate_reply(reply, section, follow_up, gate_answer)
        if not verdict.is_valid and verdict.corrected is not None:
            logger.info("Protocol violation in %s: %s", section.value, verdict.violation)
            reply = verdict.corrected
            follow_up_needed = True
            # The corrected reply asks this section's question; a jump
            # suggested alongside the rejected text does not stand.
            suggested = None

    if said_yes:
        fields = _merge_fields(fields, [_flag_field(SECTION_FLAG_MAP[section], True)])

    if section != session.current_section and (
        suggested is None or section_index(suggested) < section_index(section)
    ):
        suggested = section

    return {
        **state,
        "reply_text": reply,
        "fields": fields,
        "suggested_section": suggested,
        "follow_up_needed": follow_up_needed,
    }


def sequence_skills_node(state: InterviewTurnState) -> InterviewTurnState:
    """Walk the four skills categories in order."""
    if _effective_section(state) != Section.SKILLS or _contradiction_active(state):
        return state

    step = sequence_skills(state.get("previous_assistant", ""), state["turn"].user_message)
    if step is None:
        return state

    session = state["session"]
    session.skills_cursor = step.next_cursor
    fields = state.get("fields", [])
    if step.flag is not None:
        fields = _merge_fields(fields, [_flag_field(*step.flag)])

    return {
        **state,
        "session": session,
        "reply_text": step.message,
        "fields": fields,
        "follow_up_needed": step.follow_up_needed,
        "suggested_section": step.suggested_section,
        "escaped": False,
    }


def sequence_entries_node(state: InterviewTurnState) -> InterviewTurnState:
    """Enforce the add-another loop of multi-entry sections."""
    section = _effective_section(state)
    signals = _signals(state)
    if (
        section not in LOOP_RULES
        or state.get("escaped")
        or signals.get("said_no_to_gate")
        or _contradiction_active(state)
    ):
        return state

    session = state["session"]
    decision = decide_entry_loop(
        section,
        state.get("previous_assistant", ""),
        state["turn"].user_message,
        state.get("reply_text", ""),
        session.entry_index(section),
    )
    if decision is None:
        return state

    session.entry_indices[section] = decision.next_entry_index
    suggested = decision.suggested_section if decision.section_complete else None
    return {
        **state,
        "session": session,
        "reply_text": decision.message,
        "follow_up_needed": decision.follow_up_needed,
        "suggested_section": suggested,
    }


def _knows_field_of_study(state: InterviewTurnState, entry_index: int) -> bool:
    path = FieldPath.entry("education", entry_index, "fieldOfStudy")
    if any(field.path == path and field.value for field in state.get("fields", [])):
        return True
    return bool(get_path(state["turn"].resume_data, path))


def extract_fallback_node(state: InterviewTurnState) -> InterviewTurnState:
    """Recover fields from the user's message when the payload had none.

    Also skips the field-of-study question when the degree answer already
    gave it ("Associate in Nursing").
    """
    section = _effective_section(state)
    session = state["session"]
    payload = state.get("payload")
    fields = state.get("fields", [])
    suggested = state.get("suggested_section")
    reply = state.get("reply_text", "")

    needs_fallback = (payload is None or not payload.fields) and not state.get("escaped")
    if needs_fallback and not _contradiction_active(state):
        recovered = fallback_extract(
            state["turn"].user_message,
            section,
            state.get("previous_assistant", ""),
            session,
        )
        known = {field.path for field in fields}
        fields = fields + [field for field in recovered.fields if field.path not in known]
        if suggested is None:
            suggested = recovered.suggested_section

    if section == Section.EDUCATION:
        lowered = reply.lower()
        asks_field = any(phrase in lowered for phrase in _FIELD_OF_STUDY_QUESTIONS)
        if asks_field and _knows_field_of_study(
            {**state, "fields": fields}, session.entry_index(Section.EDUCATION)
        ):
            logger.info("Skipping field of study")
            reply = GRADUATION_QUESTION

    return {**state, "fields": fields, "suggested_section": suggested, "reply_text": reply}


def _touches(field: CandidateField, draft_key: str) -> bool:
    head = field.path.segments[0]
    return head == draft_key or head == DRAFT_KEY_FLAGS.get(draft_key)


def handle_contradiction_node(state: InterviewTurnState) -> InterviewTurnState:
    """Ask before clearing data the user just denied having.

    A new contradiction holds back every field touching that section and
    asks keep-or-remove. A pending one is resolved by the user's answer;
    only "remove" clears the data.
    """
    session = state["session"]
    fields = state.get("fields", [])
    reply = state.get("reply_text", "")
    pending = session.pending_contradiction
    raised = state.get("contradiction")

    if pending is not None:
        resolution = resolve_contradiction(pending, state["turn"].user_message)
        logger.info("Contradiction in %s resolved: %s", pending.section, resolution)
        if resolution == "remove":
            fields = [f for f in fields if not _touches(f, pending.section)]
            fields = fields + clearing_fields(pending)
            session.pending_contradiction = None
        elif resolution == "keep":
            fields = [f for f in fields if not _touches(f, pending.section)]
            session.pending_contradiction = None
        else:
            return {
                **state,
                "session": session,
                "fields": [f for f in fields if not _touches(f, pending.section)],
                "reply_text": contradiction_message(pending, reply),
                "follow_up_needed": True,
                "suggested_section": None,
            }
        return {**state, "session": session, "fields": fields}

    if raised is not None:
        session.pending_contradiction = raised
        return {
            **state,
            "session": session,
            "fields": [f for f in fields if not _touches(f, raised.section)],
            "reply_text": contradiction_message(raised, reply),
            "follow_up_needed": True,
            "suggested_section": None,
        }

    return state


def apply_fields_node(
    state: InterviewTurnState,
    config: RunnableConfig,
) -> InterviewTurnState:
    """Merge confident fields into a copy of the draft."""
    threshold = _config_value(config, "threshold", settings.field_confidence_threshold)
    applied = apply_fields(state["turn"].resume_data, state.get("fields", []), threshold)
    return {
        **state,
        "draft": applied.draft,
        "applied": applied.applied,
        "needs_confirmation": applied.needs_confirmation,
    }


def _special_content(state: InterviewTurnState) -> dict[str, Any] | None:
    """Email guide when the user has no address, a tip when theirs is risky."""
    draft = state.get("draft", {})
    personal = draft.get("personalInfo") if isinstance(draft.get("personalInfo"), dict) else {}
    full_name = personal.get("fullName") if isinstance(personal.get("fullName"), str) else None
    payload = state.get("payload")

    wants_guide = _signals(state).get("needs_email_help") or (
        payload is not None and payload.special_content == "email_guide"
    )
    if wants_guide:
        content = build_email_guide_content(state["session"].language)
        suggestions = suggestions_for_name(full_name)
        if suggestions:
            content["suggestions"] = suggestions
        return content

    email_path = FieldPath.of("personalInfo", "email")
    for field in state.get("applied", []):
        if field.path == email_path and isinstance(field.value, str):
            review = is_email_professional(field.value)
            if not review.is_professional:
                return {
                    "type": "email_tip",
                    "content": "Employers notice email addresses. Consider a simpler one.",
                    "issues": review.issues,
                    "suggestions": suggestions_for_name(full_name),
                    "expandable": False,
                }
    return None


def finalize_turn_node(state: InterviewTurnState) -> InterviewTurnState:
    """Update the session and assemble the TurnResult."""
    session: ConversationSession = state["session"]
    section = _effective_section(state)
    fields = state.get("fields", [])
    applied = state.get("applied", [])
    starting_section = session.current_section

    for field in applied:
        segments = field.path.segments
        if len(segments) == 1 and segments[0] in _ALL_FLAGS and isinstance(field.value, bool):
            session.flags[str(segments[0])] = field.value
        if segments[-1] in _ENTITY_FIELDS and isinstance(field.value, str):
            if field.value not in session.mentioned_entities:
                session.mentioned_entities.append(field.value)
        topic = str(segments[0]) if len(segments) < 3 else f"{segments[0]}.{segments[-1]}"
        if topic not in session.answered_topics:
            session.answered_topics.append(topic)

    suggested = state.get("suggested_section")
    is_complete = state.get("is_complete", False)
    if is_complete and suggested is None and starting_section == Section.REVIEW:
        suggested = Section.COMPLETE
    advance_session(session, suggested)
    reply = state.get("reply_text", "").strip()
    if not reply:
        reply = SECTION_FALLBACK_QUESTIONS[session.current_section]
    # Still in the section the user answered: the next question is a
    # follow-up. A move past it leaves the new section at 0.
    if session.current_section == section:
        session.follow_up_counts[section] = _signals(state).get("effective_follow_up", 0) + 1

    session.consecutive_errors = 0
    confidence = (
        sum(field.confidence for field in fields) / len(fields) if fields else DEFAULT_TURN_CONFIDENCE
    )

    result = TurnResult(
        success=True,
        assistant_message=reply,
        session=session,
        resume_data=state.get("draft", copy.deepcopy(state["turn"].resume_data)),
        extracted_fields=fields,
        needs_confirmation=state.get("needs_confirmation", []),
        suggested_section=suggested if suggested != starting_section else None,
        follow_up_needed=state.get("follow_up_needed", False),
        is_complete=is_complete,
        special_content=_special_content(state),
        contradiction=session.pending_contradiction,
        confidence=round(confidence, 4),
        usage=state.get("usage"),
    )

    logger.info(
        "Interview turn complete in %s: %d fields, %d applied, %d to confirm",
        session.current_section.value,
        len(fields),
        len(applied),
        len(result.needs_confirmation),
    )
    return {**state, "session": session, "result": result}


# =============================================================================
# Routing Functions
# =============================================================================


def route_turn(state: InterviewTurnState) -> str:
    """Export requests skip the backend entirely.

    Returns:
        "export" or "converse".
    """
    if _signals(state).get("export_requested"):
        return "export"
    return "converse"


def route_backend(state: InterviewTurnState) -> str:
    """Route on the outcome of the backend call.

    Returns:
        "failed" or "ok".
    """
    if state.get("backend_failed", False):
        return "failed"
    return "ok"


# =============================================================================
# Graph Construction
# =============================================================================


def create_interviewer_graph() -> StateGraph:
    """Create the interviewer LangGraph graph.

    Returns:
        Configured StateGraph (not compiled).
    """
    graph = StateGraph(InterviewTurnState)

    graph.add_node("classify_turn", classify_turn_node)
    graph.add_node("compose_export", compose_export_node)
    graph.add_node("build_instructions", build_instructions_node)
    graph.add_node("call_backend", call_backend_node)
    graph.add_node("handle_backend_failure", handle_backend_failure_node)
    graph.add_node("parse_reply", parse_reply_node)
    graph.add_node("enforce_protocol", enforce_protocol_node)
    graph.add_node("sequence_skills", sequence_skills_node)
    graph.add_node("sequence_entries", sequence_entries_node)
    graph.add_node("extract_fallback", extract_fallback_node)
    graph.add_node("handle_contradiction", handle_contradiction_node)
    graph.add_node("apply_fields", apply_fields_node)
    graph.add_node("finalize_turn", finalize_turn_node)

    graph.set_entry_point("classify_turn")

    graph.add_conditional_edges(
        "classify_turn",
        route_turn,
        {
            "export": "compose_export",
            "converse": "build_instructions",
        },
    )
    graph.add_edge("compose_export", "apply_fields")

    graph.add_edge("build_instructions", "call_backend")
    graph.add_conditional_edges(
        "call_backend",
        route_backend,
        {
            "failed": "handle_backend_failure",
            "ok": "parse_reply",
        },
    )
    graph.add_edge("handle_backend_failure", END)

    graph.add_edge("parse_reply", "enforce_protocol")
    graph.add_edge("enforce_protocol", "sequence_skills")
    graph.add_edge("sequence_skills", "sequence_entries")
    graph.add_edge("sequence_entries", "extract_fallback")
    graph.add_edge("extract_fallback", "handle_contradiction")
    graph.add_edge("handle_contradiction", "apply_fields")
    graph.add_edge("apply_fields", "finalize_turn")
    graph.add_edge("finalize_turn", END)

    return graph


# =============================================================================
# Singleton Graph Instance
# =============================================================================

_interviewer_graph: StateGraph | None = None


def get_interviewer_graph() -> StateGraph:
    """Get the compiled interviewer graph (singleton)."""
    global _interviewer_graph  # noqa: PLW0603
    if _interviewer_graph is None:
        _interviewer_graph = create_interviewer_graph().compile()  # type: ignore[assignment]
    return _interviewer_graph  # type: ignore[return-value]


def reset_interviewer_graph() -> None:
    """Reset the interviewer graph singleton.

    Useful for testing to ensure clean state.
    """
    global _interviewer_graph  # noqa: PLW0603
    _interviewer_graph = None


# =============================================================================
# Convenience Functions
# =============================================================================


def _last_assistant_message(history: list[dict[str, str]]) -> str:
    for message in reversed(history):
        if message.get("role") == "assistant":
            return message.get("content", "")
    return ""


async def run_interview_turn(
    turn: TurnInput,
    provider: LLMProvider | None = None,
    threshold: float | None = None,
    max_consecutive_errors: int | None = None,
    max_history_messages: int | None = None,
) -> TurnResult:
    """Run one interview turn.

    Args:
        turn: Validated turn input.
        provider: LLM provider. Falls back to the factory singleton.
        threshold: Minimum confidence for merging a field. Defaults to
            settings.field_confidence_threshold.
        max_consecutive_errors: Failures in a row before suggesting form
            mode. Defaults to settings.max_consecutive_errors.
        max_history_messages: History window sent to the backend.

    Returns:
        TurnResult with the reply, field deltas, merged draft and the
        updated session.

    Example:
        >>> result = await run_interview_turn(
        ...     TurnInput(history=[], resume_data={}, user_message="English",
        ...               session=ConversationSession())
        ... )
        >>> result.session.current_section
    """
    graph = get_interviewer_graph()

    initial_state: InterviewTurnState = {
        "turn": turn,
        "previous_assistant": _last_assistant_message(turn.history),
        "session": turn.session,
    }
    config: RunnableConfig = {
        "configurable": {
            "provider": provider,
            "threshold": threshold,
            "max_consecutive_errors": max_consecutive_errors,
            "max_history_messages": max_history_messages,
        }
    }

    final_state = await graph.ainvoke(initial_state, config)  # type: ignore[attr-defined]
    return final_state["result"]  # type: ignore[no-any-return]
