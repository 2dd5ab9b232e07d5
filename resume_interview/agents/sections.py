"""Section state machine for the résumé interview.

The interview walks a fixed sequence of sections. Five of them open with a
yes/no gate question; the wording of those questions and of the transition
messages is a contract with clients and with the reply validator, so it
lives here and nowhere else.

Flow:
    language → intro → personal → work → education → volunteering →
    skills → references → review → complete

    Saying no at a gate skips the section. Work, volunteering and references
    are also skipped by get_next_section when their has-flag is False.
"""

import logging
import re

from resume_interview.agents.state import ConversationSession, Section

logger = logging.getLogger(__name__)

# =============================================================================
# Order and Maps
# =============================================================================

SECTION_ORDER: list[Section] = list(Section)

# WHY: Sections that open with a yes/no gate question. The gate answer at
# follow-up 0 decides whether the section is filled or skipped.
GATED_SECTIONS: frozenset[Section] = frozenset(
    {
        Section.WORK,
        Section.EDUCATION,
        Section.VOLUNTEERING,
        Section.SKILLS,
        Section.REFERENCES,
    }
)

# Sections whose gate "no" forces the canonical transition. Skills is absent:
# its gate belongs to the skills sub-sequencer, which still visits the other
# three skill categories.
FORCED_TRANSITION_SECTIONS: frozenset[Section] = frozenset(
    {Section.WORK, Section.EDUCATION, Section.VOLUNTEERING, Section.REFERENCES}
)

# Sections that collect a list of entries with an add-another loop.
MULTI_ENTRY_SECTIONS: frozenset[Section] = frozenset(
    {Section.WORK, Section.EDUCATION, Section.VOLUNTEERING, Section.REFERENCES}
)

SECTION_ADVANCE_MAP: dict[Section, Section] = {
    Section.WORK: Section.EDUCATION,
    Section.EDUCATION: Section.VOLUNTEERING,
    Section.VOLUNTEERING: Section.SKILLS,
    Section.SKILLS: Section.REFERENCES,
    Section.REFERENCES: Section.REVIEW,
}

SECTION_FLAG_MAP: dict[Section, str] = {
    Section.WORK: "hasWorkExperience",
    Section.EDUCATION: "hasEducation",
    Section.VOLUNTEERING: "hasVolunteering",
    Section.SKILLS: "hasTechnicalSkills",
    Section.REFERENCES: "hasReferences",
}

# Draft list key holding each multi-entry section's entries.
SECTION_DRAFT_KEYS: dict[Section, str] = {
    Section.WORK: "workExperience",
    Section.EDUCATION: "education",
    Section.VOLUNTEERING: "volunteering",
    Section.REFERENCES: "references",
}

# get_next_section skips these when their flag is explicitly False.
_SKIPPABLE_BY_FLAG: dict[Section, str] = {
    Section.WORK: "hasWorkExperience",
    Section.VOLUNTEERING: "hasVolunteering",
    Section.REFERENCES: "hasReferences",
}

DEFAULT_FOLLOW_UP_LIMIT = 3

# Work and education entries have more fields to collect.
FOLLOW_UP_LIMITS: dict[Section, int] = {
    Section.WORK: 5,
    Section.EDUCATION: 5,
}

# =============================================================================
# Canonical Messages
# =============================================================================

REQUIRED_FIRST_MESSAGES: dict[Section, str] = {
    Section.WORK: "**Do you have any work experience you'd like to include? (Yes or No)**",
    Section.EDUCATION: "**Do you have any education you'd like to include? (Yes or No)**",
    Section.VOLUNTEERING: (
        "**Do you have any volunteer experience you'd like to include? (Yes or No)**"
    ),
    Section.SKILLS: (
        "**Do you have any technical skills (software, tools, technologies) "
        "you'd like to highlight? (Yes or No)**"
    ),
    Section.REFERENCES: "**Would you like to add professional references? (Yes or No)**",
}

SECTION_TRANSITION_MESSAGES: dict[Section, str] = {
    Section.WORK: (
        "That's totally fine! Let's move on to your education. "
        "**Do you have any education you'd like to include? (Yes or No)**"
    ),
    Section.EDUCATION: (
        "That's perfectly fine! "
        "**Do you have any volunteer experience you'd like to include? (Yes or No)**"
    ),
    Section.VOLUNTEERING: (
        "That's perfectly fine! "
        "**Do you have any technical skills (software, tools, technologies) "
        "you'd like to highlight? (Yes or No)**"
    ),
    Section.SKILLS: "No problem! **Would you like to add professional references? (Yes or No)**",
    Section.REFERENCES: "That's fine! Let me review what we have so far.",
}

# Static re-ask used when the backend replies with no text at all.
SECTION_FALLBACK_QUESTIONS: dict[Section, str] = {
    Section.LANGUAGE: "**Which language would you like to use for your resume?**",
    Section.INTRO: "**Shall we get started on your resume?**",
    Section.PERSONAL: "**What is your full name?**",
    **REQUIRED_FIRST_MESSAGES,
    Section.REVIEW: "**Does everything look correct, or is there anything you'd like to change?**",
    Section.COMPLETE: "**Your resume is ready. Would you like to download it?**",
}

# =============================================================================
# Text Normalization
# =============================================================================

_EMPHASIS_PATTERN = re.compile(r"[*_`]+")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_QUOTE_TRANS = str.maketrans({"’": "'", "‘": "'", "“": '"', "”": '"'})


def normalize_text(text: str) -> str:
    """Fold formatting so canonical questions compare by wording alone.

    Removes markdown emphasis, folds curly quotes, collapses whitespace,
    and case-folds.
    """
    text = text.translate(_QUOTE_TRANS)
    text = _EMPHASIS_PATTERN.sub("", text)
    text = _WHITESPACE_PATTERN.sub(" ", text)
    return text.strip().casefold()


def contains_canonical(text: str, canonical: str) -> bool:
    """True if ``text`` contains ``canonical`` modulo formatting."""
    return normalize_text(canonical) in normalize_text(text)


# =============================================================================
# Navigation
# =============================================================================


def section_index(section: Section) -> int:
    """Position of ``section`` in the interview order."""
    return SECTION_ORDER.index(section)


def get_next_section(current: Section, flags: dict[str, bool] | None = None) -> Section:
    """Return the section after ``current``.

    Work, volunteering and references are skipped when their has-flag is
    explicitly False. The last section maps to itself.

    Args:
        current: Section being left.
        flags: Has-flags answered so far.

    Returns:
        The next section to visit.
    """
    flags = flags or {}
    index = section_index(current) + 1
    while index < len(SECTION_ORDER):
        candidate = SECTION_ORDER[index]
        flag = _SKIPPABLE_BY_FLAG.get(candidate)
        if flag is None or flags.get(flag) is not False:
            return candidate
        index += 1
    return SECTION_ORDER[-1]


def follow_up_limit(section: Section) -> int:
    """Maximum follow-up questions for ``section``."""
    return FOLLOW_UP_LIMITS.get(section, DEFAULT_FOLLOW_UP_LIMIT)


def should_ask_follow_up(section: Section, follow_up_count: int) -> bool:
    """True while ``section`` is under its follow-up limit."""
    return follow_up_count < follow_up_limit(section)


def advance_session(
    session: ConversationSession,
    suggested: Section | None,
) -> ConversationSession:
    """Move the session to ``suggested`` if that is a forward move.

    WHY MONOTONIC: a stale or hallucinated suggestion must never send the
    user back over sections they already finished.

    Args:
        session: Session to update in place.
        suggested: Section proposed by this turn, if any.

    Returns:
        The same session, for chaining.
    """
    if suggested is None or suggested == session.current_section:
        return session

    if section_index(suggested) < section_index(session.current_section):
        logger.info(
            "Ignoring backward section suggestion %s (current: %s)",
            suggested.value,
            session.current_section.value,
        )
        return session

    start = section_index(session.current_section)
    for skipped in SECTION_ORDER[start : section_index(suggested)]:
        if skipped not in session.completed_sections:
            session.completed_sections.append(skipped)
    session.current_section = suggested
    session.follow_up_counts[suggested] = 0
    return session


def detect_section_from_question(previous_assistant: str, current: Section) -> Section | None:
    """Find the section whose gate question the last assistant turn asked.

    Transition messages end with the next section's gate question, so the
    user's reply to one belongs to that next section even when the client
    has not caught up yet.

    Args:
        previous_assistant: The last assistant message.
        current: Section the client reports.

    Returns:
        The section whose gate was asked, unless it is behind ``current``.
    """
    if not previous_assistant:
        return None
    current_position = section_index(current)
    for section, question in REQUIRED_FIRST_MESSAGES.items():
        if section_index(section) >= current_position and contains_canonical(
            previous_assistant, question
        ):
            return section
    return None
