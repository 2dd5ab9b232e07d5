"""Reply validator and corrector.

The backend is asked to follow the interview protocol but is not trusted
to. Three rules are checked in order and the first violation replaces the
reply with the canonical text:

    a. Entering a gated section (follow-up 0), the reply must ask the
       section's gate question, with at most a short acknowledgment first.
    b. After a "no" at the gate, the reply must not ask another section's
       gate question out of turn; it gets the canonical transition.
    c. After a "no" at the gate, the reply must not ask any further question
       except a confirmation (keep/remove, "did you mean", yes/no).

Wording is compared after normalize_text, so markdown emphasis, curly
apostrophes and spacing differences are not violations.
"""

import re
from dataclasses import dataclass

from resume_interview.agents.sections import (
    GATED_SECTIONS,
    REQUIRED_FIRST_MESSAGES,
    SECTION_TRANSITION_MESSAGES,
    normalize_text,
)
from resume_interview.agents.state import Section

# Longest acknowledgment allowed before the gate question ("Great! ").
MAX_ACKNOWLEDGMENT_LENGTH = 50

# Questions still allowed after the user declined a section.
_CONFIRMATION_PATTERNS = [
    re.compile(r"would you like to keep", re.IGNORECASE),
    re.compile(r"did you mean", re.IGNORECASE),
    re.compile(r"\(Yes or No\)", re.IGNORECASE),
    re.compile(r"Yes or No", re.IGNORECASE),
]


@dataclass
class ValidationResult:
    """Validator verdict.

    Attributes:
        is_valid: True if the reply passed every rule.
        corrected: Replacement reply when invalid, else None.
        violation: Violation code when invalid, else None.
    """

    is_valid: bool
    corrected: str | None = None
    violation: str | None = None


VALID = ValidationResult(is_valid=True)


def _asks_other_gate(reply: str, section: Section) -> bool:
    """True if the reply asks a gate question that belongs to another section.

    The section's own transition message ends with the next gate question,
    so that one is allowed.
    """
    normalized = normalize_text(reply)
    transition = SECTION_TRANSITION_MESSAGES.get(section, "")
    if transition and normalize_text(transition) in normalized:
        return False
    return any(
        normalize_text(question) in normalized
        for other, question in REQUIRED_FIRST_MESSAGES.items()
        if other != section
    )


def _asks_unconfirmed_question(reply: str) -> bool:
    if "?" not in reply:
        return False
    return not any(pattern.search(reply) for pattern in _CONFIRMATION_PATTERNS)


def validate_reply(
    reply: str,
    section: Section,
    follow_up_count: int,
    gate_answer: str | None = None,
) -> ValidationResult:
    """Check a backend reply against the gate and transition rules.

    Args:
        reply: Backend reply text (payload already removed).
        section: Effective section of the turn.
        follow_up_count: Follow-up count that goes with ``section``.
        gate_answer: "yes" or "no" if the user answered the gate, else None.

    Returns:
        ValidationResult; ``corrected`` carries the canonical replacement.
    """
    transition = SECTION_TRANSITION_MESSAGES.get(section)

    if follow_up_count == 0 and section in GATED_SECTIONS:
        # Rule b: declined, so the reply is the transition or nothing else.
        if gate_answer == "no":
            if transition and _asks_other_gate(reply, section):
                return ValidationResult(
                    is_valid=False, corrected=transition, violation="double_question"
                )
        elif gate_answer != "yes":
            # Rule a: the gate question must be asked, nearly verbatim.
            required = REQUIRED_FIRST_MESSAGES[section]
            normalized_reply = normalize_text(reply)
            position = normalized_reply.find(normalize_text(required))
            if position < 0:
                return ValidationResult(
                    is_valid=False, corrected=required, violation="missing_gate_question"
                )
            if position > MAX_ACKNOWLEDGMENT_LENGTH:
                return ValidationResult(
                    is_valid=False, corrected=required, violation="extra_leading_text"
                )

    # Rule c: no further questions once the user said no.
    if gate_answer == "no" and transition and _asks_unconfirmed_question(reply):
        if normalize_text(transition) not in normalize_text(reply):
            return ValidationResult(
                is_valid=False, corrected=transition, violation="question_after_no"
            )

    return VALID
