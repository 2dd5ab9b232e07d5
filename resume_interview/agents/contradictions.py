"""Contradictions between a user's denial and data already in the draft.

"I don't have any volunteer experience" after the draft already records a
volunteering entry is not applied. The user is asked to keep or remove the
data, and only an explicit "remove" on a later turn clears it.
"""

import logging
from typing import Any

from resume_interview.agents.classifiers import (
    detect_contradiction_phrase,
    is_keep_answer,
    is_remove_answer,
)
from resume_interview.agents.fields import CandidateField, FieldPath
from resume_interview.agents.sections import contains_canonical
from resume_interview.agents.state import ContradictionRecord

logger = logging.getLogger(__name__)

KEEP_OR_REMOVE_QUESTION = (
    "**Would you like to keep this information or remove it from your resume?**"
)

# Confidence of the fields emitted once the user confirms removal.
CLEAR_CONFIDENCE = 0.95

# Has-flag that goes False when a section's entries are removed.
DRAFT_KEY_FLAGS: dict[str, str] = {
    "workExperience": "hasWorkExperience",
    "education": "hasEducation",
    "volunteering": "hasVolunteering",
    "references": "hasReferences",
}

# (primary field, secondary field, fallback label, secondary format)
_SUMMARY_FORMATS: dict[str, tuple[str, str, str, str]] = {
    "volunteering": ("organization", "role", "Unknown organization", " as {}"),
    "workExperience": ("companyName", "jobTitle", "Unknown company", " as {}"),
    "education": ("schoolName", "degree", "Unknown school", " ({})"),
    "references": ("name", "jobTitle", "Unknown reference", " ({})"),
}


def _is_meaningful(value: Any) -> bool:
    return value not in (None, "") and value != [] and value != {}


def has_meaningful_data(entries: Any) -> bool:
    """True if any entry has a non-empty field other than ``id``."""
    if not isinstance(entries, list):
        return False
    return any(
        isinstance(entry, dict)
        and any(key != "id" and _is_meaningful(value) for key, value in entry.items())
        for entry in entries
    )


def summarize_entries(draft_key: str, entries: list[Any]) -> str:
    """Readable list of the entries a denial would clear.

    Example: "Red Cross as Driver, Food Bank".
    """
    primary, secondary, fallback, suffix = _SUMMARY_FORMATS[draft_key]
    parts = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        head, tail = entry.get(primary), entry.get(secondary)
        if not head and not tail:
            continue
        parts.append(f"{head or fallback}{suffix.format(tail) if tail else ''}")
    return ", ".join(parts)


def detect_contradiction(message: str, draft: dict[str, Any]) -> ContradictionRecord | None:
    """Check whether ``message`` denies a section the draft already has.

    Args:
        message: User message.
        draft: Current résumé draft.

    Returns:
        A ContradictionRecord, or None when there is no explicit denial or
        nothing meaningful to contradict.
    """
    draft_key = detect_contradiction_phrase(message)
    if draft_key is None:
        return None
    entries = draft.get(draft_key)
    if not has_meaningful_data(entries):
        return None
    summary = summarize_entries(draft_key, entries)
    if not summary:
        return None
    logger.info("Contradiction detected for %s (%d entries)", draft_key, len(entries))
    return ContradictionRecord(section=draft_key, existing_data_summary=summary)


def resolve_contradiction(record: ContradictionRecord, message: str) -> str | None:
    """Read the user's answer to the keep-or-remove question.

    Returns:
        "keep", "remove", or None if the answer is neither.
    """
    if is_keep_answer(message):
        return "keep"
    if is_remove_answer(message):
        return "remove"
    return None


def clearing_fields(record: ContradictionRecord) -> list[CandidateField]:
    """Fields that remove a section's entries after the user confirmed it."""
    fields = [
        CandidateField(path=FieldPath.of(record.section), value=[], confidence=CLEAR_CONFIDENCE)
    ]
    flag = DRAFT_KEY_FLAGS.get(record.section)
    if flag:
        fields.append(
            CandidateField(path=FieldPath.of(flag), value=False, confidence=CLEAR_CONFIDENCE)
        )
    return fields


def contradiction_message(record: ContradictionRecord, reply: str = "") -> str:
    """Reply that asks the keep-or-remove question.

    The backend's own reply is kept when it already asks it.
    """
    if reply and contains_canonical(reply, KEEP_OR_REMOVE_QUESTION):
        return reply
    return f"Earlier you mentioned {record.existing_data_summary}. {KEEP_OR_REMOVE_QUESTION}"
