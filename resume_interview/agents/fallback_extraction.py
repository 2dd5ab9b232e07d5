"""Deterministic field extraction for replies without a payload.

When the backend answers without a usable structured block, the user's
message is still worth keeping. The previous assistant question tells us
which field was asked for; keyword tables map the question to a field and
the user's answer becomes its value.

Order of checks, per section:
    1. add-another question  → nothing, or the next section on "no"
    2. gate question         → the has-flag only
    3. yes/no detail question ("Is this your current job?")
    4. detail questions      → first matching FieldRule wins

A yes/no answer is never stored as free-text content.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from resume_interview.agents.classifiers import (
    PatternClassifier,
    is_gate_question,
    is_no,
    is_no_work_experience,
    is_yes,
)
from resume_interview.agents.entries import DONE_ADDING, is_add_another_question
from resume_interview.agents.fields import CandidateField, FieldPath
from resume_interview.agents.sections import (
    SECTION_ADVANCE_MAP,
    SECTION_DRAFT_KEYS,
    SECTION_FLAG_MAP,
)
from resume_interview.agents.skills import SKILLS_FLAGS, detect_phase, detect_subcategory
from resume_interview.agents.state import ConversationSession, Section, SkillsSubCategory
from resume_interview.services.formatters import format_city_state, format_phone_number

logger = logging.getLogger(__name__)

# =============================================================================
# Confidence Levels
# =============================================================================

FLAG_CONFIDENCE = 0.95
LANGUAGE_CONFIDENCE = 0.95
EMAIL_CONFIDENCE = 0.95
NAME_CONFIDENCE = 0.9
PHONE_CONFIDENCE = 0.9
STATUS_CONFIDENCE = 0.9
SPLIT_CONFIDENCE = 0.9
TEXT_CONFIDENCE = 0.85
DATE_CONFIDENCE = 0.8
LOCATION_CONFIDENCE = 0.8
RELATIONSHIP_CONFIDENCE = 0.8
LANGUAGES_LIST_CONFIDENCE = 0.8
UPON_REQUEST_CONFIDENCE = 0.9

DEFAULT_PROFICIENCY = "Fluent"

# Names and endonyms accepted as an answer to the language question.
LANGUAGE_CODES: dict[str, str] = {
    "english": "en",
    "espanol": "es",
    "español": "es",
    "spanish": "es",
    "francais": "fr",
    "français": "fr",
    "french": "fr",
    "deutsch": "de",
    "german": "de",
    "portugues": "pt",
    "português": "pt",
    "portuguese": "pt",
    "中文": "zh",
    "chinese": "zh",
    "日本語": "ja",
    "japanese": "ja",
    "한국어": "ko",
    "korean": "ko",
    "العربية": "ar",
    "arabic": "ar",
    "हिन्दी": "hi",
    "hindi": "hi",
}

_EMAIL_PATTERN = re.compile(r"[\w.-]+@[\w.-]+\.\w+")
_PHONE_PATTERN = re.compile(r"[\d\s()+-]{7,}")
_DIGITS_ONLY_PATTERN = re.compile(r"^\d+$")
_LIST_SEPARATOR_PATTERN = re.compile(r"[,;]")
_DEGREE_WITH_FIELD_PATTERN = re.compile(r"^(.+?)\s+in\s+(.+)$", re.IGNORECASE)
_PROFICIENCY_PATTERN = re.compile(
    r"(native|fluent|advanced|intermediate|basic|beginner)", re.IGNORECASE
)
_PROFICIENCY_STRIP_PATTERN = re.compile(
    r"native|fluent|advanced|intermediate|basic|beginner|[()\-]", re.IGNORECASE
)
_SPACES_PATTERN = re.compile(r"\s+")

SKILLS_DRAFT_KEYS: dict[SkillsSubCategory, str] = {
    SkillsSubCategory.TECHNICAL: "technicalSkills",
    SkillsSubCategory.CERTIFICATIONS: "certifications",
    SkillsSubCategory.LANGUAGES: "languages",
    SkillsSubCategory.SOFT_SKILLS: "softSkills",
}

_CURRENT_JOB_ANSWER = PatternClassifier(
    "current_job_answer", [r"current", r"present", r"still", r"\byes\b", r"i am", r"i'm still"]
)
_STILL_STUDYING_ANSWER = PatternClassifier(
    "still_studying_answer", [r"current", r"still", r"studying"]
)
_UPON_REQUEST_ANSWER = PatternClassifier("upon_request", [r"upon request", r"available"])

# (name, value, confidence) triples relative to the rule's base path.
Extracted = list[tuple[str, Any, float]]


@dataclass
class FallbackResult:
    """Fields recovered from the user's message and a section suggestion."""

    fields: list[CandidateField] = field(default_factory=list)
    suggested_section: Section | None = None


# =============================================================================
# Answer Parsers
# =============================================================================


def _as_is(name: str, confidence: float) -> Callable[[str], Extracted]:
    def parse(answer: str) -> Extracted:
        return [(name, answer, confidence)]

    return parse


def split_list(answer: str) -> list[str]:
    """Split "a, b; c" into ["a", "b", "c"]."""
    return [item.strip() for item in _LIST_SEPARATOR_PATTERN.split(answer) if item.strip()]


def parse_languages(answer: str) -> list[dict[str, str]]:
    """Parse "Spanish - fluent, French (basic)" into language entries.

    Proficiency defaults to Fluent when none is named.
    """
    languages = []
    for item in split_list(answer):
        match = _PROFICIENCY_PATTERN.search(item)
        proficiency = match.group(1) if match else DEFAULT_PROFICIENCY
        language = _SPACES_PATTERN.sub(" ", _PROFICIENCY_STRIP_PATTERN.sub("", item)).strip()
        if language:
            languages.append({"language": language, "proficiency": proficiency})
    return languages


def _parse_name(answer: str) -> Extracted:
    if "@" in answer or _DIGITS_ONLY_PATTERN.match(answer) or len(answer) <= 1:
        return []
    return [("fullName", answer, NAME_CONFIDENCE)]


def _parse_email(answer: str) -> Extracted:
    match = _EMAIL_PATTERN.search(answer)
    return [("email", match.group(0), EMAIL_CONFIDENCE)] if match else []


def _parse_phone(answer: str) -> Extracted:
    match = _PHONE_PATTERN.search(answer)
    if not match:
        return []
    return [("phone", format_phone_number(match.group(0).strip()), PHONE_CONFIDENCE)]


def _parse_city(answer: str) -> Extracted:
    if len(answer) <= 2 or "@" in answer:
        return []
    return [("city", format_city_state(answer), TEXT_CONFIDENCE)]


def _parse_end_date(answer: str) -> Extracted:
    if _CURRENT_JOB_ANSWER.matches(answer):
        return [("isCurrentJob", True, STATUS_CONFIDENCE)]
    return [("endDate", answer, DATE_CONFIDENCE)]


def _parse_degree(answer: str) -> Extracted:
    match = _DEGREE_WITH_FIELD_PATTERN.match(answer)
    if match:
        return [
            ("degree", match.group(1).strip(), SPLIT_CONFIDENCE),
            ("fieldOfStudy", match.group(2).strip(), SPLIT_CONFIDENCE),
        ]
    return [("degree", answer, TEXT_CONFIDENCE)]


def _parse_graduation(answer: str) -> Extracted:
    if _STILL_STUDYING_ANSWER.matches(answer):
        return [("isCurrentlyStudying", True, STATUS_CONFIDENCE)]
    return [("endYear", answer, DATE_CONFIDENCE)]


def _parse_reference_phone(answer: str) -> Extracted:
    match = _PHONE_PATTERN.search(answer)
    return [("phone", match.group(0).strip(), PHONE_CONFIDENCE)] if match else []


# =============================================================================
# Rule Tables
# =============================================================================


@dataclass(frozen=True)
class FieldRule:
    """Question keywords and how to read the answer to that question."""

    trigger: PatternClassifier
    parse: Callable[[str], Extracted]


@dataclass(frozen=True)
class YesNoRule:
    """A yes/no detail question whose answer is a boolean field."""

    trigger: PatternClassifier
    name: str
    affirmative: PatternClassifier | None = None


@dataclass(frozen=True)
class SectionRules:
    """Everything the extractor knows about one section's questions."""

    gate: PatternClassifier | None = None
    yes_no: tuple[YesNoRule, ...] = ()
    details: tuple[FieldRule, ...] = ()


def _rule(name: str, patterns: list[str], parse: Callable[[str], Extracted]) -> FieldRule:
    return FieldRule(trigger=PatternClassifier(name, patterns), parse=parse)


PERSONAL_RULES: tuple[FieldRule, ...] = (
    _rule("ask_name", [r"full name", r"your name"], _parse_name),
    _rule("ask_email", [r"email"], _parse_email),
    _rule("ask_phone", [r"phone"], _parse_phone),
    _rule("ask_city", [r"city", r"location", r"live"], _parse_city),
)

SECTION_RULES: dict[Section, SectionRules] = {
    Section.WORK: SectionRules(
        gate=PatternClassifier("work_gate", [r"work experience", r"any jobs"]),
        yes_no=(
            YesNoRule(
                trigger=PatternClassifier(
                    "ask_current_job",
                    [r"still work", r"current job", r"is this your current", r"still there"],
                ),
                name="isCurrentJob",
                affirmative=_CURRENT_JOB_ANSWER,
            ),
        ),
        details=(
            _rule(
                "ask_company",
                [r"company", r"work for", r"employer"],
                _as_is("companyName", TEXT_CONFIDENCE),
            ),
            _rule(
                "ask_job_title",
                [r"job title", r"position", r"^(?!.*volunteer).*\brole\b"],
                _as_is("jobTitle", TEXT_CONFIDENCE),
            ),
            _rule(
                "ask_start_date",
                [r"start", r"begin", r"when did you join"],
                _as_is("startDate", DATE_CONFIDENCE),
            ),
            _rule("ask_end_date", [r"\bend", r"leave", r"when did you stop"], _parse_end_date),
            _rule(
                "ask_job_location",
                [
                    r"(location|where|city).*(job|work|position)",
                    r"(job|work|position).*(location|where|city)",
                ],
                _as_is("location", LOCATION_CONFIDENCE),
            ),
            _rule(
                "ask_responsibilities",
                [r"responsibilit", r"duties", r"what did you do", r"main tasks"],
                _as_is("responsibilities", TEXT_CONFIDENCE),
            ),
        ),
    ),
    Section.EDUCATION: SectionRules(
        gate=PatternClassifier("education_gate", [r"education", r"school"]),
        yes_no=(
            YesNoRule(
                trigger=PatternClassifier(
                    "ask_still_studying",
                    [r"still studying", r"currently enrolled", r"are you still"],
                ),
                name="isCurrentlyStudying",
            ),
        ),
        details=(
            _rule(
                "ask_degree",
                [r"degree", r"diploma", r"certificate", r"qualification"],
                _parse_degree,
            ),
            _rule(
                "ask_school",
                [r"school", r"university", r"college", r"institution"],
                _as_is("schoolName", TEXT_CONFIDENCE),
            ),
            _rule(
                "ask_field_of_study",
                [r"\bstudy\b", r"major", r"\bfield\b", r"subject"],
                _as_is("fieldOfStudy", TEXT_CONFIDENCE),
            ),
            _rule(
                "ask_graduation",
                [r"graduat", r"finish", r"complete", r"year"],
                _parse_graduation,
            ),
        ),
    ),
    Section.VOLUNTEERING: SectionRules(
        gate=PatternClassifier("volunteering_gate", [r"volunteer"]),
        details=(
            _rule(
                "ask_organization",
                [r"organization", r"where did you volunteer"],
                _as_is("organization", TEXT_CONFIDENCE),
            ),
            _rule(
                "ask_volunteer_role",
                [r"role", r"position", r"title"],
                _as_is("role", TEXT_CONFIDENCE),
            ),
            _rule(
                "ask_volunteer_duties",
                [r"responsibilit", r"what did you do", r"duties"],
                _as_is("responsibilities", TEXT_CONFIDENCE),
            ),
            _rule(
                "ask_volunteer_dates",
                [r"when", r"date", r"time period"],
                _as_is("dates", DATE_CONFIDENCE),
            ),
        ),
    ),
    Section.REFERENCES: SectionRules(
        gate=PatternClassifier("references_gate", [r"reference"]),
        details=(
            _rule(
                "ask_reference_name",
                [r"name.*reference", r"reference.*name"],
                _as_is("name", TEXT_CONFIDENCE),
            ),
            _rule(
                "ask_reference_title",
                [r"title", r"position"],
                _as_is("jobTitle", TEXT_CONFIDENCE),
            ),
            _rule(
                "ask_reference_company",
                [r"company", r"work"],
                _as_is("company", TEXT_CONFIDENCE),
            ),
            _rule("ask_reference_phone", [r"phone", r"number"], _parse_reference_phone),
            _rule("ask_reference_email", [r"email"], _parse_email),
            _rule(
                "ask_relationship",
                [r"relationship", r"know"],
                _as_is("relationship", RELATIONSHIP_CONFIDENCE),
            ),
        ),
    ),
}

# =============================================================================
# Extraction
# =============================================================================


def _yes_no(answer: str) -> str | None:
    if is_yes(answer):
        return "yes"
    if is_no(answer):
        return "no"
    return None


def _extract_language(answer: str, result: FallbackResult) -> None:
    code = LANGUAGE_CODES.get(answer.casefold())
    if code:
        result.fields.append(
            CandidateField(path=FieldPath.of("language"), value=code, confidence=LANGUAGE_CONFIDENCE)
        )
        result.suggested_section = Section.INTRO


def _extract_personal(question: str, answer: str, result: FallbackResult) -> None:
    for rule in PERSONAL_RULES:
        if not rule.trigger.matches(question):
            continue
        for name, value, confidence in rule.parse(answer):
            result.fields.append(
                CandidateField(
                    path=FieldPath.of("personalInfo", name), value=value, confidence=confidence
                )
            )
            if name == "fullName":
                result.suggested_section = Section.PERSONAL
        return


def _extract_skills(question: str, answer: str, result: FallbackResult) -> None:
    subcategory = detect_subcategory(question)
    phase = detect_phase(question) or ("gate" if is_gate_question(question) else None)
    if subcategory is None or phase is None:
        return
    verdict = _yes_no(answer)

    if phase == "gate":
        if verdict is not None:
            result.fields.append(
                CandidateField(
                    path=FieldPath.of(SKILLS_FLAGS[subcategory]),
                    value=verdict == "yes",
                    confidence=FLAG_CONFIDENCE,
                )
            )
            if verdict == "no" and subcategory == SkillsSubCategory.SOFT_SKILLS:
                result.suggested_section = Section.REFERENCES
        return

    if verdict is not None:
        return
    if subcategory == SkillsSubCategory.LANGUAGES:
        value: list[Any] = parse_languages(answer)
        confidence = LANGUAGES_LIST_CONFIDENCE
    else:
        value = split_list(answer)
        confidence = TEXT_CONFIDENCE
    if value:
        key = SKILLS_DRAFT_KEYS[subcategory]
        result.fields.append(
            CandidateField(path=FieldPath.of("skills", key), value=value, confidence=confidence)
        )


def _extract_gate(
    section: Section, rules: SectionRules, question: str, answer: str, result: FallbackResult
) -> bool:
    """Handle a gate question. Returns True if ``question`` was one."""
    if rules.gate is None or not (rules.gate.matches(question) and is_gate_question(question)):
        return False

    verdict = _yes_no(answer)
    if section == Section.WORK and is_no_work_experience(answer):
        verdict = "no"
    upon_request = section == Section.REFERENCES and _UPON_REQUEST_ANSWER.matches(answer)

    flag = SECTION_FLAG_MAP[section]
    if verdict == "yes":
        result.fields.append(
            CandidateField(path=FieldPath.of(flag), value=True, confidence=FLAG_CONFIDENCE)
        )
    elif verdict == "no" or upon_request:
        result.fields.append(
            CandidateField(path=FieldPath.of(flag), value=False, confidence=FLAG_CONFIDENCE)
        )
        if upon_request:
            result.fields.append(
                CandidateField(
                    path=FieldPath.of("referencesUponRequest"),
                    value=True,
                    confidence=UPON_REQUEST_CONFIDENCE,
                )
            )
        result.suggested_section = SECTION_ADVANCE_MAP[section]
    return True


def _extract_entry(
    section: Section,
    question: str,
    answer: str,
    entry_index: int,
    result: FallbackResult,
) -> None:
    rules = SECTION_RULES[section]
    list_key = SECTION_DRAFT_KEYS[section]

    if is_add_another_question(question, section):
        if DONE_ADDING.matches(answer):
            result.suggested_section = SECTION_ADVANCE_MAP[section]
        return

    if _extract_gate(section, rules, question, answer, result):
        return

    verdict = _yes_no(answer)
    for yes_no in rules.yes_no:
        if not yes_no.trigger.matches(question):
            continue
        affirmed = verdict == "yes" or (
            yes_no.affirmative is not None and yes_no.affirmative.matches(answer)
        )
        if affirmed or verdict == "no":
            result.fields.append(
                CandidateField(
                    path=FieldPath.entry(list_key, entry_index, yes_no.name),
                    value=affirmed,
                    confidence=STATUS_CONFIDENCE,
                )
            )
            return
        # An answer that is not yes/no may still answer a detail question
        # asked in the same message, e.g. a graduation year.
        break

    if verdict is not None:
        return

    for rule in rules.details:
        if rule.trigger.matches(question):
            for name, value, confidence in rule.parse(answer):
                result.fields.append(
                    CandidateField(
                        path=FieldPath.entry(list_key, entry_index, name),
                        value=value,
                        confidence=confidence,
                    )
                )
            return


def fallback_extract(
    user_message: str,
    section: Section,
    previous_assistant: str,
    session: ConversationSession | None = None,
) -> FallbackResult:
    """Recover fields from the user's answer to the previous question.

    Args:
        user_message: The user's answer.
        section: Effective section of the turn.
        previous_assistant: The question being answered.
        session: Session snapshot; supplies the current entry index.

    Returns:
        FallbackResult, possibly empty.
    """
    result = FallbackResult()
    answer = user_message.strip()
    question = previous_assistant or ""
    if not answer:
        return result

    if section == Section.LANGUAGE:
        _extract_language(answer, result)
    if section in (Section.LANGUAGE, Section.INTRO, Section.PERSONAL):
        _extract_personal(question, answer, result)
    elif section == Section.SKILLS:
        _extract_skills(question, answer, result)
    elif section in SECTION_RULES:
        entry_index = session.entry_index(section) if session else 0
        _extract_entry(section, question, answer, entry_index, result)

    if result.fields or result.suggested_section:
        logger.info(
            "Fallback extraction for %s produced %d fields (suggested: %s)",
            section.value,
            len(result.fields),
            result.suggested_section.value if result.suggested_section else None,
        )
    return result
