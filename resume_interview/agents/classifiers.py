"""Pattern classifiers for user messages.

Every classifier is an ordered table of case-insensitive regexes; the first
match wins. Tables are data so they can be audited and extended without
touching control flow. Inputs are truncated before matching so a pasted
essay cannot make a pattern scan expensive.

Classifiers:
    is_escape_phrase    "move on", "skip this", "I'm done" (not a bare "no"
                        in a gated section; that is an answer)
    is_yes / is_no      bare yes/no answers
    is_frustrated       "I already told you", "why do you keep asking"
    is_missing_email    no address, or no idea how to get one
    is_export_intent    "download", "pdf", "finished"; only meaningful in
                        review/complete, callers check the section
    detect_contradiction_phrase
                        explicit denial of a section ("I have no
                        volunteer experience"), never a bare "no"
    classify_tone       frustrated / uncertain / confident / neutral
"""

import re
from dataclasses import dataclass, field

from resume_interview.agents.sections import GATED_SECTIONS
from resume_interview.agents.state import Section, UserTone

# Longest prefix of a message any classifier looks at.
_MAX_REGEX_INPUT_LENGTH = 2000


@dataclass
class PatternClassifier:
    """Ordered regex table; first match wins.

    Attributes:
        name: Label used in logs.
        patterns: Regex sources, compiled case-insensitive.
    """

    name: str
    patterns: list[str]
    _compiled: list[re.Pattern[str]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._compiled = [re.compile(p, re.IGNORECASE) for p in self.patterns]

    def first_match(self, text: str | None) -> str | None:
        """Return the source of the first matching pattern, or None."""
        if not text:
            return None
        sample = text.strip()[:_MAX_REGEX_INPUT_LENGTH]
        for pattern in self._compiled:
            if pattern.search(sample):
                return pattern.pattern
        return None

    def matches(self, text: str | None) -> bool:
        """True if any pattern matches."""
        return self.first_match(text) is not None


# =============================================================================
# Pattern Tables
# =============================================================================

BARE_NO = PatternClassifier("bare_no", [r"^(no|nope|nah)\.?$"])

ESCAPE = PatternClassifier(
    "escape",
    [
        r"move on",
        r"skip( this)?",
        r"next( question| section)?",
        r"that'?s (enough|all|it)",
        r"let'?s continue",
        r"nothing (else|more)",
        r"no more",
        r"i'?m done( with this)?",
        r"can we move",
        r"that'?s (everything|all i have)",
        r"i (don'?t|do not) have (any )?more",
        r"i'?ve (said|told|given) (everything|all)",
        r"there('?s| is) nothing (else|more)",
        r"^(no|nope|nah)\.?$",
        r"not (really|at this time|now)",
        r"none( to add)?",
        r"just (move|go) on",
        r"can'?t we just",
        r"i (just )?want(ed)? to (finish|move|continue)",
        r"in a hurry",
        r"short on time",
        r"let'?s (speed|hurry) (this )?up",
    ],
)

YES = PatternClassifier(
    "yes",
    [r"^(yes|yeah|yep|yup|sure|definitely|absolutely|i do|i have|y|ok|okay)\.?$"],
)

NO = PatternClassifier(
    "no",
    [r"^(no|nope|nah|none|nothing|skip|n/a|n|not really)\.?$"],
)

# Gate answers are matched a little more loosely than bare yes/no.
GATE_NO = PatternClassifier(
    "gate_no",
    [
        r"^no\.?$",
        r"^nope\.?$",
        r"^nah\.?$",
        r"^not really\.?$",
        r"^no,?\s*(thanks|thank you)?\.?$",
        r"^i (don'?t|do not|dont) have (any|that)",
        r"^i have no",
        r"^none\.?$",
        r"^nothing\.?$",
        r"^skip\.?$",
        r"^n/a\.?$",
    ],
)

GATE_YES = PatternClassifier(
    "gate_yes",
    [
        r"^yes\.?$",
        r"^yeah\.?$",
        r"^yep\.?$",
        r"^yup\.?$",
        r"^sure\.?$",
        r"^definitely\.?$",
        r"^absolutely\.?$",
        r"^of course\.?$",
        r"^i do\.?$",
        r"^i have\.?$",
        r"^yes,?\s*(i do|i have|please)?\.?$",
        r"^y$",
    ],
)

FRUSTRATION = PatternClassifier(
    "frustration",
    [
        r"i (already|just) (said|told)",
        r"why (are you|do you keep) asking",
        r"stop asking",
        r"this is (taking|too)",
        r"i don'?t (know|understand)",
        r"can'?t (you|we) just",
        r"forget it",
        r"never ?mind",
    ],
)

UNCERTAINTY = PatternClassifier(
    "uncertainty",
    [r"not sure", r"\bmaybe\b", r"\bi think\b", r"\bi guess\b", r"\bprobably\b", r"kind of", r"\bidk\b"],
)

CONFIDENCE = PatternClassifier(
    "confidence",
    [r"\bdefinitely\b", r"\babsolutely\b", r"\bof course\b", r"\bfor sure\b", r"\bcertainly\b"],
)

MISSING_EMAIL = PatternClassifier(
    "missing_email",
    [
        r"don'?t have (an? )?email",
        r"no email",
        r"i need (to )?(get|create|make) (an? )?email",
        r"don'?t (have|use) email",
        r"never had (an )?email",
        r"what'?s (an )?email",
        r"what is (an )?email",
        r"how do i (get|make|create) (an )?email",
        r"how (can|do) i (set up|get|make) (an )?email",
        r"i'?m not sure (how|what) email",
        r"can you help( me)? (with|create|get|make) (an )?email",
        r"i (only )?use (my )?phone",
        r"i (just )?use facebook",
        r"my (kid|child|grandkid|son|daughter|family) (does|handles) (my |the )?email",
        r"someone else (does|handles|checks) (my |the )?email",
        r"confused about email",
        r"email (is |seems )?(too )?(hard|complicated|confusing)",
    ],
)

NO_WORK_EXPERIENCE = PatternClassifier(
    "no_work_experience",
    [
        r"no work experience",
        r"(this is|it'?s) my first job",
        r"never (had a |worked)",
        r"just (graduated|finished school)",
        r"looking for (my )?first",
        r"haven'?t worked (before|yet)",
    ],
)

EXPORT_INTENT = PatternClassifier(
    "export_intent",
    [
        r"\bpdf\b",
        r"download",
        r"export",
        r"generate.*resume",
        r"create.*resume",
        r"ready to (download|export|generate)",
        r"get my resume",
        r"finish(ed)?",
        r"done",
        r"\bword\b",
        r"\bdocx?\b",
    ],
)

GATE_QUESTION = PatternClassifier(
    "gate_question",
    [
        r"\(yes or no\)",
        r"yes or no\?",
        r"do you have any .+\?$",
        r"would you like to (add|include) .+\?$",
        r"is this your current (job|position)\?",
        r"are you still (working|studying)",
        r"do you speak any languages",
    ],
)

KEEP_ANSWER = PatternClassifier(
    "keep_answer",
    [r"\bkeep\b", r"\bleave it\b", r"^(yes|yeah|yep|sure)\.?$"],
)

REMOVE_ANSWER = PatternClassifier(
    "remove_answer",
    [r"\bremove\b", r"\bdelete\b", r"\bclear\b", r"\bget rid\b", r"^(no|nope|nah)\.?$"],
)

# A bare answer to a gate question is never a denial of earlier data.
BARE_ANSWER = PatternClassifier("bare_answer", [r"^(no|nope|nah|none|nothing|skip|n/a)\.?$"])

# Explicit denial phrases, keyed by the draft list they would clear.
CONTRADICTION_PHRASES: dict[str, PatternClassifier] = {
    "volunteering": PatternClassifier(
        "deny_volunteering",
        [
            r"i (don'?t|do not|dont) have (any )?(volunteer|volunteering)",
            r"i have no volunteer",
            r"actually.*(don'?t|no).*(volunteer)",
            r"remove.*(volunteer|volunteering)",
            r"delete.*(volunteer|volunteering)",
        ],
    ),
    "workExperience": PatternClassifier(
        "deny_work",
        [
            r"i (don'?t|do not|dont) have (any )?(work|job) experience",
            r"i have no work experience",
            r"never (worked|had a job)",
            r"actually.*(don'?t|no).*(work|job)",
            r"remove.*(work|job)",
            r"delete.*(work|job)",
        ],
    ),
    "education": PatternClassifier(
        "deny_education",
        [
            r"i (don'?t|do not|dont) have (any )?(education|degree)",
            r"i have no education",
            r"actually.*(don'?t|no).*(education|school)",
            r"remove.*(education|school)",
            r"delete.*(education|school)",
        ],
    ),
    "references": PatternClassifier(
        "deny_references",
        [
            r"i (don'?t|do not|dont) have (any )?reference",
            r"i have no reference",
            r"actually.*(don'?t|no).*(reference)",
            r"remove.*(reference)",
            r"delete.*(reference)",
        ],
    ),
}


# Yes/no sections treat a bare "no" as the answer to the gate question.
_YES_NO_SECTIONS = frozenset(
    {Section.WORK, Section.EDUCATION, Section.VOLUNTEERING, Section.REFERENCES}
)


# =============================================================================
# Classifier Functions
# =============================================================================


def is_escape_phrase(message: str, section: Section | None = None) -> bool:
    """True if the user is asking to move on.

    A bare "no" in a yes/no section is an answer, not an escape.

    Args:
        message: User message.
        section: Section the user is answering in.

    Returns:
        True when the message asks to skip ahead.
    """
    if section in _YES_NO_SECTIONS and BARE_NO.matches(message):
        return False
    return ESCAPE.matches(message)


def is_yes(message: str) -> bool:
    """Bare affirmative answer."""
    return YES.matches(message)


def is_no(message: str) -> bool:
    """Bare negative answer."""
    return NO.matches(message)


def is_frustrated(message: str) -> bool:
    return FRUSTRATION.matches(message)


def is_missing_email(message: str) -> bool:
    return MISSING_EMAIL.matches(message)


def is_export_intent(message: str) -> bool:
    """Wants the finished résumé. Only consult in review or complete."""
    return EXPORT_INTENT.matches(message)


def is_no_work_experience(message: str) -> bool:
    return NO_WORK_EXPERIENCE.matches(message)


def is_gate_question(text: str) -> bool:
    """True if an assistant message asks a yes/no question."""
    return GATE_QUESTION.matches(text)


def user_said_no_to_section(message: str, section: Section, follow_up_count: int) -> bool:
    """Declined a gated section at its opening question.

    Only meaningful at follow-up 0; later "no" answers belong to detail
    questions such as "is this your current job?".
    """
    return follow_up_count == 0 and section in GATED_SECTIONS and GATE_NO.matches(message)


def user_said_yes_to_section(message: str, section: Section, follow_up_count: int) -> bool:
    """Accepted a gated section at its opening question."""
    return follow_up_count == 0 and section in GATED_SECTIONS and GATE_YES.matches(message)


def is_keep_answer(message: str) -> bool:
    """User wants to keep data a contradiction would clear."""
    return KEEP_ANSWER.matches(message)


def is_remove_answer(message: str) -> bool:
    """User confirms clearing data after a contradiction."""
    return not is_keep_answer(message) and REMOVE_ANSWER.matches(message)


def classify_tone(message: str) -> UserTone:
    """Infer tone from one message; frustration outranks the others."""
    if FRUSTRATION.matches(message):
        return UserTone.FRUSTRATED
    if UNCERTAINTY.matches(message):
        return UserTone.UNCERTAIN
    if CONFIDENCE.matches(message):
        return UserTone.CONFIDENT
    return UserTone.NEUTRAL


def is_bare_no(message: str) -> bool:
    """A one-word negative ("no", "none", "skip", "n/a")."""
    return BARE_ANSWER.matches(message)


def detect_contradiction_phrase(message: str) -> str | None:
    """Draft list key the user explicitly denies having, if any.

    A bare negative is an answer to a gate question, never a denial.
    """
    if is_bare_no(message):
        return None
    for draft_key, classifier in CONTRADICTION_PHRASES.items():
        if classifier.matches(message):
            return draft_key
    return None
