"""Multi-entry loop controller.

Work, education, volunteering and references each collect a list of
entries. After the last field of an entry the interview must ask whether
there is another one, and the answer to that question decides between a
new entry and the next section:

    ... last field answered ──► "Do you have another job...? (Yes or No)"
                                   │ yes                │ no
                                   ▼                    ▼
                      "Great! What company...?"   section transition

Each section's phrasing is a LoopRule so the four loops share one
controller.
"""

from dataclasses import dataclass

from resume_interview.agents.classifiers import PatternClassifier, is_no, is_yes
from resume_interview.agents.sections import SECTION_ADVANCE_MAP, SECTION_TRANSITION_MESSAGES
from resume_interview.agents.state import Section


@dataclass(frozen=True)
class LoopRule:
    """How one multi-entry section recognizes the end of an entry.

    Attributes:
        last_field: Phrases in the assistant question that ask for the
            entry's last field.
        first_question: Question that starts a new entry.
        add_another_question: Canonical add-another question.
        add_another: Phrases that identify an add-another question.
        min_answer_length: Answers longer than this are substantive.
        any_answer_counts: Every non-empty answer to the last field counts
            (graduation year, "still studying", a relationship).
    """

    last_field: PatternClassifier
    first_question: str
    add_another_question: str
    add_another: PatternClassifier
    min_answer_length: int = 15
    any_answer_counts: bool = False


_RESPONSIBILITY_PHRASES = [
    r"responsibilities",
    r"duties",
    r"what did you do",
    r"main responsibilities",
    r"key responsibilities",
    r"would you like to use these",
    r"use these or modify",
    r"modify them",
    r"would you like these",
    r"from this list",
    r"include any specific",
    r"want to add more",
]

LOOP_RULES: dict[Section, LoopRule] = {
    Section.WORK: LoopRule(
        last_field=PatternClassifier("work_last_field", _RESPONSIBILITY_PHRASES),
        first_question="**What company did you work for?**",
        add_another_question="**Do you have another job you'd like to add? (Yes or No)**",
        add_another=PatternClassifier(
            "work_add_another",
            [
                r"another job",
                r"other jobs?",
                r"(other|another|more) work experience",
            ],
        ),
    ),
    Section.EDUCATION: LoopRule(
        last_field=PatternClassifier(
            "education_last_field",
            [r"graduat", r"what year did you", r"still studying"],
        ),
        first_question="**What school did you attend?**",
        add_another_question="**Do you have any other education to add? (Yes or No)**",
        add_another=PatternClassifier(
            "education_add_another",
            [
                r"other education",
                r"another school",
                r"another degree",
                r"more education",
            ],
        ),
        any_answer_counts=True,
    ),
    Section.VOLUNTEERING: LoopRule(
        last_field=PatternClassifier("volunteering_last_field", _RESPONSIBILITY_PHRASES),
        first_question="**What organization did you volunteer with?**",
        add_another_question="**Do you have any other volunteer experience? (Yes or No)**",
        add_another=PatternClassifier(
            "volunteering_add_another",
            [r"(other|another|more) volunteer"],
        ),
    ),
    Section.REFERENCES: LoopRule(
        last_field=PatternClassifier(
            "references_last_field", [r"relationship", r"how do you know"]
        ),
        first_question="**What is your reference's name?**",
        add_another_question="**Would you like to add another reference? (Yes or No)**",
        add_another=PatternClassifier(
            "references_add_another",
            [r"another reference", r"more references", r"other reference"],
        ),
        any_answer_counts=True,
    ),
}

# Accepting suggested bullet points counts as answering responsibilities.
_ACCEPTS_SUGGESTIONS = PatternClassifier(
    "accepts_suggestions",
    [
        r"use\s+(\d+|all|some|those|these|them)",
        r"^(perfect|great|good|fine|those work|those are good)",
        r"i('ll| will)?\s*(take|pick|use|go with)",
    ],
)

# Add-another answers are judged by how they start: "Yes, I have another
# one" is a yes and "No, that's all" is a no.
WANTS_ANOTHER = PatternClassifier(
    "wants_another",
    [
        r"^(yes|yeah|yep|yup|sure|definitely|absolutely|of course|y)\b",
        r"^i (do|have)\b(?!\s+(not|no|none|nothing)\b)",
        r"^(one more|another|there'?s (another|one more))\b",
    ],
)
DONE_ADDING = PatternClassifier(
    "done_adding",
    [
        r"^(no|nope|nah|none|nothing|not really|n)\b",
        r"^that'?s (it|all|everything)\b",
        r"^i'?m (done|finished)\b",
        r"^i (don'?t|do not)\b",
        r"^i have (no|none|nothing)\b",
    ],
)


@dataclass
class LoopDecision:
    """Outcome of the loop controller for one turn.

    Attributes:
        message: Assistant message replacing the backend reply.
        follow_up_needed: Whether the message asks another question.
        suggested_section: Next section when the loop ends.
        next_entry_index: Entry index to use from now on.
        section_complete: True when the user is done with the section.
    """

    message: str
    follow_up_needed: bool
    suggested_section: Section | None
    next_entry_index: int
    section_complete: bool = False


def answered_last_field(rule: LoopRule, user_message: str) -> bool:
    """True if the answer to the last-field question is substantive."""
    answer = user_message.strip()
    if not answer:
        return False
    if rule.any_answer_counts:
        return True
    if _ACCEPTS_SUGGESTIONS.matches(answer):
        return True
    return len(answer) > rule.min_answer_length and not (is_yes(answer) or is_no(answer))


def is_add_another_question(text: str, section: Section) -> bool:
    """True if ``text`` asks whether the user has another entry for ``section``."""
    rule = LOOP_RULES.get(section)
    return rule is not None and rule.add_another.matches(text)


def decide_entry_loop(
    section: Section,
    previous_assistant: str,
    user_message: str,
    reply: str,
    entry_index: int,
) -> LoopDecision | None:
    """Enforce the add-another loop for a multi-entry section.

    Args:
        section: Effective section of the turn.
        previous_assistant: Question the user is answering.
        user_message: The user's answer.
        reply: Backend reply after validation.
        entry_index: Index of the entry being filled.

    Returns:
        A decision that replaces the backend reply, or None to keep it.
    """
    rule = LOOP_RULES.get(section)
    if rule is None or not previous_assistant:
        return None

    answer = user_message.strip()

    if rule.add_another.matches(previous_assistant):
        if WANTS_ANOTHER.matches(answer):
            return LoopDecision(
                message=f"Great! {rule.first_question}",
                follow_up_needed=True,
                suggested_section=None,
                next_entry_index=entry_index + 1,
            )
        if DONE_ADDING.matches(answer):
            return LoopDecision(
                message=SECTION_TRANSITION_MESSAGES[section],
                follow_up_needed=False,
                suggested_section=SECTION_ADVANCE_MAP[section],
                next_entry_index=entry_index,
                section_complete=True,
            )
        return None

    if (
        rule.last_field.matches(previous_assistant)
        and answered_last_field(rule, answer)
        and not rule.add_another.matches(reply)
    ):
        return LoopDecision(
            message=f"Great! I've recorded that information.\n\n{rule.add_another_question}",
            follow_up_needed=True,
            suggested_section=None,
            next_entry_index=entry_index,
        )

    return None
