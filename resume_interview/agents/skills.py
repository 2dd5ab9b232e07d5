"""Skills sub-sequencer.

The skills section is four small gated sub-sections asked in a fixed order:

    technical → certifications → languages → softSkills → (references)

Each sub-section asks a yes/no gate; "yes" leads to a detail question,
"no" or a detail answer leads to the next gate. Sequencing is decided from
the question the assistant last asked, so it works even when the client's
session snapshot lags behind.
"""

from dataclasses import dataclass

from resume_interview.agents.classifiers import PatternClassifier, is_no, is_yes
from resume_interview.agents.state import Section, SkillsSubCategory

SKILLS_ORDER: list[SkillsSubCategory] = [
    SkillsSubCategory.TECHNICAL,
    SkillsSubCategory.CERTIFICATIONS,
    SkillsSubCategory.LANGUAGES,
    SkillsSubCategory.SOFT_SKILLS,
]

SKILLS_GATE_QUESTIONS: dict[SkillsSubCategory, str] = {
    SkillsSubCategory.TECHNICAL: (
        "**Do you have any technical skills (software, tools, technologies) "
        "you'd like to highlight? (Yes or No)**"
    ),
    SkillsSubCategory.CERTIFICATIONS: "**Do you have any certifications or licenses? (Yes or No)**",
    SkillsSubCategory.LANGUAGES: (
        "**Do you speak any languages you'd like to include on your resume? (Yes or No)**"
    ),
    SkillsSubCategory.SOFT_SKILLS: "**Would you like to highlight any soft skills? (Yes or No)**",
}

SKILLS_DETAIL_QUESTIONS: dict[SkillsSubCategory, str] = {
    SkillsSubCategory.TECHNICAL: (
        "**What technical skills do you have?** "
        "(List them separated by commas, e.g., Excel, Python, Adobe Photoshop)"
    ),
    SkillsSubCategory.CERTIFICATIONS: (
        "**What certifications or licenses do you have?** (List them separated by commas)"
    ),
    SkillsSubCategory.LANGUAGES: (
        "**What languages do you speak?** (List them with proficiency, e.g., Spanish - fluent)"
    ),
    SkillsSubCategory.SOFT_SKILLS: (
        "**What soft skills would you like to highlight?** "
        "(e.g., leadership, teamwork, communication)"
    ),
}

SKILLS_FLAGS: dict[SkillsSubCategory, str] = {
    SkillsSubCategory.TECHNICAL: "hasTechnicalSkills",
    SkillsSubCategory.CERTIFICATIONS: "hasCertifications",
    SkillsSubCategory.LANGUAGES: "hasLanguages",
    SkillsSubCategory.SOFT_SKILLS: "hasSoftSkills",
}

_REFERENCES_GATE = "**Would you like to add professional references? (Yes or No)**"

# Phrases that identify which sub-category a question is about. Checked in
# SKILLS_ORDER so "technical skills" is not mistaken for "soft skills".
_SUBCATEGORY_PHRASES: dict[SkillsSubCategory, PatternClassifier] = {
    SkillsSubCategory.TECHNICAL: PatternClassifier(
        "skills_technical", [r"technical skills", r"software you'd like to highlight"]
    ),
    SkillsSubCategory.CERTIFICATIONS: PatternClassifier(
        "skills_certifications", [r"certifications or licenses", r"certifications"]
    ),
    SkillsSubCategory.LANGUAGES: PatternClassifier(
        "skills_languages",
        [
            r"languages you'd like to include",
            r"speak any languages",
            r"what languages do you speak",
        ],
    ),
    SkillsSubCategory.SOFT_SKILLS: PatternClassifier(
        "skills_soft", [r"soft skills", r"highlight any soft skills"]
    ),
}

_GATE_PHASE = PatternClassifier("skills_gate_phase", [r"\(yes or no\)"])
_DETAIL_PHASE = PatternClassifier(
    "skills_detail_phase",
    [
        r"what technical skills",
        r"what certifications",
        r"what languages do you speak",
        r"what soft skills",
    ],
)

# Anything longer than this that is not yes/no counts as a list of skills.
_MIN_DETAIL_LENGTH = 5


@dataclass
class SkillsStep:
    """What the sequencer decided for one skills turn.

    Attributes:
        message: Assistant message to send instead of the backend reply.
        follow_up_needed: Whether the message asks another skills question.
        suggested_section: References once all four sub-sections are done.
        next_cursor: Sub-category the next question belongs to.
        answered: Sub-category the user just answered.
        flag: Has-flag to record (name, value), if the user answered a gate.
    """

    message: str
    follow_up_needed: bool
    suggested_section: Section | None
    next_cursor: SkillsSubCategory
    answered: SkillsSubCategory
    flag: tuple[str, bool] | None = None


def detect_subcategory(question: str) -> SkillsSubCategory | None:
    """Which skills sub-category an assistant question is about."""
    for subcategory in SKILLS_ORDER:
        if _SUBCATEGORY_PHRASES[subcategory].matches(question):
            return subcategory
    return None


def detect_phase(question: str) -> str | None:
    """"gate" for a yes/no question, "detail" for a what-question."""
    if _GATE_PHASE.matches(question):
        return "gate"
    if _DETAIL_PHASE.matches(question):
        return "detail"
    return None


def classify_skills_answer(message: str) -> str | None:
    """Classify an answer as "yes", "no", "details", or None."""
    if is_yes(message):
        return "yes"
    if is_no(message):
        return "no"
    if len(message.strip()) > _MIN_DETAIL_LENGTH:
        return "details"
    return None


def next_subcategory(current: SkillsSubCategory) -> SkillsSubCategory:
    """The sub-category after ``current``; DONE after soft skills."""
    if current == SkillsSubCategory.DONE:
        return SkillsSubCategory.DONE
    index = SKILLS_ORDER.index(current) + 1
    return SKILLS_ORDER[index] if index < len(SKILLS_ORDER) else SkillsSubCategory.DONE


def _move_on(
    prefix: str, answered: SkillsSubCategory, flag: tuple[str, bool] | None
) -> SkillsStep:
    upcoming = next_subcategory(answered)
    if upcoming == SkillsSubCategory.DONE:
        return SkillsStep(
            message=f"{prefix} {_REFERENCES_GATE}",
            follow_up_needed=False,
            suggested_section=Section.REFERENCES,
            next_cursor=SkillsSubCategory.DONE,
            answered=answered,
            flag=flag,
        )
    return SkillsStep(
        message=f"{prefix} {SKILLS_GATE_QUESTIONS[upcoming]}",
        follow_up_needed=True,
        suggested_section=None,
        next_cursor=upcoming,
        answered=answered,
        flag=flag,
    )


def sequence_skills(previous_assistant: str, user_message: str) -> SkillsStep | None:
    """Decide the next skills question from the last one and the answer.

    Args:
        previous_assistant: The question the user is answering.
        user_message: The user's answer.

    Returns:
        The step to take, or None when the last message was not a skills
        question or the answer is unclear (the backend reply stands).
    """
    subcategory = detect_subcategory(previous_assistant)
    phase = detect_phase(previous_assistant)
    if subcategory is None or phase is None:
        return None

    answer = classify_skills_answer(user_message)
    flag_name = SKILLS_FLAGS[subcategory]

    if phase == "gate":
        if answer == "yes":
            return SkillsStep(
                message=f"Great! {SKILLS_DETAIL_QUESTIONS[subcategory]}",
                follow_up_needed=True,
                suggested_section=None,
                next_cursor=subcategory,
                answered=subcategory,
                flag=(flag_name, True),
            )
        if answer == "no":
            return _move_on("No problem!", subcategory, (flag_name, False))
        return None

    if answer == "details":
        if next_subcategory(subcategory) == SkillsSubCategory.DONE:
            return _move_on("Great!", subcategory, None)
        return _move_on("Great, I've recorded those!", subcategory, None)
    if answer == "no":
        return _move_on("No problem!", subcategory, (flag_name, False))
    return None
