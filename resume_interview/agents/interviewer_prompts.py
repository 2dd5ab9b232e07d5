"""Interviewer prompt templates.

Contains:
1. BASE_SYSTEM_PROMPT with the interview rules and the output block format
2. SECTION_PROMPTS with per-section guidance
3. Builder functions that add per-turn hints and assemble the message list

Everything user-controlled (messages, mentioned entities, topics) passes
through sanitize_llm_input() before it reaches the prompt.
"""

from typing import Any

from resume_interview.agents.contradictions import KEEP_OR_REMOVE_QUESTION
from resume_interview.agents.entries import LOOP_RULES
from resume_interview.agents.sections import (
    GATED_SECTIONS,
    REQUIRED_FIRST_MESSAGES,
    SECTION_DRAFT_KEYS,
    SECTION_TRANSITION_MESSAGES,
    should_ask_follow_up,
)
from resume_interview.agents.state import (
    ContradictionRecord,
    ConversationSession,
    Section,
    TurnSignals,
    UserTone,
)
from resume_interview.core.llm_sanitization import sanitize_llm_input
from resume_interview.providers.llm.base import LLMMessage

# =============================================================================
# Constants
# =============================================================================

_MAX_CONTEXT_ITEMS = 20
"""Maximum mentioned entities or answered topics listed in the context."""

_MAX_HISTORY_MESSAGE_LENGTH = 4000
"""Maximum characters kept from any one history message."""

EXPORT_READY_MESSAGE = (
    "Your resume is ready! Click the 'View & Download Resume' button below "
    "to preview and download it."
)

# =============================================================================
# System Prompt
# =============================================================================

BASE_SYSTEM_PROMPT = f"""You are a friendly résumé assistant helping someone build their resume through conversation.

CRITICAL RULE: ASK EXACTLY ONE QUESTION PER MESSAGE.
- "What company did you work for and what was your job title?" <- TWO QUESTIONS = WRONG
- "What company did you work for?" <- CORRECT
If something needs clarification (like a spelling), that is its own message.

PERSONALITY:
- Warm and encouraging ("Great!", "Perfect!")
- Patient with uncertain or incomplete answers
- Simple language, no jargon, never condescending

SECTIONS (strict order, never skip ahead or go back):
1. Personal info: full name, email, phone, city and state
2. Work experience: company, job title, dates, location, responsibilities (can repeat)
3. Education: school, degree, field of study, graduation year (can repeat)
4. Volunteering: organization, role, dates, responsibilities (can repeat)
5. Skills: technical skills, certifications, languages, soft skills
6. References: name, title, company, phone, email, relationship (or "upon request")

SECTION ENTRY RULE:
Work, education, volunteering, skills and references each open with a yes/no
question. Ask it EXACTLY as written, then wait for the answer:
- Work: "{REQUIRED_FIRST_MESSAGES[Section.WORK]}"
- Education: "{REQUIRED_FIRST_MESSAGES[Section.EDUCATION]}"
- Volunteering: "{REQUIRED_FIRST_MESSAGES[Section.VOLUNTEERING]}"
- Skills: "{REQUIRED_FIRST_MESSAGES[Section.SKILLS]}"
- References: "{REQUIRED_FIRST_MESSAGES[Section.REFERENCES]}"
Never ask a detail question ("What company did you work for?") before the user says yes.

CONVERSATION RULES:
- If the user gives several facts at once, acknowledge all of them but ask only one follow-up
- Do not re-ask for information already given
- Accept vague dates like "2020" or "a few years ago"
- Respect requests to move on ("skip", "next", "let's continue")

CONTRADICTIONS:
If the user denies having something the resume already contains, do not clear it.
Say "Earlier you mentioned ..." and ask: "{KEEP_OR_REMOVE_QUESTION}"

OUTPUT FORMAT:
After your conversational reply, add exactly one block:
<extracted_data>
{{
  "fields": [
    {{"path": "personalInfo.fullName", "value": "John Smith", "confidence": 0.95}},
    {{"path": "workExperience[0].companyName", "value": "Acme Corp", "confidence": 0.9}}
  ],
  "suggestedSection": "personal" | "work" | "education" | "volunteering" | "skills" | "references" | "review" | null,
  "followUpNeeded": true | false,
  "specialContent": "email_guide" | null,
  "isComplete": false
}}
</extracted_data>

PATHS:
- Personal: personalInfo.fullName, personalInfo.email, personalInfo.phone, personalInfo.city
- Work: workExperience[i].companyName, .jobTitle, .startDate, .endDate, .isCurrentJob, .location, .responsibilities
- Education: education[i].schoolName, .degree, .fieldOfStudy, .endYear, .isCurrentlyStudying
- Volunteering: volunteering[i].organization, .role, .dates, .responsibilities
- Skills: skills.technicalSkills, skills.certifications, skills.languages, skills.softSkills
- References: references[i].name, .jobTitle, .company, .phone, .email, .relationship
- Flags: hasWorkExperience, hasEducation, hasVolunteering, hasTechnicalSkills, hasCertifications, hasLanguages, hasSoftSkills, hasReferences, referencesUponRequest

Confidence: 0.9+ for explicit answers, 0.7-0.9 for implied, below 0.7 when unsure.
ALWAYS include the <extracted_data> block, even when nothing was extracted."""

SECTION_PROMPTS: dict[Section, str] = {
    Section.LANGUAGE: """This is the first interaction. The user is choosing a language.
Supported: English (en), Spanish/Español (es), French/Français (fr), German/Deutsch (de),
Portuguese/Português (pt), Chinese/中文 (zh), Japanese/日本語 (ja), Korean/한국어 (ko),
Arabic/العربية (ar), Hindi/हिन्दी (hi).
When they answer: acknowledge in their language, extract {"path": "language", "value": "<code>",
"confidence": 0.95}, set suggestedSection to "intro", and ask for their full name.""",
    Section.INTRO: "Introduce yourself warmly and ask for the user's full name.",
    Section.PERSONAL: """Collect personal info one question at a time:
1. Full name (if not already given)
2. "What's your email address?"
3. "What's your phone number?"
4. "What city and state do you live in?"
If they have no email, set specialContent to "email_guide".
After city and state, briefly summarize and ask exactly:
"""
    + f'"{REQUIRED_FIRST_MESSAGES[Section.WORK]}"',
    Section.WORK: f"""If the user says no to work experience, reply ONLY with:
"{SECTION_TRANSITION_MESSAGES[Section.WORK]}"
and extract hasWorkExperience: false with suggestedSection "education".
If yes, collect one job at a time, one question at a time:
1. "What company did you work for?"
2. "What was your job title there?"
3. "When did you start?"
4. "When did you leave?" (or "Is this your current job?")
5. "What city and state was this job in?"
6. "What were your main responsibilities?"
Then ask: "{LOOP_RULES[Section.WORK].add_another_question}\"""",
    Section.EDUCATION: f"""If the user says no to education, reply ONLY with:
"{SECTION_TRANSITION_MESSAGES[Section.EDUCATION]}"
and extract hasEducation: false with suggestedSection "volunteering".
If yes, collect one entry at a time, one question at a time:
1. "What school did you attend?"
2. "What degree or certification did you earn?" ("Associate in Nursing" gives degree and field)
3. "What did you study?" (skip if the field of study is already known)
4. "What year did you graduate from your program? (Or are you still studying?)"
Then ask: "{LOOP_RULES[Section.EDUCATION].add_another_question}\"""",
    Section.VOLUNTEERING: f"""If the user says no to volunteering, reply ONLY with:
"{SECTION_TRANSITION_MESSAGES[Section.VOLUNTEERING]}"
and extract hasVolunteering: false with suggestedSection "skills".
If yes, collect one entry at a time: organization, role, dates, responsibilities.
Then ask: "{LOOP_RULES[Section.VOLUNTEERING].add_another_question}\"""",
    Section.SKILLS: """Skills has four parts asked in order, each with a yes/no question first:
technical skills, certifications or licenses, languages spoken, soft skills.
Ask for details only after a yes. Lists go in as arrays of strings; languages as
{"language": "...", "proficiency": "..."} objects. After soft skills, move to references.""",
    Section.REFERENCES: f"""If the user says no to references, reply ONLY with:
"{SECTION_TRANSITION_MESSAGES[Section.REFERENCES]}"
and extract hasReferences: false with suggestedSection "review".
"Available upon request" means referencesUponRequest: true.
If yes, collect: name, job title, company, phone, email, relationship.
Then ask: "{LOOP_RULES[Section.REFERENCES].add_another_question}\"""",
    Section.REVIEW: """Summarize everything collected, section by section, and ask whether anything
should change. When the user is happy, set isComplete to true.""",
    Section.COMPLETE: f"""The resume is finished. If the user wants it, say exactly:
"{EXPORT_READY_MESSAGE}"
Never explain how to make a PDF or a Word document.""",
}

# =============================================================================
# Builders
# =============================================================================


def _sanitized_list(items: list[str]) -> str:
    return ", ".join(sanitize_llm_input(item) for item in items[-_MAX_CONTEXT_ITEMS:])


def build_context_summary(session: ConversationSession, draft: dict[str, Any]) -> str:
    """Summarize what the interview already knows.

    Args:
        session: Current session snapshot.
        draft: Current résumé draft.

    Returns:
        One fact per line, or an empty string.
    """
    parts: list[str] = []

    if session.answered_topics:
        parts.append(f"Topics already covered: {_sanitized_list(session.answered_topics)}")
    if session.mentioned_entities:
        parts.append(f"Names/companies mentioned: {_sanitized_list(session.mentioned_entities)}")

    personal = draft.get("personalInfo")
    if isinstance(personal, dict) and personal.get("fullName"):
        parts.append(f"User's name: {sanitize_llm_input(str(personal['fullName']))}")

    for section, key in SECTION_DRAFT_KEYS.items():
        entries = draft.get(key)
        if isinstance(entries, list) and entries:
            parts.append(f"{section.value.capitalize()} entries collected: {len(entries)}")

    if session.user_tone != UserTone.NEUTRAL:
        parts.append(f"User seems {session.user_tone.value} - adjust tone accordingly")

    return "\n".join(parts)


def _contradiction_hint(record: ContradictionRecord) -> str:
    summary = sanitize_llm_input(record.existing_data_summary)
    return f"""## CONTRADICTION DETECTED - MUST ADDRESS:
The user just said they don't have {record.section}, but the resume already has:
- {summary}
Say "Earlier you mentioned {summary}." and ask: "{KEEP_OR_REMOVE_QUESTION}"
Set followUpNeeded to true. Do NOT clear the data or change section."""


def build_turn_hints(
    signals: TurnSignals,
    session: ConversationSession,
    contradiction: ContradictionRecord | None = None,
) -> list[str]:
    """Per-turn instructions derived from the classifiers.

    Args:
        signals: Classifier verdicts for this turn.
        session: Session snapshot.
        contradiction: Contradiction raised this turn, if any.

    Returns:
        Hint paragraphs, in the order they should appear.
    """
    section = signals.get("effective_section", session.current_section)
    follow_up = signals.get("effective_follow_up", session.follow_up_count(section))
    said_no = signals.get("said_no_to_gate", False)
    said_yes = signals.get("said_yes_to_gate", False)
    hints: list[str] = []

    if signals.get("escape"):
        hints.append(
            "The user wants to move on. Acknowledge and proceed to the next logical section."
        )
    if signals.get("frustrated"):
        hints.append(
            "The user seems frustrated. Be extra patient and supportive. "
            "Offer to skip optional sections or simplify."
        )
    if signals.get("needs_email_help"):
        hints.append(
            'The user needs help creating an email. Set specialContent to "email_guide" '
            "in your response."
        )
    if contradiction is not None:
        hints.append(_contradiction_hint(contradiction))
    if signals.get("export_requested"):
        hints.append(f'The user wants their resume. Reply with: "{EXPORT_READY_MESSAGE}"')
    if not should_ask_follow_up(section, follow_up):
        hints.append(
            "You have asked enough follow-ups for this section. "
            "Wrap up and move to the next section."
        )
    if follow_up == 0 and section in GATED_SECTIONS and not (said_no or said_yes):
        hints.append(
            f"""## SECTION ENTRY:
You are entering the "{section.value}" section. Reply ONLY with:
"{REQUIRED_FIRST_MESSAGES[section]}"
Do not summarize previous sections and do not ask detail questions."""
        )
    if said_yes:
        hints.append(
            f'The user said yes to the {section.value} section. Ask for the first detail '
            "of their first entry. One question only."
        )
    if said_no and section in SECTION_TRANSITION_MESSAGES:
        hints.append(
            f'The user said no. Reply ONLY with: "{SECTION_TRANSITION_MESSAGES[section]}"'
        )
    if section in LOOP_RULES:
        index = session.entry_index(section)
        hints.append(
            f"Current {SECTION_DRAFT_KEYS[section]} entry index: {index}. "
            f"Use paths like {SECTION_DRAFT_KEYS[section]}[{index}].<field>."
        )

    return hints


def build_system_prompt(
    section: Section,
    session: ConversationSession,
    draft: dict[str, Any],
    hints: list[str],
) -> str:
    """Assemble the full system prompt for one turn.

    Args:
        section: Effective section of the turn.
        session: Session snapshot (language, context).
        draft: Current résumé draft.
        hints: Output of build_turn_hints().

    Returns:
        System prompt text.
    """
    prompt = BASE_SYSTEM_PROMPT
    if session.language != "en":
        prompt += (
            f"\n\n## Language:\nRespond in {sanitize_llm_input(session.language)}. "
            "Keep the extracted_data JSON in English."
        )
    prompt += f"\n\n## Current Section ({section.value}):\n{SECTION_PROMPTS[section]}"

    context = "\n\n".join(part for part in [build_context_summary(session, draft), *hints] if part)
    if context:
        prompt += f"\n\n## Additional Context:\n{context}"
    return prompt


def build_messages(
    system_prompt: str,
    history: list[dict[str, str]],
    user_message: str,
    max_history: int,
) -> list[LLMMessage]:
    """Build the message list for the backend.

    Only the last ``max_history`` history messages are sent. History is
    sanitized as well, since earlier user turns are just as untrusted.
    """
    messages = [LLMMessage(role="system", content=system_prompt)]
    for message in history[-max_history:] if max_history > 0 else []:
        content = message["content"][:_MAX_HISTORY_MESSAGE_LENGTH]
        if message["role"] == "user":
            content = sanitize_llm_input(content)
        messages.append(LLMMessage(role=message["role"], content=content))
    messages.append(LLMMessage(role="user", content=sanitize_llm_input(user_message)))
    return messages
