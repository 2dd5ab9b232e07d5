"""Help for users who have no email address.

The guide is shown inline in the chat as expandable special content, and
professional address suggestions are offered once the user's name is known.
"""

import re
from dataclasses import dataclass, field

GMAIL_HELP_URL = "https://support.google.com/mail/answer/56256"

INLINE_EMAIL_GUIDE = f"""## Creating a Gmail Account (Free)

**What You Need:**
- A phone that can receive text messages
- About 5-10 minutes

**Quick Steps:**

1. **Go to gmail.com** in your web browser

2. **Click "Create account"** then choose "For myself"

3. **Enter your name** - use your real, professional name

4. **Choose your email address:**
   - Good: firstname.lastname@gmail.com
   - Avoid: nicknames or unprofessional words

5. **Create a password:**
   - At least 8 characters
   - Mix letters, numbers, and symbols
   - Example: MyDog2020!
   - WRITE IT DOWN!

6. **Verify your phone:**
   - Enter your phone number
   - Type the 6-digit code from the text message

7. **Add birthday and agree to terms**

8. **Done!** Your new email is ready.

**Need more help?** Here's a detailed guide with pictures: {GMAIL_HELP_URL}"""

_MAX_SUGGESTIONS = 5

# (pattern, issue) pairs checked against the local part of an address.
_UNPROFESSIONAL_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"sexy|hot|cute|babe|baby", re.IGNORECASE), "Avoid suggestive words"),
    (re.compile(r"420|69|xxx", re.IGNORECASE), "Avoid inappropriate numbers or references"),
    (re.compile(r"party|drunk|beer|weed", re.IGNORECASE), "Avoid party/substance references"),
    (re.compile(r"crazy|insane|psycho|killer", re.IGNORECASE), "Avoid extreme words"),
    (re.compile(r"loser|dumb|stupid|idiot", re.IGNORECASE), "Avoid negative words"),
    (re.compile(r"princess|angel|demon|devil", re.IGNORECASE), "Keep it simple and professional"),
    (
        re.compile(r"gamer|ninja|boss|king|queen", re.IGNORECASE),
        "Avoid informal titles or gaming references",
    ),
]

_MAX_DIGITS = 4


@dataclass
class EmailReview:
    """Verdict on how an address reads to an employer."""

    is_professional: bool
    issues: list[str] = field(default_factory=list)


def get_inline_email_guide(language: str = "en") -> str:
    """Markdown guide for creating a free Gmail account.

    Only English is written so far; other languages get the English text.
    """
    return INLINE_EMAIL_GUIDE


def build_email_guide_content(language: str = "en") -> dict[str, object]:
    """Special-content block carrying the inline guide."""
    return {
        "type": "email_guide",
        "content": get_inline_email_guide(language),
        "expandable": True,
    }


def suggest_professional_emails(
    first_name: str,
    last_name: str,
    middle_initial: str | None = None,
) -> list[str]:
    """Suggest up to five name-based Gmail addresses, most formal first."""
    first = first_name.lower().strip()
    last = last_name.lower().strip()
    middle = (middle_initial or "").lower().strip()
    if not first or not last:
        return []

    suggestions = [f"{first}.{last}@gmail.com", f"{first}{last}@gmail.com"]
    if middle:
        suggestions.append(f"{first}.{middle}.{last}@gmail.com")
        suggestions.append(f"{first}{middle}{last}@gmail.com")
    suggestions.append(f"{first[0]}{last}@gmail.com")
    suggestions.append(f"{first}.{last[0]}@gmail.com")
    if middle:
        suggestions.append(f"{first}{middle[0]}{last}@gmail.com")

    return suggestions[:_MAX_SUGGESTIONS]


def is_email_professional(email: str) -> EmailReview:
    """Flag addresses an employer may not take seriously."""
    local_part = email.split("@")[0].lower()
    issues = [issue for pattern, issue in _UNPROFESSIONAL_PATTERNS if pattern.search(local_part)]

    if sum(ch.isdigit() for ch in local_part) > _MAX_DIGITS:
        issues.append("Too many numbers - try to keep it simple")
    if "_" in local_part:
        issues.append("Use dots (.) instead of underscores (_) for a cleaner look")

    return EmailReview(is_professional=not issues, issues=issues)


def suggestions_for_name(full_name: str | None) -> list[str]:
    """Address suggestions from a full name ("Mary Ann Smith" → mary.smith@...)."""
    if not full_name:
        return []
    parts = [part for part in re.split(r"\s+", full_name.strip()) if part.isalpha()]
    if len(parts) < 2:
        return []
    middle = parts[1][0] if len(parts) > 2 else None
    return suggest_professional_emails(parts[0], parts[-1], middle)
