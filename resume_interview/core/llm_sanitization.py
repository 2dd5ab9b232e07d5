"""LLM input sanitization for prompt injection prevention.

Security: Mitigates prompt injection attacks by filtering suspicious patterns
before user-provided text is embedded in interview prompts.

The interview runs in ten languages, so unlike a Latin-only filter this one
never strips combining marks from non-Latin scripts (Devanagari vowel signs
are combining marks) and only folds homoglyphs inside mixed-script words.

This is defense-in-depth, not a complete solution. Prompts should also use
clear delimiters and system-level guardrails where available.
"""

import re
import unicodedata

# =============================================================================
# Confusable Character Mapping (Cyrillic/Greek → Latin)
# =============================================================================

# Characters from Cyrillic and Greek that are visually identical to Latin
# letters. Only applied to words that also contain Latin letters, which is
# where a homoglyph is hiding a keyword such as "SYSTEM".
_CONFUSABLE_MAP: dict[int, str] = {
    0x0430: "a",  # а
    0x0441: "c",  # с
    0x0435: "e",  # е
    0x0456: "i",  # і
    0x043E: "o",  # о
    0x0440: "p",  # р
    0x0455: "s",  # ѕ
    0x0445: "x",  # х
    0x0443: "y",  # у
    0x0410: "A",  # А
    0x0412: "B",  # В
    0x0421: "C",  # С
    0x0415: "E",  # Е
    0x041D: "H",  # Н
    0x041A: "K",  # К
    0x041C: "M",  # М
    0x041E: "O",  # О
    0x0420: "P",  # Р
    0x0405: "S",  # Ѕ
    0x0422: "T",  # Т
    0x0425: "X",  # Х
    0x0423: "Y",  # У
    0x0391: "A",  # Α
    0x0392: "B",  # Β
    0x0395: "E",  # Ε
    0x0397: "H",  # Η
    0x0399: "I",  # Ι
    0x039C: "M",  # Μ
    0x039F: "O",  # Ο
    0x03A4: "T",  # Τ
    0x03BF: "o",  # ο
}

_CONFUSABLE_TRANS = str.maketrans(_CONFUSABLE_MAP)
_LATIN_LETTER = re.compile(r"[A-Za-z]")
_WORD = re.compile(r"\w+")

# =============================================================================
# Unicode Stripping Patterns
# =============================================================================

# Zero-width Unicode characters that can be used to bypass regex filters.
_ZERO_WIDTH_PATTERN = re.compile(
    "["
    "\u00ad"  # Soft hyphen
    "\u034f"  # Combining grapheme joiner
    "\u180e"  # Mongolian vowel separator
    "\u200b"  # Zero-width space
    "\u202a-\u202e"  # BiDi embedding controls
    "\u2060-\u2064"  # Word joiner, invisible operators
    "\u2066-\u2069"  # BiDi isolate controls
    "\ufeff"  # BOM / zero-width no-break space
    "\ufff9-\ufffb"  # Interlinear annotation characters
    "\U000e0001"  # Language tag
    "\U000e0020-\U000e007f"  # Tag characters
    "]"
)

# ZWJ/ZWNJ are meaningful in Arabic and Devanagari; only strip them between
# ASCII letters where they can only be hiding a keyword.
_ASCII_JOINER_PATTERN = re.compile(r"(?<=[A-Za-z])[\u200c\u200d]+(?=[A-Za-z])")

# Stray combining marks after an ASCII letter survive NFC only when no
# precomposed form exists (S + grave accent), i.e. a filter bypass.
_ASCII_COMBINING_PATTERN = re.compile(r"(?<=[A-Za-z])[\u0300-\u036f\u20d0-\u20ff]+")

# Replacement tokens for sanitized content
_REPLACEMENT_TAG = "[TAG]"
_REPLACEMENT_FILTERED = "[FILTERED]"
_REPLACEMENT_FILTERED_COLON = "[FILTERED]:"

# Patterns that indicate prompt injection attempts
# Each tuple: (pattern, replacement, flags)
_INJECTION_PATTERNS: list[tuple[str, str, int]] = [
    # System prompt override attempts
    (r"^\s*SYSTEM\s*:", _REPLACEMENT_FILTERED_COLON, re.IGNORECASE | re.MULTILINE),
    (r"(?:\\n)+\s*SYSTEM\s*:", "\\n" + _REPLACEMENT_FILTERED_COLON, re.IGNORECASE),
    # Role tag injections (XML-style)
    (r"<\s*/?\s*system\s*>", _REPLACEMENT_TAG, re.IGNORECASE),
    (r"<\s*/?\s*user\s*>", _REPLACEMENT_TAG, re.IGNORECASE),
    (r"<\s*/?\s*assistant\s*>", _REPLACEMENT_TAG, re.IGNORECASE),
    # Structural tags used by the interview prompt and the reply payload
    # (<extracted_data>, <conversation_context>, ...).
    (r"<\s*/?\s*[a-z]+(?:_[a-z]+)+(?:\s[^>]*)?\s*>", _REPLACEMENT_TAG, re.IGNORECASE),
    # ChatML-style role injections
    (r"<\|system\|>", _REPLACEMENT_TAG, re.IGNORECASE),
    (r"<\|user\|>", _REPLACEMENT_TAG, re.IGNORECASE),
    (r"<\|assistant\|>", _REPLACEMENT_TAG, re.IGNORECASE),
    (r"<\|im_start\|>", _REPLACEMENT_TAG, re.IGNORECASE),
    (r"<\|im_end\|>", _REPLACEMENT_TAG, re.IGNORECASE),
    # Instruction override attempts
    (
        r"ignore\s+(all\s+)?previous\s+instructions?",
        _REPLACEMENT_FILTERED,
        re.IGNORECASE,
    ),
    (r"disregard\s+(all\s+)?(prior|previous)", _REPLACEMENT_FILTERED, re.IGNORECASE),
    (r"forget\s+everything", _REPLACEMENT_FILTERED, re.IGNORECASE),
    (r"new\s+instructions?\s*:", _REPLACEMENT_FILTERED_COLON, re.IGNORECASE),
    # Instruction delimiters that might confuse the model
    (r"###\s*instruction\s*###", _REPLACEMENT_FILTERED, re.IGNORECASE),
    (r"\[INST\]", _REPLACEMENT_FILTERED, re.IGNORECASE),
    (r"\[/INST\]", _REPLACEMENT_FILTERED, re.IGNORECASE),
    # Anthropic/Claude-specific role markers
    (r"^\s*Human\s*:", _REPLACEMENT_FILTERED_COLON, re.IGNORECASE | re.MULTILINE),
    (r"^\s*Assistant\s*:", _REPLACEMENT_FILTERED_COLON, re.IGNORECASE | re.MULTILINE),
]

# Control characters to remove (except common whitespace)
_CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def _fold_mixed_script_word(match: re.Match[str]) -> str:
    word = match.group(0)
    if word.isascii() or not _LATIN_LETTER.search(word):
        return word
    return word.translate(_CONFUSABLE_TRANS)


def sanitize_llm_input(text: str) -> str:
    """Sanitize user-provided text before embedding in LLM prompts.

    Security: Filters patterns commonly used in prompt injection attacks.
    This is defense-in-depth - not a guarantee against all injection.

    WHY FILTER VS ESCAPE:
    - Escaping doesn't work well with LLMs (they understand meaning, not syntax)
    - Filtering removes suspicious patterns while preserving legitimate content
    - Replacement with [FILTERED] makes sanitization visible for debugging

    Args:
        text: Raw user-provided text (an interview answer, a remembered name).

    Returns:
        Sanitized text with injection patterns neutralized.
    """
    if not text:
        return text

    # NFKC folds fullwidth/styled variants (Ａ → A, 𝐒 → S) and composes
    # accented Latin letters, so José keeps its é.
    result = unicodedata.normalize("NFKC", text)

    result = _ZERO_WIDTH_PATTERN.sub("", result)
    result = _ASCII_JOINER_PATTERN.sub("", result)
    result = _ASCII_COMBINING_PATTERN.sub("", result)
    result = _WORD.sub(_fold_mixed_script_word, result)
    result = _CONTROL_CHAR_PATTERN.sub("", result)

    for pattern, replacement, flags in _INJECTION_PATTERNS:
        result = re.sub(pattern, replacement, result, flags=flags)

    return result
