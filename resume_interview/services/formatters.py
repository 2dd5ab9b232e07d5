"""Normalization of user-typed contact details.

Functions:
    format_phone_number: US numbers to "(XXX) XXX-XXXX", others unchanged.
    format_city_state: "austin texas" to "Austin, TX", else title case.
"""

import re

_NON_DIGIT_PATTERN = re.compile(r"\D")
_CITY_ABBREVIATION_PATTERN = re.compile(r"^(.+),\s*([A-Z]{2})$")
_CITY_COMMA_PATTERN = re.compile(r"^(.+),\s*(.+)$")

STATE_ABBREVIATIONS: dict[str, str] = {
    "alabama": "AL",
    "alaska": "AK",
    "arizona": "AZ",
    "arkansas": "AR",
    "california": "CA",
    "colorado": "CO",
    "connecticut": "CT",
    "delaware": "DE",
    "florida": "FL",
    "georgia": "GA",
    "hawaii": "HI",
    "idaho": "ID",
    "illinois": "IL",
    "indiana": "IN",
    "iowa": "IA",
    "kansas": "KS",
    "kentucky": "KY",
    "louisiana": "LA",
    "maine": "ME",
    "maryland": "MD",
    "massachusetts": "MA",
    "michigan": "MI",
    "minnesota": "MN",
    "mississippi": "MS",
    "missouri": "MO",
    "montana": "MT",
    "nebraska": "NE",
    "nevada": "NV",
    "new hampshire": "NH",
    "new jersey": "NJ",
    "new mexico": "NM",
    "new york": "NY",
    "north carolina": "NC",
    "north dakota": "ND",
    "ohio": "OH",
    "oklahoma": "OK",
    "oregon": "OR",
    "pennsylvania": "PA",
    "rhode island": "RI",
    "south carolina": "SC",
    "south dakota": "SD",
    "tennessee": "TN",
    "texas": "TX",
    "utah": "UT",
    "vermont": "VT",
    "virginia": "VA",
    "washington": "WA",
    "west virginia": "WV",
    "wisconsin": "WI",
    "wyoming": "WY",
    "district of columbia": "DC",
    "puerto rico": "PR",
    "guam": "GU",
    "virgin islands": "VI",
}

_VALID_ABBREVIATIONS = frozenset(STATE_ABBREVIATIONS.values())


def _title_case(text: str) -> str:
    # Capitalize per word; str.title() also capitalizes after apostrophes.
    return " ".join(word[:1].upper() + word[1:] for word in text.lower().split(" "))


def format_phone_number(phone: str | None) -> str:
    """Format a US phone number as "(XXX) XXX-XXXX".

    Accepts 5551234567, 555-123-4567, 555.123.4567 and +1 555 123 4567.
    Anything else (international, partial) is returned unchanged.
    """
    if not phone:
        return ""
    digits = _NON_DIGIT_PATTERN.sub("", phone)
    if len(digits) == 11 and digits[0] == "1":
        digits = digits[1:]
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return phone


def format_city_state(value: str | None) -> str:
    """Format a location as "City, ST" when the state can be recognized.

    Args:
        value: Free-form location ("denver co", "Austin, Texas").

    Returns:
        "City, ST", or the title-cased input if no US state is found.
    """
    if not value:
        return ""
    trimmed = value.strip()
    if not trimmed:
        return ""

    already_formatted = _CITY_ABBREVIATION_PATTERN.match(trimmed)
    if already_formatted and already_formatted.group(2) in _VALID_ABBREVIATIONS:
        return f"{_title_case(already_formatted.group(1).strip())}, {already_formatted.group(2)}"

    with_comma = _CITY_COMMA_PATTERN.match(trimmed)
    if with_comma:
        city = _title_case(with_comma.group(1).strip())
        state_part = with_comma.group(2).strip().lower()
        if state_part in STATE_ABBREVIATIONS:
            return f"{city}, {STATE_ABBREVIATIONS[state_part]}"
        if state_part.upper() in _VALID_ABBREVIATIONS:
            return f"{city}, {state_part.upper()}"

    words = trimmed.lower().split()
    if len(words) >= 2:
        last_word = words[-1].upper()
        if len(last_word) == 2 and last_word in _VALID_ABBREVIATIONS:
            return f"{_title_case(' '.join(words[:-1]))}, {last_word}"
        # Longest suffix first so "west virginia" wins over "virginia".
        for split_at in range(1, len(words)):
            candidate = " ".join(words[split_at:])
            if candidate in STATE_ABBREVIATIONS:
                return f"{_title_case(' '.join(words[:split_at]))}, {STATE_ABBREVIATIONS[candidate]}"

    return _title_case(trimmed)
