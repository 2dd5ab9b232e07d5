"""Parser for the backend's reply format.

The backend answers in free text followed by one structured block:

    Great! **What company did you work for?**
    <extracted_data>
    {"fields": [{"path": "personalInfo.city", "value": "Austin, TX",
                 "confidence": 0.9}],
     "suggestedSection": "work", "followUpNeeded": true,
     "specialContent": null, "isComplete": false}
    </extracted_data>

The block is optional and may be malformed; neither is an error. Invalid
entries inside a valid block are dropped one by one so a single bad path
does not discard the rest.
"""

import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any

from resume_interview.agents.fields import CandidateField, FieldPath
from resume_interview.agents.state import Section

logger = logging.getLogger(__name__)

_PAYLOAD_PATTERN = re.compile(r"<extracted_data>([\s\S]*?)</extracted_data>", re.IGNORECASE)
# Some models wrap the block in a code fence or forget the closing tag.
_UNCLOSED_PAYLOAD_PATTERN = re.compile(r"<extracted_data>[\s\S]*$", re.IGNORECASE)
_FENCED_JSON_PATTERN = re.compile(r"```json\s*([\s\S]*?)```", re.IGNORECASE)
_BLANK_LINES_PATTERN = re.compile(r"\n{3,}")


@dataclass
class ReplyPayload:
    """Structured side channel of a backend reply."""

    fields: list[CandidateField] = field(default_factory=list)
    suggested_section: Section | None = None
    follow_up_needed: bool | None = None
    special_content: str | None = None
    is_complete: bool = False


@dataclass
class ParsedReply:
    """Reply text with the payload removed, plus the payload if any."""

    text: str
    payload: ReplyPayload | None = None


def _strip_markdown_fences(text: str) -> str:
    """Remove a ```json ... ``` wrapper around the payload JSON."""
    text = text.strip()
    if text.startswith("```"):
        first_newline = text.find("\n")
        text = text[first_newline + 1 :] if first_newline != -1 else text[3:]
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def _coerce_confidence(raw: Any) -> float | None:
    if isinstance(raw, bool) or not isinstance(raw, int | float | str):
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if math.isnan(value):
        return None
    return min(1.0, max(0.0, value))


def _parse_field(raw: Any) -> CandidateField | None:
    if not isinstance(raw, dict) or "value" not in raw:
        return None
    try:
        path = FieldPath.parse(raw.get("path"))
    except ValueError:
        return None
    confidence = _coerce_confidence(raw.get("confidence", 0.0))
    if confidence is None:
        return None
    return CandidateField(path=path, value=raw["value"], confidence=confidence)


def _parse_section(raw: Any) -> Section | None:
    if not isinstance(raw, str):
        return None
    try:
        return Section(raw)
    except ValueError:
        return None


def parse_payload(raw_json: str) -> ReplyPayload | None:
    """Decode the JSON inside the payload tags.

    Returns:
        ReplyPayload, or None if the JSON is not an object.
    """
    try:
        data = json.loads(_strip_markdown_fences(raw_json))
    except json.JSONDecodeError:
        logger.info("Malformed reply payload (%d chars)", len(raw_json))
        return None
    if not isinstance(data, dict):
        return None

    raw_fields = data.get("fields")
    fields: list[CandidateField] = []
    if isinstance(raw_fields, list):
        for raw in raw_fields:
            parsed = _parse_field(raw)
            if parsed is None:
                logger.debug("Dropped invalid payload field")
                continue
            fields.append(parsed)

    follow_up = data.get("followUpNeeded")
    special = data.get("specialContent")
    if isinstance(special, dict):
        special = special.get("type")
    return ReplyPayload(
        fields=fields,
        suggested_section=_parse_section(data.get("suggestedSection")),
        follow_up_needed=follow_up if isinstance(follow_up, bool) else None,
        special_content=special if isinstance(special, str) and special else None,
        is_complete=data.get("isComplete") is True,
    )


def clean_reply(text: str) -> str:
    """Remove every payload block (closed or not) from the reply text."""
    cleaned = _PAYLOAD_PATTERN.sub("", text)
    cleaned = _UNCLOSED_PAYLOAD_PATTERN.sub("", cleaned)
    cleaned = _BLANK_LINES_PATTERN.sub("\n\n", cleaned)
    return cleaned.strip()


def parse_reply(text: str | None) -> ParsedReply:
    """Split a backend reply into display text and structured payload.

    Args:
        text: Raw backend reply.

    Returns:
        ParsedReply. ``payload`` is None when no block was found or it could
        not be decoded.
    """
    if not text:
        return ParsedReply(text="")

    payload: ReplyPayload | None = None
    match = _PAYLOAD_PATTERN.search(text)
    if match:
        payload = parse_payload(match.group(1))
        return ParsedReply(text=clean_reply(text), payload=payload)

    # WHY: some models emit the payload as a trailing ```json block instead.
    fenced = _FENCED_JSON_PATTERN.search(text)
    if fenced:
        payload = parse_payload(fenced.group(1))
        if payload is not None:
            remaining = text[: fenced.start()] + text[fenced.end() :]
            return ParsedReply(text=clean_reply(remaining), payload=payload)

    return ParsedReply(text=clean_reply(text), payload=None)
