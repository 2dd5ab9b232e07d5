"""Tests for backend reply parsing."""

import json

from resume_interview.agents.fields import FieldPath
from resume_interview.agents.reply_parser import clean_reply, parse_payload, parse_reply
from resume_interview.agents.state import Section


def _reply(text: str, payload: dict) -> str:
    return f"{text}\n<extracted_data>\n{json.dumps(payload)}\n</extracted_data>"


class TestParseReply:
    """Tests for parse_reply."""

    def test_text_and_payload_are_split(self):
        raw = _reply(
            "Great! **What company did you work for?**",
            {
                "fields": [
                    {"path": "personalInfo.city", "value": "Austin, TX", "confidence": 0.9}
                ],
                "suggestedSection": "work",
                "followUpNeeded": True,
                "isComplete": False,
            },
        )
        parsed = parse_reply(raw)
        assert parsed.text == "Great! **What company did you work for?**"
        assert parsed.payload is not None
        assert parsed.payload.fields[0].path == FieldPath.parse("personalInfo.city")
        assert parsed.payload.suggested_section == Section.WORK
        assert parsed.payload.follow_up_needed is True

    def test_reply_without_payload(self):
        parsed = parse_reply("What is your full name?")
        assert parsed.text == "What is your full name?"
        assert parsed.payload is None

    def test_empty_reply(self):
        parsed = parse_reply(None)
        assert parsed.text == ""
        assert parsed.payload is None

    def test_malformed_json_drops_payload_but_keeps_text(self):
        parsed = parse_reply("Thanks!\n<extracted_data>{not json</extracted_data>")
        assert parsed.text == "Thanks!"
        assert parsed.payload is None

    def test_unclosed_block_is_removed_from_text(self):
        parsed = parse_reply('Thanks!\n<extracted_data>{"fields": [')
        assert parsed.text == "Thanks!"

    def test_fenced_json_payload(self):
        raw = 'Noted.\n```json\n{"fields": [], "isComplete": true}\n```'
        parsed = parse_reply(raw)
        assert parsed.text == "Noted."
        assert parsed.payload is not None
        assert parsed.payload.is_complete is True

    def test_fenced_non_payload_json_stays_in_text(self):
        raw = "Example:\n```json\n[1, 2]\n```"
        parsed = parse_reply(raw)
        assert parsed.payload is None
        assert "[1, 2]" in parsed.text


class TestParsePayload:
    """Tests for parse_payload."""

    def test_invalid_entries_dropped_individually(self):
        payload = parse_payload(
            json.dumps(
                {
                    "fields": [
                        {"path": "workExperience[0].companyName", "value": "Acme", "confidence": 0.9},
                        {"path": "bad path!", "value": "x", "confidence": 0.9},
                        {"path": "personalInfo.phone", "confidence": 0.9},
                        {"path": "personalInfo.city", "value": "Austin", "confidence": "high"},
                        "not a field",
                    ]
                }
            )
        )
        assert payload is not None
        assert [str(f.path) for f in payload.fields] == ["workExperience[0].companyName"]

    def test_confidence_is_clamped(self):
        payload = parse_payload(
            json.dumps({"fields": [{"path": "a", "value": 1, "confidence": 3}]})
        )
        assert payload.fields[0].confidence == 1.0

    def test_unknown_section_ignored(self):
        payload = parse_payload(json.dumps({"suggestedSection": "hobbies"}))
        assert payload.suggested_section is None

    def test_special_content_string(self):
        payload = parse_payload(json.dumps({"specialContent": "email_guide"}))
        assert payload.special_content == "email_guide"

    def test_special_content_object_reduced_to_type(self):
        payload = parse_payload(
            json.dumps({"specialContent": {"type": "email_guide", "content": "..."}})
        )
        assert payload.special_content == "email_guide"

    def test_non_object_json(self):
        assert parse_payload("[1, 2, 3]") is None

    def test_non_boolean_follow_up_ignored(self):
        payload = parse_payload(json.dumps({"followUpNeeded": "yes"}))
        assert payload.follow_up_needed is None


class TestCleanReply:
    def test_multiple_blocks_and_blank_lines_removed(self):
        text = "A\n<extracted_data>{}</extracted_data>\n\n\n\nB<extracted_data>{}</extracted_data>"
        assert clean_reply(text) == "A\n\nB"
