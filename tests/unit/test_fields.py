"""Tests for field paths and the field applier."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from resume_interview.agents.fields import (
    CandidateField,
    FieldPath,
    apply_fields,
    get_path,
)


class TestFieldPath:
    """Tests for FieldPath."""

    def test_parse_splits_keys_and_indices(self):
        path = FieldPath.parse("workExperience[0].companyName")
        assert path.segments == ("workExperience", 0, "companyName")

    @pytest.mark.parametrize(
        "text",
        ["personalInfo.fullName", "education[1].degree", "skills.languages[0].language", "a[0][1]"],
    )
    def test_str_is_lossless(self, text):
        assert str(FieldPath.parse(text)) == text

    @pytest.mark.parametrize("text", ["", ".a", "a.", "a[-1]", "a[x]", "0.a", "a..b", "a b"])
    def test_malformed_paths_rejected(self, text):
        with pytest.raises(ValueError):
            FieldPath.parse(text)

    def test_non_string_rejected(self):
        with pytest.raises(ValueError):
            FieldPath.parse(42)  # type: ignore[arg-type]

    def test_entry_builder(self):
        assert str(FieldPath.entry("references", 2, "name")) == "references[2].name"

    def test_path_must_start_with_key(self):
        with pytest.raises(ValueError):
            FieldPath.of(0, "a")


class TestApplyFields:
    """Tests for apply_fields."""

    def test_confident_field_merged(self):
        fields = [CandidateField(FieldPath.parse("personalInfo.fullName"), "Jane Doe", 0.9)]
        result = apply_fields({}, fields, threshold=0.7)
        assert result.draft == {"personalInfo": {"fullName": "Jane Doe"}}
        assert result.applied == fields
        assert result.needs_confirmation == []

    def test_low_confidence_field_held_back(self):
        fields = [CandidateField(FieldPath.parse("personalInfo.city"), "Austin", 0.5)]
        result = apply_fields({}, fields, threshold=0.7)
        assert result.draft == {}
        assert result.needs_confirmation == fields

    def test_threshold_is_inclusive(self):
        fields = [CandidateField(FieldPath.parse("language"), "en", 0.7)]
        assert apply_fields({}, fields, threshold=0.7).applied == fields

    def test_caller_draft_not_mutated(self):
        draft = {"workExperience": [{"companyName": "Acme"}]}
        fields = [CandidateField(FieldPath.parse("workExperience[0].jobTitle"), "Cashier", 0.9)]
        result = apply_fields(draft, fields)
        assert draft == {"workExperience": [{"companyName": "Acme"}]}
        assert result.draft["workExperience"][0] == {"companyName": "Acme", "jobTitle": "Cashier"}

    def test_list_entries_created_as_needed(self):
        fields = [CandidateField(FieldPath.parse("education[1].schoolName"), "State U", 0.9)]
        result = apply_fields({}, fields)
        assert result.draft["education"][1] == {"schoolName": "State U"}
        assert result.draft["education"][0] == {}

    def test_wrong_shape_replaced(self):
        fields = [CandidateField(FieldPath.parse("skills.technicalSkills"), ["Excel"], 0.9)]
        result = apply_fields({"skills": "none"}, fields)
        assert result.draft["skills"] == {"technicalSkills": ["Excel"]}

    def test_later_field_wins(self):
        path = FieldPath.parse("personalInfo.phone")
        fields = [CandidateField(path, "1", 0.9), CandidateField(path, "2", 0.9)]
        assert get_path(apply_fields({}, fields).draft, path) == "2"

    @given(
        confidence=st.floats(min_value=0.0, max_value=1.0),
        threshold=st.floats(min_value=0.0, max_value=1.0),
    )
    def test_field_is_either_applied_or_held(self, confidence, threshold):
        """Every field lands in exactly one bucket, decided by the threshold."""
        field = CandidateField(FieldPath.parse("personalInfo.email"), "a@b.co", confidence)
        result = apply_fields({}, [field], threshold=threshold)
        assert (field in result.applied) == (confidence >= threshold)
        assert (field in result.needs_confirmation) == (confidence < threshold)


class TestGetPath:
    def test_missing_steps_return_none(self):
        draft = {"workExperience": [{"companyName": "Acme"}]}
        assert get_path(draft, FieldPath.parse("workExperience[3].companyName")) is None
        assert get_path(draft, FieldPath.parse("education[0].degree")) is None
        assert get_path(draft, FieldPath.parse("workExperience[0].companyName")) == "Acme"
