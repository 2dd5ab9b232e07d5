"""Tests for contradiction detection and resolution."""

from hypothesis import given
from hypothesis import strategies as st

from resume_interview.agents.contradictions import (
    CLEAR_CONFIDENCE,
    KEEP_OR_REMOVE_QUESTION,
    clearing_fields,
    contradiction_message,
    detect_contradiction,
    has_meaningful_data,
    resolve_contradiction,
    summarize_entries,
)
from resume_interview.agents.state import ContradictionRecord

_VOLUNTEER_DRAFT = {"volunteering": [{"organization": "Red Cross", "role": "Driver"}]}


class TestDetectContradiction:
    """Tests for detect_contradiction."""

    def test_denial_with_existing_entries(self):
        record = detect_contradiction("I don't have any volunteer experience", _VOLUNTEER_DRAFT)
        assert record is not None
        assert record.section == "volunteering"
        assert record.existing_data_summary == "Red Cross as Driver"
        assert record.proposed_clear is True

    def test_denial_without_entries(self):
        assert detect_contradiction("I don't have any volunteer experience", {}) is None

    def test_entries_with_only_ids_are_not_meaningful(self):
        draft = {"volunteering": [{"id": "v1", "organization": ""}]}
        assert detect_contradiction("I have no volunteer experience", draft) is None

    @given(message=st.sampled_from(["no", "No.", "nope", "nah", "none", "nothing", "skip", "n/a"]))
    def test_bare_no_never_contradicts(self, message):
        """A bare negative at a gate never raises a contradiction."""
        assert detect_contradiction(message, _VOLUNTEER_DRAFT) is None

    def test_denial_of_other_section(self):
        assert detect_contradiction("I have no work experience", _VOLUNTEER_DRAFT) is None


class TestSummaries:
    def test_education_and_reference_formats(self):
        assert summarize_entries(
            "education", [{"schoolName": "State U", "degree": "BA"}, {"degree": "GED"}]
        ) == "State U (BA), Unknown school (GED)"
        assert summarize_entries(
            "references", [{"name": "Bob Lee", "jobTitle": "Manager"}]
        ) == "Bob Lee (Manager)"

    def test_work_without_title(self):
        assert summarize_entries("workExperience", [{"companyName": "Acme"}]) == "Acme"

    def test_has_meaningful_data(self):
        assert has_meaningful_data([{"companyName": "Acme"}])
        assert not has_meaningful_data([{"companyName": "", "responsibilities": []}])
        assert not has_meaningful_data("Acme")


class TestResolution:
    """Tests for keep/remove handling."""

    def setup_method(self):
        self.record = ContradictionRecord(
            section="volunteering", existing_data_summary="Red Cross as Driver"
        )

    def test_keep(self):
        assert resolve_contradiction(self.record, "keep it") == "keep"

    def test_remove(self):
        assert resolve_contradiction(self.record, "remove it please") == "remove"

    def test_unclear(self):
        assert resolve_contradiction(self.record, "what do you mean?") is None

    def test_clearing_fields(self):
        fields = clearing_fields(self.record)
        assert [(str(f.path), f.value) for f in fields] == [
            ("volunteering", []),
            ("hasVolunteering", False),
        ]
        assert all(f.confidence == CLEAR_CONFIDENCE for f in fields)

    def test_message_names_the_entries(self):
        message = contradiction_message(self.record)
        assert message.startswith("Earlier you mentioned Red Cross as Driver.")
        assert KEEP_OR_REMOVE_QUESTION in message

    def test_backend_reply_kept_when_it_asks(self):
        reply = "Hmm, you listed the Red Cross. Would you like to keep this information or remove it from your resume?"
        assert contradiction_message(self.record, reply) == reply
