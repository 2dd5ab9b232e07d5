"""Tests for the multi-entry loop controller."""

import pytest

from resume_interview.agents.entries import (
    DONE_ADDING,
    LOOP_RULES,
    WANTS_ANOTHER,
    answered_last_field,
    decide_entry_loop,
    is_add_another_question,
)
from resume_interview.agents.sections import SECTION_TRANSITION_MESSAGES
from resume_interview.agents.state import Section

_RESPONSIBILITIES_QUESTION = "**What were your main responsibilities at Acme Corp?**"


class TestAnsweredLastField:
    """Tests for answered_last_field."""

    def test_substantive_answer_counts(self):
        rule = LOOP_RULES[Section.WORK]
        assert answered_last_field(rule, "Managed the front desk and scheduled shifts")

    def test_short_or_yes_no_answer_does_not_count(self):
        rule = LOOP_RULES[Section.WORK]
        assert not answered_last_field(rule, "stuff")
        assert not answered_last_field(rule, "yes")

    def test_accepting_suggestions_counts(self):
        rule = LOOP_RULES[Section.WORK]
        assert answered_last_field(rule, "use all of them")

    def test_any_answer_counts_for_graduation_year(self):
        rule = LOOP_RULES[Section.EDUCATION]
        assert answered_last_field(rule, "2019")

    def test_empty_answer_never_counts(self):
        assert not answered_last_field(LOOP_RULES[Section.EDUCATION], "   ")


class TestIsAddAnotherQuestion:
    @pytest.mark.parametrize("section", list(LOOP_RULES))
    def test_canonical_question_recognized(self, section):
        assert is_add_another_question(LOOP_RULES[section].add_another_question, section)

    def test_sections_without_loop(self):
        assert not is_add_another_question("Do you have another job?", Section.SKILLS)


class TestDecideEntryLoop:
    """Tests for decide_entry_loop."""

    def test_last_field_answered_asks_add_another(self):
        decision = decide_entry_loop(
            Section.WORK,
            _RESPONSIBILITIES_QUESTION,
            "Handled customer orders and trained new cashiers",
            "Thanks! What else?",
            0,
        )
        assert decision is not None
        assert LOOP_RULES[Section.WORK].add_another_question in decision.message
        assert decision.next_entry_index == 0
        assert decision.follow_up_needed

    def test_backend_already_asking_add_another_is_kept(self):
        decision = decide_entry_loop(
            Section.WORK,
            _RESPONSIBILITIES_QUESTION,
            "Handled customer orders and trained new cashiers",
            "Got it! Do you have another job you'd like to add? (Yes or No)",
            0,
        )
        assert decision is None

    def test_yes_to_add_another_starts_next_entry(self):
        decision = decide_entry_loop(
            Section.EDUCATION,
            LOOP_RULES[Section.EDUCATION].add_another_question,
            "yes",
            "",
            0,
        )
        assert decision is not None
        assert decision.next_entry_index == 1
        assert LOOP_RULES[Section.EDUCATION].first_question in decision.message

    def test_no_to_add_another_ends_section(self):
        decision = decide_entry_loop(
            Section.VOLUNTEERING,
            LOOP_RULES[Section.VOLUNTEERING].add_another_question,
            "that's it",
            "",
            1,
        )
        assert decision is not None
        assert decision.section_complete
        assert decision.suggested_section == Section.SKILLS
        assert decision.message == SECTION_TRANSITION_MESSAGES[Section.VOLUNTEERING]
        assert decision.next_entry_index == 1

    def test_unclear_answer_to_add_another_keeps_reply(self):
        decision = decide_entry_loop(
            Section.REFERENCES,
            LOOP_RULES[Section.REFERENCES].add_another_question,
            "hmm let me think",
            "",
            0,
        )
        assert decision is None

    def test_mid_entry_question_keeps_reply(self):
        decision = decide_entry_loop(
            Section.WORK, "**What was your job title?**", "Cashier", "Next question", 0
        )
        assert decision is None

    def test_no_previous_question(self):
        assert decide_entry_loop(Section.WORK, "", "yes", "", 0) is None

    def test_sentence_yes_starts_next_entry(self):
        decision = decide_entry_loop(
            Section.WORK,
            LOOP_RULES[Section.WORK].add_another_question,
            "Yes, I have another one",
            "",
            2,
        )
        assert decision is not None
        assert decision.next_entry_index == 3
        assert not decision.section_complete

    def test_sentence_no_ends_section(self):
        decision = decide_entry_loop(
            Section.REFERENCES,
            LOOP_RULES[Section.REFERENCES].add_another_question,
            "No, that's all for references",
            "",
            1,
        )
        assert decision is not None
        assert decision.section_complete
        assert decision.next_entry_index == 1


class TestAddAnotherAnswers:
    """Add-another answers are read from how they start."""

    @pytest.mark.parametrize(
        "answer",
        ["yes", "Yes, I have another one", "yes please", "yeah, one more", "I do", "sure thing"],
    )
    def test_wants_another(self, answer):
        assert WANTS_ANOTHER.matches(answer)
        assert not DONE_ADDING.matches(answer)

    @pytest.mark.parametrize(
        "answer",
        ["no", "No, that's all", "nope, I'm done", "I have none", "I don't", "that's it"],
    )
    def test_done_adding(self, answer):
        assert DONE_ADDING.matches(answer)
        assert not WANTS_ANOTHER.matches(answer)

    def test_yes_inside_a_sentence_is_not_an_answer(self):
        assert not WANTS_ANOTHER.matches("I said yes to that job offer")
