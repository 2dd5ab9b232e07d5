"""Tests for rule-based fallback extraction."""

import pytest

from resume_interview.agents.entries import LOOP_RULES
from resume_interview.agents.fallback_extraction import (
    DATE_CONFIDENCE,
    FLAG_CONFIDENCE,
    TEXT_CONFIDENCE,
    fallback_extract,
    parse_languages,
    split_list,
)
from resume_interview.agents.sections import REQUIRED_FIRST_MESSAGES
from resume_interview.agents.skills import SKILLS_DETAIL_QUESTIONS, SKILLS_GATE_QUESTIONS
from resume_interview.agents.state import ConversationSession, Section, SkillsSubCategory


def _as_dict(result) -> dict:
    return {str(f.path): f.value for f in result.fields}


class TestListParsing:
    def test_split_list(self):
        assert split_list("Excel, Python; Photoshop ,") == ["Excel", "Python", "Photoshop"]

    def test_parse_languages_with_and_without_proficiency(self):
        assert parse_languages("Spanish - fluent, French (basic), Italian") == [
            {"language": "Spanish", "proficiency": "fluent"},
            {"language": "French", "proficiency": "basic"},
            {"language": "Italian", "proficiency": "Fluent"},
        ]


class TestLanguageAndPersonal:
    """Tests for the opening sections."""

    @pytest.mark.parametrize(("answer", "code"), [("English", "en"), ("Español", "es"), ("日本語", "ja")])
    def test_language_choice(self, answer, code):
        result = fallback_extract(answer, Section.LANGUAGE, "Which language would you like to use?")
        assert _as_dict(result) == {"language": code}
        assert result.suggested_section == Section.INTRO

    def test_unknown_language_extracts_nothing(self):
        result = fallback_extract("Klingon", Section.LANGUAGE, "Which language?")
        assert result.fields == []

    def test_full_name(self):
        result = fallback_extract("Jane Doe", Section.INTRO, "**What is your full name?**")
        assert _as_dict(result) == {"personalInfo.fullName": "Jane Doe"}
        assert result.suggested_section == Section.PERSONAL

    def test_email_is_not_a_name(self):
        result = fallback_extract("jane@example.com", Section.PERSONAL, "What is your full name?")
        assert result.fields == []

    def test_email_pulled_from_sentence(self):
        result = fallback_extract(
            "sure, it's jane.doe@gmail.com", Section.PERSONAL, "**What is your email address?**"
        )
        assert _as_dict(result) == {"personalInfo.email": "jane.doe@gmail.com"}

    def test_phone_is_formatted(self):
        result = fallback_extract("5125551234", Section.PERSONAL, "What is your phone number?")
        assert _as_dict(result) == {"personalInfo.phone": "(512) 555-1234"}

    def test_city_is_formatted(self):
        result = fallback_extract("austin, texas", Section.PERSONAL, "What city do you live in?")
        assert _as_dict(result) == {"personalInfo.city": "Austin, TX"}


class TestEntrySections:
    """Tests for work, education, volunteering and references."""

    def test_company_answer(self):
        result = fallback_extract("Acme Corp", Section.WORK, "**What company did you work for?**")
        assert len(result.fields) == 1
        field = result.fields[0]
        assert str(field.path) == "workExperience[0].companyName"
        assert field.value == "Acme Corp"
        assert field.confidence == TEXT_CONFIDENCE

    def test_entry_index_comes_from_session(self):
        session = ConversationSession(
            current_section=Section.WORK, entry_indices={Section.WORK: 2}
        )
        result = fallback_extract(
            "Cashier", Section.WORK, "**What was your job title?**", session
        )
        assert _as_dict(result) == {"workExperience[2].jobTitle": "Cashier"}

    def test_gate_no_sets_flag_and_moves_on(self):
        result = fallback_extract("nope", Section.WORK, REQUIRED_FIRST_MESSAGES[Section.WORK])
        assert _as_dict(result) == {"hasWorkExperience": False}
        assert result.fields[0].confidence == FLAG_CONFIDENCE
        assert result.suggested_section == Section.EDUCATION

    def test_first_job_counts_as_gate_no(self):
        result = fallback_extract(
            "this is my first job search", Section.WORK, REQUIRED_FIRST_MESSAGES[Section.WORK]
        )
        assert _as_dict(result) == {"hasWorkExperience": False}

    def test_gate_yes_sets_flag_only(self):
        result = fallback_extract("yes", Section.EDUCATION, REQUIRED_FIRST_MESSAGES[Section.EDUCATION])
        assert _as_dict(result) == {"hasEducation": True}
        assert result.suggested_section is None

    def test_references_upon_request(self):
        result = fallback_extract(
            "available upon request", Section.REFERENCES, REQUIRED_FIRST_MESSAGES[Section.REFERENCES]
        )
        assert _as_dict(result) == {"hasReferences": False, "referencesUponRequest": True}
        assert result.suggested_section == Section.REVIEW

    def test_yes_no_answer_never_stored_as_text(self):
        result = fallback_extract("yes", Section.WORK, "**What company did you work for?**")
        assert result.fields == []

    def test_current_job_question(self):
        result = fallback_extract("yes", Section.WORK, "Is this your current job?")
        assert _as_dict(result) == {"workExperience[0].isCurrentJob": True}

    def test_end_date_still_there(self):
        result = fallback_extract("I'm still there", Section.WORK, "When did you leave?")
        assert _as_dict(result) == {"workExperience[0].isCurrentJob": True}

    def test_degree_with_field_is_split(self):
        result = fallback_extract(
            "Bachelor of Science in Biology", Section.EDUCATION, "What degree did you earn?"
        )
        assert _as_dict(result) == {
            "education[0].degree": "Bachelor of Science",
            "education[0].fieldOfStudy": "Biology",
        }

    def test_graduation_year(self):
        question = "Great! **What year did you graduate from your program? (Or are you still studying?)**"
        result = fallback_extract("2019", Section.EDUCATION, question)
        assert _as_dict(result) == {"education[0].endYear": "2019"}
        assert result.fields[0].confidence == DATE_CONFIDENCE

    def test_still_studying(self):
        question = "Great! **What year did you graduate from your program? (Or are you still studying?)**"
        result = fallback_extract("still studying", Section.EDUCATION, question)
        assert _as_dict(result) == {"education[0].isCurrentlyStudying": True}

    def test_volunteer_organization(self):
        result = fallback_extract(
            "Red Cross", Section.VOLUNTEERING, "**What organization did you volunteer with?**"
        )
        assert _as_dict(result) == {"volunteering[0].organization": "Red Cross"}

    def test_reference_phone_kept_raw(self):
        result = fallback_extract(
            "512-555-1234", Section.REFERENCES, "What is their phone number?"
        )
        assert _as_dict(result) == {"references[0].phone": "512-555-1234"}

    def test_no_to_add_another_moves_on(self):
        result = fallback_extract(
            "no", Section.WORK, LOOP_RULES[Section.WORK].add_another_question
        )
        assert result.fields == []
        assert result.suggested_section == Section.EDUCATION

    def test_sentence_no_to_add_another_moves_on(self):
        result = fallback_extract(
            "No, that's all", Section.WORK, LOOP_RULES[Section.WORK].add_another_question
        )
        assert result.fields == []
        assert result.suggested_section == Section.EDUCATION

    def test_sentence_yes_to_add_another_stores_nothing(self):
        result = fallback_extract(
            "Yes, I have another one",
            Section.WORK,
            LOOP_RULES[Section.WORK].add_another_question,
        )
        assert result.fields == []
        assert result.suggested_section is None


class TestSkills:
    """Tests for the skills sub-sections."""

    def test_gate_answer_sets_flag(self):
        result = fallback_extract(
            "no", Section.SKILLS, SKILLS_GATE_QUESTIONS[SkillsSubCategory.CERTIFICATIONS]
        )
        assert _as_dict(result) == {"hasCertifications": False}

    def test_last_gate_no_moves_to_references(self):
        result = fallback_extract(
            "no", Section.SKILLS, SKILLS_GATE_QUESTIONS[SkillsSubCategory.SOFT_SKILLS]
        )
        assert result.suggested_section == Section.REFERENCES

    def test_technical_list(self):
        result = fallback_extract(
            "Excel, Python", Section.SKILLS, SKILLS_DETAIL_QUESTIONS[SkillsSubCategory.TECHNICAL]
        )
        assert _as_dict(result) == {"skills.technicalSkills": ["Excel", "Python"]}

    def test_languages_list(self):
        result = fallback_extract(
            "Spanish - native", Section.SKILLS, SKILLS_DETAIL_QUESTIONS[SkillsSubCategory.LANGUAGES]
        )
        assert _as_dict(result) == {
            "skills.languages": [{"language": "Spanish", "proficiency": "native"}]
        }


class TestNothingToExtract:
    def test_empty_answer(self):
        assert fallback_extract("   ", Section.WORK, "What company?").fields == []

    def test_review_section(self):
        result = fallback_extract("looks good", Section.REVIEW, "Does everything look correct?")
        assert result.fields == []
        assert result.suggested_section is None
