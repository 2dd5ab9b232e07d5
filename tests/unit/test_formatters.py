"""Tests for contact detail formatting."""

import pytest

from resume_interview.services.formatters import format_city_state, format_phone_number


class TestFormatPhoneNumber:
    """Tests for format_phone_number."""

    @pytest.mark.parametrize(
        "raw", ["5551234567", "555-123-4567", "555.123.4567", "+1 555 123 4567", "(555) 123 4567"]
    )
    def test_us_numbers(self, raw):
        assert format_phone_number(raw) == "(555) 123-4567"

    def test_international_number_unchanged(self):
        assert format_phone_number("+44 20 7946 0958") == "+44 20 7946 0958"

    def test_empty(self):
        assert format_phone_number("") == ""
        assert format_phone_number(None) == ""


class TestFormatCityState:
    """Tests for format_city_state."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("austin texas", "Austin, TX"),
            ("Austin, Texas", "Austin, TX"),
            ("denver co", "Denver, CO"),
            ("Seattle, WA", "Seattle, WA"),
            ("new york new york", "New York, NY"),
            ("charleston west virginia", "Charleston, WV"),
        ],
    )
    def test_recognized_states(self, raw, expected):
        assert format_city_state(raw) == expected

    def test_unknown_location_title_cased(self):
        assert format_city_state("paris france") == "Paris France"

    def test_apostrophe_not_capitalized_after(self):
        assert format_city_state("coeur d'alene idaho") == "Coeur D'alene, ID"

    def test_empty(self):
        assert format_city_state("   ") == ""
        assert format_city_state(None) == ""
