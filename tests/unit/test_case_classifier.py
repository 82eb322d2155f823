"""
Unit Tests for the Sentence Case Classifier
Tests heading and bold-text classification against the default term dictionary.
"""

import pytest

from style_rules.services.terms_config_service import get_default_term_dictionary
from style_rules.sentence_case.case_classifier import is_all_caps_heading, validate_bold_text, validate_heading


@pytest.fixture
def dictionary():
    """Default casing dictionary loaded from the bundled YAML files."""
    return get_default_term_dictionary()


@pytest.mark.unit
class TestValidateHeading:
    """Heading classification."""

    def test_title_case_flagged(self, dictionary):
        result = validate_heading("This Is Title Case", dictionary)
        assert not result.is_valid
        assert result.error_message == 'Word "Is" in heading should be lowercase.'
        assert result.cleaned_text == "This Is Title Case"

    @pytest.mark.parametrize("heading", [
        "Using JSON and HTML with CSS",
        "YAML-based configuration",
        "Deploy with API Gateway",
        "Review the KPI dashboard",
        "What I learned",
        "Self-service portal",
        "Learning Python basics",
        "Go modules overview",
        "Total cost of ownership (TCO)",
        "Step one: Install the tools",
        "useEffect patterns",
        "README.md guidelines",
    ])
    def test_valid_headings(self, dictionary, heading):
        result = validate_heading(heading, dictionary)
        assert result.is_valid, f"Expected '{heading}' to be valid. Found: {result.error_message}"

    def test_known_term_casing(self, dictionary):
        result = validate_heading("Getting started with the api", dictionary)
        assert result.error_message == 'Word "api" should be "API".'

    def test_phrase_checked_before_words(self, dictionary):
        result = validate_heading("Configure the rest api", dictionary)
        assert result.error_message == 'Phrase "rest api" should be "REST API".'

    def test_misspelled_acronym_prefix(self, dictionary):
        result = validate_heading("Yaml-based configuration", dictionary)
        assert result.error_message == 'First word "Yaml-based" should be "YAML-based".'

    def test_all_caps_checked_first(self, dictionary):
        result = validate_heading("GETTING STARTED", dictionary)
        assert result.error_message == "Heading should not be in all caps."

    def test_lowercase_first_word(self, dictionary):
        result = validate_heading("getting started", dictionary)
        assert result.error_message == "Heading's first word should be capitalized."

    def test_first_word_after_leading_emoji(self, dictionary):
        result = validate_heading("\U0001F680 quick start", dictionary)
        assert result.error_message == 'First word "quick" should be "Quick".'
        assert result.cleaned_text == "quick start"

    def test_non_string_is_valid(self, dictionary):
        assert validate_heading(None, dictionary).is_valid


@pytest.mark.unit
class TestValidateBoldText:
    """Bold list-item lead-ins use the stricter ruleset."""

    def test_capitalized_later_word(self, dictionary):
        result = validate_bold_text("the Quick Setup", dictionary)
        assert result.error_message == 'Word "Quick" in bold text should be lowercase.'

    @pytest.mark.parametrize("text", [
        "the API Gateway",
        "Step 1",
        "Part B",
        "Background Context",
        "NEVER",
        "feat",
        "src/",
        "2 quick wins",
    ])
    def test_valid_bold_text(self, dictionary, text):
        result = validate_bold_text(text, dictionary)
        assert result.is_valid, f"Expected '{text}' to be valid. Found: {result.error_message}"

    def test_structural_word_not_in_list(self, dictionary):
        result = validate_bold_text("Quick Start", dictionary)
        assert result.error_message == 'Word "Start" in bold text should be lowercase.'

    def test_problem_word(self, dictionary):
        result = validate_bold_text("Run Test suite", dictionary)
        assert result.error_message == 'Word "Test" in bold text should be lowercase.'

    def test_all_caps_word(self, dictionary):
        result = validate_bold_text("Setup DEFAULT values", dictionary)
        assert result.error_message == 'Word "DEFAULT" in bold text should not be in all caps.'

    def test_all_caps_bold_text(self, dictionary):
        result = validate_bold_text("QUICK SETUP GUIDE", dictionary)
        assert result.error_message == "Bold text should not be in all caps."


@pytest.mark.unit
class TestAllCaps:
    """All-caps detection ignores short words and needs two relevant words."""

    @pytest.mark.parametrize("words,expected", [
        (["GETTING", "STARTED"], True),
        (["API"], False),
        (["HTTP2", "SETUP"], False),
        (["A", "NOTE"], False),
        (["__PRESERVED_0__", "QUICK", "START"], True),
    ])
    def test_is_all_caps_heading(self, words, expected):
        assert is_all_caps_heading(words) is expected
