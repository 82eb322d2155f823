"""
Unit Tests for the Sentence Case Fix Builder
"""

import pytest

from style_rules.autofix.safety import resolve_safety_config
from style_rules.services.terms_config_service import get_default_term_dictionary
from style_rules.sentence_case.fix_builder import build_bold_fix, build_heading_fix, to_sentence_case
from style_rules.types import FixInfo


@pytest.fixture
def dictionary():
    return get_default_term_dictionary()


@pytest.mark.unit
class TestToSentenceCase:
    """Rewriting text to sentence case."""

    @pytest.mark.parametrize("text,expected", [
        ("This Is Title Case", "This is title case"),
        ("Setting Up The api", "Setting up the API"),
        ("GETTING STARTED", "Getting started"),
        ("Configure The REST API", "Configure the REST API"),
        ("Using `MyClass` In Tests", "Using `MyClass` in tests"),
        ("What I Learned", "What I learned"),
        ("Review The KPI Dashboard", "Review the KPI dashboard"),
        ("Using useEffect Hooks", "Using useEffect hooks"),
        ("Yaml-based Configuration", "YAML-based configuration"),
        ("Learning Python Basics", "Learning Python basics"),
        ("the Quick Setup", "The quick setup"),
        ("Install `pkg`-Based Tools", "Install `pkg`-based tools"),
        ("macos/linux support", "macOS/Linux support"),
        ("Windows/MACOS Setup", "Windows/macOS setup"),
        ("\U0001F680 getting started", "\U0001F680 Getting started"),
    ])
    def test_rewrites(self, dictionary, text, expected):
        assert to_sentence_case(text, dictionary) == expected

    def test_unchanged_text_returns_none(self, dictionary):
        assert to_sentence_case("Getting started", dictionary) is None

    def test_only_markup_returns_none(self, dictionary):
        assert to_sentence_case("`code`", dictionary) is None

    def test_empty_returns_none(self, dictionary):
        assert to_sentence_case("", dictionary) is None


@pytest.mark.unit
class TestBuildHeadingFix:
    """Heading fixes replace only the text after the marker."""

    def test_fix_position(self, dictionary):
        fix = build_heading_fix("# This Is Title Case", "This Is Title Case", dictionary)
        assert fix == FixInfo(column=3, delete_count=18, insert_text="This is title case")

    def test_deeper_heading(self, dictionary):
        fix = build_heading_fix("## Getting Started Guide", "Getting Started Guide", dictionary)
        assert fix.column == 4
        assert fix.apply("## Getting Started Guide") == "## Getting started guide"

    def test_text_not_after_marker(self, dictionary):
        assert build_heading_fix("# Title", "Other", dictionary) is None

    def test_not_a_heading(self, dictionary):
        assert build_heading_fix("Plain Text Here", "Plain Text Here", dictionary) is None

    def test_never_flag_holds_fix_back(self, dictionary):
        config = resolve_safety_config({'never_flag': ['Title']})
        assert build_heading_fix("# This Is Title Case", "This Is Title Case", dictionary, config) is None


@pytest.mark.unit
class TestBuildBoldFix:
    """Bold fixes land right after the opening delimiter."""

    def test_fix_position(self):
        fix = build_bold_fix("- **the Quick Setup**", "the Quick Setup", "The quick setup")
        assert fix == FixInfo(column=5, delete_count=15, insert_text="The quick setup")
        assert fix.apply("- **the Quick Setup**") == "- **The quick setup**"

    def test_label_before_colon(self):
        line = "- **Quick Start:** run it"
        fix = build_bold_fix(line, "Quick Start", "Quick start")
        assert fix.apply(line) == "- **Quick start:** run it"

    def test_text_not_found(self):
        assert build_bold_fix("- **Other**", "Missing Text", "Missing text") is None

    def test_explicit_start_skips_earlier_match(self):
        line = "- **Quick Setup** and **Quick Setup**"
        fix = build_bold_fix(line, "Quick Setup", "Quick setup", start=24)
        assert fix.column == 25
        assert fix.apply(line) == "- **Quick Setup** and **Quick setup**"

    def test_explicit_start_must_point_at_text(self):
        assert build_bold_fix("- **Quick Setup**", "Quick Setup", "Quick setup", start=0) is None

    def test_search_skips_inline_code(self):
        line = "- Write `**Quick Setup**` literally, then **Quick Setup**"
        fix = build_bold_fix(line, "Quick Setup", "Quick setup")
        assert fix.apply(line) == "- Write `**Quick Setup**` literally, then **Quick setup**", \
            f"Fix should leave inline code alone. Found: {fix.apply(line)}"

    def test_only_inline_code_match(self):
        assert build_bold_fix("- Write `**Quick Setup**`", "Quick Setup", "Quick setup") is None
