"""
Unit Tests for SentenceCaseHeadingRule
Tests heading and bold list-item detection, configuration and attached fixes.
"""

import logging

import pytest

from style_rules.structure_and_format.sentence_case_heading_rule import SentenceCaseHeadingRule
from style_rules.types import FixInfo


@pytest.fixture
def rule():
    return SentenceCaseHeadingRule()


@pytest.mark.unit
class TestHeadings:
    """ATX headings."""

    def test_title_case_heading(self, rule):
        violations = rule.analyze(["# This Is Title Case"])
        assert len(violations) == 1, f"Expected one violation. Found: {violations}"
        violation = violations[0]
        assert violation.rule == 'sentence-case-heading'
        assert violation.line_number == 1
        assert violation.message == 'Word "Is" in heading should be lowercase.'
        assert violation.matched_text == "This Is Title Case"
        assert violation.fix_info == FixInfo(column=3, delete_count=18, insert_text="This is title case")

    def test_misspelled_acronym_fix(self, rule):
        violations = rule.analyze(["# Yaml-based configuration"])
        assert violations[0].message == 'First word "Yaml-based" should be "YAML-based".'
        assert violations[0].fix_info.insert_text == "YAML-based configuration"

    def test_all_caps_fix(self, rule):
        violations = rule.analyze(["# GETTING STARTED"])
        assert violations[0].message == "Heading should not be in all caps."
        assert violations[0].fix_info.apply("# GETTING STARTED") == "# Getting started"

    @pytest.mark.parametrize("line", [
        "# YAML-based configuration",
        "# Using JSON and HTML with CSS",
        "## Deploy with API Gateway",
        "Plain paragraph With Capitals",
    ])
    def test_valid_lines(self, rule, line):
        violations = rule.analyze([line])
        assert len(violations) == 0, f"Expected no violations for '{line}'. Found: {violations}"

    def test_trailing_comment_kept_by_fix(self, rule):
        line = "## Getting Started <!-- anchor -->"
        violations = rule.analyze([line])
        assert len(violations) == 1
        assert violations[0].fix_info.apply(line) == "## Getting started <!-- anchor -->"

    def test_readme_title_skipped(self, rule):
        lines = ["# My Project Name", "## Getting Started"]
        violations = rule.analyze(lines, {'file': 'docs/README.md'})
        assert [v.line_number for v in violations] == [2]
        assert violations[0].message == 'Word "Started" in heading should be lowercase.'

    def test_first_line_checked_outside_readme(self, rule):
        lines = ["# My Project Name", "## Getting Started"]
        assert [v.line_number for v in rule.analyze(lines, {'file': 'docs/guide.md'})] == [1, 2]

    def test_fenced_code_excluded(self, rule):
        lines = ["```markdown", "# Not A Real Heading", "```", "# Real Heading Here"]
        violations = rule.analyze(lines)
        assert [v.line_number for v in violations] == [4]

    def test_ignore_after_emoji(self):
        line = "# Deploy \u2705 Done Today"
        assert len(SentenceCaseHeadingRule().analyze([line])) == 1
        assert len(SentenceCaseHeadingRule({'ignore_after_emoji': True}).analyze([line])) == 0

    def test_slash_compound_first_word_fix(self, rule):
        line = "# macos/linux support"
        violations = rule.analyze([line])
        assert violations[0].message == 'First word "macos/linux" should be "macOS/Linux".'
        fixed = violations[0].fix_info.apply(line)
        assert fixed == "# macOS/Linux support"
        assert rule.analyze([fixed]) == [], f"Fixed heading should be clean. Found: {rule.analyze([fixed])}"

    def test_leading_emoji_heading_gets_fix(self, rule):
        line = "# \U0001F680 getting started"
        violations = rule.analyze([line])
        assert len(violations) == 1
        assert violations[0].fix_info is not None, "Heading after a leading emoji should be fixable"
        assert violations[0].fix_info.apply(line) == "# \U0001F680 Getting started"


@pytest.mark.unit
class TestBoldListItems:
    """Bold spans in bullet list items."""

    def test_bold_lead_in(self, rule):
        violations = rule.analyze(["- **the Quick Setup** for new users"])
        assert len(violations) == 1
        violation = violations[0]
        assert violation.message == 'Word "Quick" in bold text should be lowercase.'
        assert violation.matched_text == "**the Quick Setup**"
        assert violation.fix_info == FixInfo(column=5, delete_count=15, insert_text="The quick setup")

    def test_label_before_colon_only(self, rule):
        violations = rule.analyze(["- **Quick Start:** Run Everything"])
        assert len(violations) == 1
        assert violations[0].matched_text == "**Quick Start**"

    def test_phrase_in_bold_is_valid(self, rule):
        assert rule.analyze(["- **the API Gateway**"]) == []

    def test_bold_in_code_span_skipped(self, rule):
        assert rule.analyze(["- `**Not Bold Text**`"]) == []

    def test_fix_targets_span_outside_inline_code(self, rule):
        line = "- Write `**Quick Setup**` literally, then **Quick Setup**"
        violations = rule.analyze([line])
        assert len(violations) == 1, f"Only the real bold span should be checked. Found: {violations}"
        fix = violations[0].fix_info
        assert fix.column == line.rindex("Quick Setup") + 1
        assert fix.apply(line) == "- Write `**Quick Setup**` literally, then **Quick setup**"

    def test_repeated_bold_text_fixed_in_place(self, rule):
        line = "- **Quick Setup** or **Quick Setup**"
        violations = rule.analyze([line])
        assert [v.fix_info.column for v in violations] == [5, 24]

    def test_bold_outside_list_not_checked(self, rule):
        assert rule.analyze(["Some **Bold Words** here"]) == []


@pytest.mark.unit
class TestConfiguration:
    """Term configuration, deprecated keys and bad input."""

    def test_special_terms(self):
        rule = SentenceCaseHeadingRule({'special_terms': ['Kubeflow']})
        violations = rule.analyze(["# Deploying kubeflow pipelines"])
        assert violations[0].message == 'Word "kubeflow" should be "Kubeflow".'

    def test_deprecated_key_still_applies_and_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            rule = SentenceCaseHeadingRule({'technical_terms': ['Kubeflow']})
        assert 'deprecated' in caplog.text
        assert len(rule.analyze(["# Deploying kubeflow pipelines"])) == 1

    def test_ambiguous_terms(self):
        line = "# Starter Kit overview"
        assert len(SentenceCaseHeadingRule().analyze([line])) == 1
        assert SentenceCaseHeadingRule({'ambiguous_terms': ['kit']}).analyze([line]) == []

    def test_acronym_prefix_exemptions(self):
        line = "# Docs-based workflow"
        violations = SentenceCaseHeadingRule().analyze([line])
        assert violations[0].message == 'First word "Docs-based" should be "DOCS-based".'
        assert SentenceCaseHeadingRule({'acronym_prefix_exemptions': ['docs']}).analyze([line]) == []

    def test_unknown_option_logged(self, caplog):
        with caplog.at_level(logging.WARNING):
            SentenceCaseHeadingRule({'no_such_option': True})
        assert 'Unknown configuration option "no_such_option"' in caplog.text

    def test_invalid_option_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            rule = SentenceCaseHeadingRule({'special_terms': 'Kubeflow', 'ignore_after_emoji': 'yes'})
        assert rule.ignore_after_emoji is False
        assert 'special_terms must be an array of strings' in caplog.text

    def test_never_flag_removes_fix_not_violation(self):
        rule = SentenceCaseHeadingRule({'autofix': {'never_flag': ['Title']}})
        violations = rule.analyze(["# This Is Title Case"])
        assert len(violations) == 1
        assert violations[0].fix_info is None

    @pytest.mark.parametrize("lines", [None, "# This Is Title Case", 42, []])
    def test_bad_input_returns_empty(self, rule, lines):
        assert rule.analyze(lines) == []

    def test_non_string_lines_skipped(self, rule):
        violations = rule.analyze([None, "# This Is Title Case"])
        assert [v.line_number for v in violations] == [2]
