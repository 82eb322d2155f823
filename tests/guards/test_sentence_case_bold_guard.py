"""
Test Suite: Sentence Case Headings and Bold Lead-ins Guard

This test suite validates the Zero False Positive Guard for headings and bold
list-item text that legitimately keep capitals (filenames, emphasis words,
commit types, dictionary phrases, code) through three test categories:

1. OBJECTIVE TRUTH TEST - Validates that legitimate capitals are not flagged
2. FALSE NEGATIVE RISK TEST - Ensures real title case is still caught
3. INVERSION TEST - Confirms each exemption doesn't suppress title case beyond its shape
"""

import pytest

from style_rules.structure_and_format.sentence_case_heading_rule import SentenceCaseHeadingRule


@pytest.fixture
def sentence_case_rule():
    """Create SentenceCaseHeadingRule instance."""
    return SentenceCaseHeadingRule()


def messages(rule, line):
    return [v.message for v in rule.analyze([line])]


# ============================================================================
# TEST CATEGORY 1: OBJECTIVE TRUTH TEST
# Validates that headings and bold text with legitimate capitals are accepted
# ============================================================================

class TestObjectiveTruthHeadings:
    """
    Test that headings whose capitals come from names, code or quoting are valid.

    Basis:
    - "README.md" is a filename whose casing is fixed by convention
    - Inline code keeps the casing of the identifier it quotes
    - A quoted command at the start is followed by ordinary prose
    """

    @pytest.mark.parametrize("line", [
        "## README.md guidelines",
        "## Using `MyService` in production",
        '## "npm test" fails silently',
        "## [Unreleased]",
        "## name (required)",
        "## Deploy with API Gateway",
    ])
    def test_headings_not_flagged(self, sentence_case_rule, line):
        """
        OBJECTIVE TRUTH: Capitals owned by filenames, code, dictionary phrases or changelog labels are correct.
        """
        found = messages(sentence_case_rule, line)
        assert found == [], f"'{line}' follows sentence case. Found: {found}"


class TestObjectiveTruthBoldLeadIns:
    """
    Test that bold list-item lead-ins with fixed casing are valid.

    Basis:
    - **NEVER** is emphasis, **feat** a commit type, **src/** a directory
    - **package.json** is a filename
    - Structural words such as "Overview" may stay capitalized
    """

    @pytest.mark.parametrize("line", [
        "- **NEVER** commit secrets",
        "- **feat**: add login",
        "- **src/**: source files",
        "- **package.json**: project manifest",
        "- **Step 2 Overview**: what changes",
        "- **the API Gateway** handles routing",
        "- **2 quick wins** for this sprint",
    ])
    def test_bold_not_flagged(self, sentence_case_rule, line):
        """
        OBJECTIVE TRUTH: Emphasis, commit types, paths and section labels keep their casing.
        """
        found = messages(sentence_case_rule, line)
        assert found == [], f"'{line}' is valid bold text. Found: {found}"


# ============================================================================
# TEST CATEGORY 2: FALSE NEGATIVE RISK TEST
# Ensures genuine title case is still reported
# ============================================================================

class TestFalseNegativeRiskTitleCase:
    """
    Test that real title case in headings and bold text is reported.
    """

    def test_title_case_heading_flagged(self, sentence_case_rule):
        """
        FALSE NEGATIVE RISK: "Install The Tools" capitalizes an article.
        """
        found = messages(sentence_case_rule, "## Install The Tools")
        assert found == ['Word "The" in heading should be lowercase.'], \
            f"Title case heading should be flagged. Found: {found}"

    def test_title_case_bold_flagged(self, sentence_case_rule):
        """
        FALSE NEGATIVE RISK: "Getting Started Guide" is title case in a bold lead-in.
        """
        found = messages(sentence_case_rule, "- **Getting Started Guide** for new users")
        assert found == ['Word "Started" in bold text should be lowercase.'], \
            f"Title case bold text should be flagged. Found: {found}"

    def test_problem_word_in_bold_flagged(self, sentence_case_rule):
        """
        FALSE NEGATIVE RISK: "Date" after the first word is a classic title case slip.
        """
        found = messages(sentence_case_rule, "- **Release Date** and notes")
        assert found == ['Word "Date" in bold text should be lowercase.'], \
            f"Problem word should be flagged. Found: {found}"


# ============================================================================
# TEST CATEGORY 3: INVERSION TEST
# Confirms the exemptions don't suppress legitimate errors
# ============================================================================

class TestInversionExemptionsStayNarrow:
    """
    Test that each exemption only covers its own shape.
    """

    def test_emphasis_exemption_is_single_word(self, sentence_case_rule):
        """
        INVERSION: **NEVER** is emphasis, but a whole phrase in capitals is shouting.
        """
        found = messages(sentence_case_rule, "- **DO NOT COMMIT** secrets")
        assert found == ['Bold text should not be in all caps.'], \
            f"All caps bold phrase should be flagged. Found: {found}"

    def test_quoted_lead_needs_lowercase_prose(self, sentence_case_rule):
        """
        INVERSION: A quoted command followed by title case is still title case.
        """
        found = messages(sentence_case_rule, '## "npm test" Fails Silently')
        assert found == ['Word "Fails" in heading should be lowercase.'], \
            f"Title case after a quoted command should be flagged. Found: {found}"

    def test_directory_exemption_needs_trailing_slash(self, sentence_case_rule):
        """
        INVERSION: **src/** is a directory, but **Source Files** is title case.
        """
        found = messages(sentence_case_rule, "- **Source Files**: what they hold")
        assert found == ['Word "Files" in bold text should be lowercase.'], \
            f"Title case bold label should be flagged. Found: {found}"
