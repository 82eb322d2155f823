"""
Unit Tests for Heading Token Extraction
"""

import pytest

from style_rules.sentence_case.token_extraction import (
    extract_heading_text, find_first_validation_word, is_atx_heading, split_words, strip_leading_symbols,
)


@pytest.mark.unit
class TestExtractHeadingText:
    """ATX heading recognition and text cleanup."""

    def test_comment_and_closing_sequence_removed(self):
        assert extract_heading_text('## Getting started <!-- anchor --> ##') == 'Getting started'

    def test_plain_heading(self):
        assert extract_heading_text('# Installation guide') == 'Installation guide'

    def test_hashtag_is_not_heading(self):
        assert extract_heading_text('#hashtag') is None

    def test_four_space_indent_is_not_heading(self):
        assert extract_heading_text('    # indented') is None

    def test_empty_heading(self):
        assert extract_heading_text('#') == ''

    def test_non_heading_and_bad_input(self):
        assert extract_heading_text('Plain text') is None
        assert extract_heading_text(None) is None

    def test_is_atx_heading(self):
        assert is_atx_heading('### Title')
        assert not is_atx_heading('')
        assert not is_atx_heading('####### Seven levels')


@pytest.mark.unit
class TestTokens:
    """Leading symbols and first validation word."""

    def test_leading_emoji_stripped(self):
        assert strip_leading_symbols('\U0001F680 Quick start') == ('Quick start', True)

    def test_no_leading_symbol(self):
        assert strip_leading_symbols('Quick start') == ('Quick start', False)

    def test_first_word_skips_placeholders_and_numbers(self):
        assert find_first_validation_word(['__PRESERVED_0__', '2', 'Setup']) == 2

    def test_no_validation_word(self):
        assert find_first_validation_word(['1.2', '-']) == -1

    def test_split_words(self):
        assert split_words(' a  b ') == ['a', 'b']
