"""
Unit Tests for Shared Document Utilities
Code block detection, its cache and emoji handling.
"""

import pytest

from style_rules.shared.utils import (
    clear_code_block_cache, find_first_emoji_position, get_code_block_lines, is_fence_line,
    strip_leading_decorations, truncate_at_emoji,
)


@pytest.mark.unit
class TestCodeBlockLines:
    """Fenced and indented code block detection."""

    def test_backtick_fence(self):
        lines = ['text', '```', 'code', '```', 'after']
        assert get_code_block_lines(lines) == [False, True, True, True, False]

    def test_different_fence_character_does_not_close(self):
        lines = ['~~~', '```', 'x', '~~~', 'y']
        assert get_code_block_lines(lines) == [True, True, True, True, False]

    def test_shorter_fence_does_not_close(self):
        lines = ['````', '```', 'x', '````', 'y']
        assert get_code_block_lines(lines) == [True, True, True, True, False]

    def test_indented_code(self):
        assert get_code_block_lines(['para', '    code line', 'after']) == [False, True, False]

    def test_unclosed_fence_runs_to_end(self):
        assert get_code_block_lines(['```', 'a', 'b']) == [True, True, True]

    def test_cached_and_uncached_results_match(self):
        lines = ['# Title', '```bash', 'npm install', '```', '    indented', '']
        cached = get_code_block_lines(lines)
        uncached = get_code_block_lines(lines, use_cache=False)
        clear_code_block_cache()
        assert cached == uncached == get_code_block_lines(lines)

    def test_cached_result_is_a_fresh_list(self):
        lines = ['```', 'x', '```']
        first = get_code_block_lines(lines)
        first[0] = False
        assert get_code_block_lines(lines)[0] is True

    def test_is_fence_line(self):
        assert is_fence_line('  ```python')
        assert is_fence_line('~~~')
        assert not is_fence_line('``inline``')


@pytest.mark.unit
class TestEmoji:
    """Emoji stripping and truncation."""

    def test_truncate_at_trailing_status_emoji(self):
        assert truncate_at_emoji('Deploy \u2705 Done') == 'Deploy'

    def test_leading_emoji_kept(self):
        assert truncate_at_emoji('\U0001F680 Launch plan') == '\U0001F680 Launch plan'

    def test_emoji_in_code_span_ignored(self):
        assert find_first_emoji_position('Use `\u2705` here') == -1

    def test_skin_tone_sequence_stripped(self):
        assert strip_leading_decorations('\U0001F44D\U0001F3FD Good') == 'Good'
