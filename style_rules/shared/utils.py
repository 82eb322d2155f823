"""
Shared Utilities
Document-level helpers: code block line detection (with caching),
inline code spans and emoji handling.
"""

import re
from functools import lru_cache
from typing import List, Sequence, Tuple

from .heuristics import get_code_span_ranges, is_in_code_span

_FENCE = re.compile(r'^(`{3,}|~{3,})')
_INDENTED = re.compile(r'^(?: {4}|\t)')

EMOJI_RANGES = (
    '\U0001F1E0-\U0001F1FF'  # regional indicators (flags)
    '\U0001F300-\U0001F5FF'  # symbols and pictographs
    '\U0001F600-\U0001F64F'  # emoticons
    '\U0001F680-\U0001F6FF'  # transport and map
    '\U0001F700-\U0001F77F'  # alchemical
    '\U0001F780-\U0001F7FF'  # geometric shapes extended
    '\U0001F800-\U0001F8FF'  # supplemental arrows-C
    '\u2600-\u26FF'          # miscellaneous symbols
    '\u2700-\u27BF'          # dingbats
    '\U0001F900-\U0001F9FF'  # supplemental symbols and pictographs
    '\U0001FA00-\U0001FA6F'  # chess symbols
    '\U0001FA70-\U0001FAFF'  # symbols and pictographs extended-A
    '\U0001F000-\U0001F02F'  # mahjong tiles
    '\U0001F0A0-\U0001F0FF'  # playing cards
    '\U0001F100-\U0001F1FF'  # enclosed alphanumeric supplement
)

_EMOJI = re.compile(f'[{EMOJI_RANGES}]')
# Skin tone modifiers, zero-width joiner and VS-16 only ever trail an emoji
_LEADING_DECORATION = re.compile(f'[{EMOJI_RANGES}\u200d\ufe0f]')


def _compute_code_block_lines(lines: Tuple[str, ...]) -> Tuple[bool, ...]:
    in_code_block = [False] * len(lines)
    fence_char = None
    fence_length = 0

    for i, line in enumerate(lines):
        if fence_char is None and not line:
            continue

        stripped = line.strip()
        fence = _FENCE.match(stripped)
        if fence:
            marker = fence.group(1)
            in_code_block[i] = True
            if fence_char is None:
                fence_char, fence_length = marker[0], len(marker)
            elif marker[0] == fence_char and len(marker) >= fence_length:
                fence_char, fence_length = None, 0
            # a shorter or different fence inside a block is content
            continue

        if fence_char is not None:
            in_code_block[i] = True
        elif len(line) > 4 and _INDENTED.match(line) and stripped:
            in_code_block[i] = True

    return tuple(in_code_block)


@lru_cache(maxsize=64)
def _cached_code_block_lines(lines: Tuple[str, ...]) -> Tuple[bool, ...]:
    return _compute_code_block_lines(lines)


def get_code_block_lines(lines: Sequence[str], use_cache: bool = True) -> List[bool]:
    """
    Flag every line that belongs to a fenced or indented code block.

    Fences close only on the same character with at least the opening
    length. Fence lines themselves are flagged. Results are cached by
    document content; ``use_cache=False`` bypasses the cache and returns
    the identical result.
    """
    key = tuple(lines)
    if use_cache:
        return list(_cached_code_block_lines(key))
    return list(_compute_code_block_lines(key))


def clear_code_block_cache() -> None:
    _cached_code_block_lines.cache_clear()


def is_fence_line(line: str) -> bool:
    return bool(_FENCE.match(line.strip()))


def strip_leading_decorations(text: str) -> str:
    """Remove leading emoji sequences (ZWJ, skin tones, VS-16 included)."""
    result = text
    while result:
        match = _LEADING_DECORATION.match(result)
        if not match:
            break
        result = result[match.end():].lstrip()
    return result.lstrip()


def find_first_emoji_position(text: str) -> int:
    """Position of the first emoji outside a code span, or -1."""
    spans = get_code_span_ranges(text)
    for match in _EMOJI.finditer(text):
        if not is_in_code_span(spans, match.start(), match.start() + 1):
            return match.start()
    return -1


def truncate_at_emoji(text: str) -> str:
    """
    Cut heading text at the first emoji that follows real content, so
    trailing status markers ("Deploy ✅ Done") are not validated. Leading
    decorative emoji are kept.
    """
    stripped = strip_leading_decorations(text)
    offset = len(text) - len(stripped)
    position = find_first_emoji_position(stripped)
    if position == -1:
        return text
    return text[:offset + position].rstrip()
