"""
Token Extraction
Pulls plain heading text out of ATX heading lines and locates the first
word that sentence-case validation applies to.
"""

import re
from typing import List, Optional, Sequence, Tuple

from ..shared.heuristics import is_preserved_placeholder
from ..shared.utils import strip_leading_decorations

_ATX_HEADING = re.compile(r'^ {0,3}(#{1,6})(?:[ \t]+|$)(.*)$')
_HTML_COMMENT = re.compile(r'<!--.*?-->')
_CLOSING_SEQUENCE = re.compile(r'(?:^|[ \t]+)#+[ \t]*$')
_NUMERIC_TOKEN = re.compile(r'^[-\d.,/]+$')


def is_atx_heading(line: str) -> bool:
    return bool(line) and bool(_ATX_HEADING.match(line))


def extract_heading_text(line: str) -> Optional[str]:
    """
    Extract the plain text of an ATX heading line.

    HTML comments and an optional closing ``#`` sequence are removed and
    surrounding whitespace trimmed. Returns None if the line is not an ATX
    heading.

    Example:
        >>> extract_heading_text('## Getting started <!-- anchor --> ##')
        'Getting started'
    """
    if not isinstance(line, str):
        return None
    match = _ATX_HEADING.match(line)
    if not match:
        return None
    text = _HTML_COMMENT.sub('', match.group(2))
    text = _CLOSING_SEQUENCE.sub('', text)
    return text.strip()


def strip_leading_symbols(text: str) -> Tuple[str, bool]:
    """
    Remove leading emoji and decorative symbols.

    Returns the cleaned text and whether anything was removed. When
    something was removed, the next word follows first-word rules.
    """
    trimmed = text.strip()
    cleaned = strip_leading_decorations(trimmed).strip()
    return cleaned, cleaned != trimmed


def find_first_validation_word(tokens: Sequence[str]) -> int:
    """Index of the first token eligible for case checks, or -1."""
    for index, token in enumerate(tokens):
        if is_preserved_placeholder(token) or _NUMERIC_TOKEN.match(token):
            continue
        return index
    return -1


def split_words(text: str) -> List[str]:
    return [word for word in text.split() if word]
