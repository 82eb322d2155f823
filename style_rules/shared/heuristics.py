"""
Shared Heuristics
Detection and markup-preservation helpers used by both the sentence-case
and the backtick rules, so the two rules agree on what counts as an
acronym, a code identifier or a preserved markup segment.
"""

import re
from typing import AbstractSet, List, Tuple

from ..types import PreservedText

# Internal placeholder uses NUL sentinels, which never occur in Markdown text
_PH_START = '\x00P'
_PH_END = 'E\x00'
_INTERNAL_PLACEHOLDER = re.compile(r'\x00P(\d+)E\x00')
_PUBLIC_PLACEHOLDER = re.compile(r'__PRESERVED_(\d+)__')

# Preservation passes, applied in this order
_CODE_SPAN = re.compile(r'`[^`]+`')
_LINK = re.compile(r'\[[^\]]+\]\([^)]+\)|\[[^\]]+\]')
_VERSION = re.compile(r'\b(v?\d+\.\d+(?:\.\d+)?(?:-[a-zA-Z0-9.]+)?)\b')
_ISO_DATE = re.compile(r'\b(\d{4}-\d{2}-\d{2})\b')
_BOLD = re.compile(r'(\*\*|__)(.*?)\1')
_ITALIC = re.compile(r'(\*|_)(.*?)\1')

CODE_IDENTIFIER_PATTERNS = {
    # useEffect, fetchData
    'camel_case': re.compile(r'^[a-z][a-z0-9]*[A-Z][a-zA-Z0-9]*$'),
    # MyComponent, HttpClient; two capitals required so "Paris" is not code
    'pascal_case': re.compile(r'^[A-Z](?=[a-zA-Z0-9]*[A-Z])[a-zA-Z0-9]*[a-z][a-zA-Z0-9]*$'),
    # user_name, _internal_helper
    'snake_case': re.compile(r'^_?[a-z][a-z0-9]*(?:_[a-z0-9]+)+$'),
}

MC_MAC_NAME_PATTERN = re.compile(r'^Ma?c[A-Z][a-z]+$')

_DOMAIN_PATTERN = re.compile(
    r'^(?:[a-z0-9-]+\.)+(?:com|org|net|io|dev|edu|gov|co|ai|app|info|biz|us|uk|de|me|tv|ca|au)(?:/\S*)?$',
    re.IGNORECASE,
)


def is_acronym(word: str) -> bool:
    """
    Check whether a word is a short acronym: at most four characters,
    all of them uppercase letters (API, HTTP, GDPR, I).
    """
    if not word or len(word) > 4:
        return False
    return word.isalpha() and word.isupper()


def is_code_identifier(word: str, brand_exemptions: AbstractSet[str] = frozenset()) -> bool:
    """
    Check whether a word is a camelCase, PascalCase or snake_case identifier.
    Brand names (``iPhone``) and Mc/Mac surnames are never identifiers.
    """
    if word in brand_exemptions or MC_MAC_NAME_PATTERN.match(word):
        return False
    return any(pattern.match(word) for pattern in CODE_IDENTIFIER_PATTERNS.values())


def _expand_internal(text: str, segments: List[str]) -> str:
    return _INTERNAL_PLACEHOLDER.sub(lambda m: segments[int(m.group(1))], text)


def _preserve_pass(text: str, pattern, segments: List[str], outside_only: bool = False) -> str:
    """Replace every match of ``pattern`` with an internal placeholder."""

    def replace(match):
        # Nested placeholders are stored expanded so restoring stays exact
        segments.append(_expand_internal(match.group(0), segments))
        return f"{_PH_START}{len(segments) - 1}{_PH_END}"

    if not outside_only:
        return pattern.sub(replace, text)

    # Only scan the stretches between existing placeholders
    parts = []
    last = 0
    for placeholder in _INTERNAL_PLACEHOLDER.finditer(text):
        parts.append(pattern.sub(replace, text[last:placeholder.start()]))
        parts.append(placeholder.group(0))
        last = placeholder.end()
    parts.append(pattern.sub(replace, text[last:]))
    return ''.join(parts)


def preserve_segments(text: str) -> PreservedText:
    """
    Replace markup with ``__PRESERVED_N__`` placeholders.

    Passes run in a fixed order: code spans, links, version numbers,
    ISO dates, bold, italic. Later passes never look inside text an
    earlier pass already replaced.

    Example:
        >>> preserve_segments('Use `npm` v1.2.3 here').processed
        'Use __PRESERVED_0__ __PRESERVED_1__ here'
    """
    segments: List[str] = []
    processed = _preserve_pass(text, _CODE_SPAN, segments)
    processed = _preserve_pass(processed, _LINK, segments, outside_only=True)
    processed = _preserve_pass(processed, _VERSION, segments, outside_only=True)
    processed = _preserve_pass(processed, _ISO_DATE, segments, outside_only=True)
    processed = _preserve_pass(processed, _BOLD, segments)
    processed = _preserve_pass(processed, _ITALIC, segments)

    public = _INTERNAL_PLACEHOLDER.sub(lambda m: f"__PRESERVED_{m.group(1)}__", processed)
    return PreservedText(processed=public, segments=tuple(segments))


def restore_segments(processed: str, segments) -> str:
    """Inverse of :func:`preserve_segments`; unknown indices are left untouched."""

    def replace(match):
        index = int(match.group(1))
        return segments[index] if index < len(segments) else match.group(0)

    return _PUBLIC_PLACEHOLDER.sub(replace, processed)


def is_preserved_placeholder(token: str) -> bool:
    return token.startswith('__PRESERVED_') and token.endswith('__')


def get_code_span_ranges(line: str) -> List[Tuple[int, int]]:
    """Return ``(start, end)`` ranges of paired-backtick code spans, backticks included."""
    spans: List[Tuple[int, int]] = []
    if '`' not in line:
        return spans

    i = 0
    while i < len(line):
        start_tick = line.find('`', i)
        if start_tick == -1:
            break
        end_tick = line.find('`', start_tick + 1)
        if end_tick == -1:
            break
        spans.append((start_tick, end_tick + 1))
        i = end_tick + 1
    return spans


def is_in_code_span(spans: List[Tuple[int, int]], start: int, end: int) -> bool:
    return any(start >= span_start and end <= span_end for span_start, span_end in spans)


def is_inside_code_span(line: str, start: int, end: int) -> bool:
    """Check whether ``line[start:end]`` sits inside a code span."""
    return is_in_code_span(get_code_span_ranges(line), start, end)


def is_domain_in_prose(text: str, line: str, start: int) -> bool:
    """
    Check whether a match is a bare domain name written as prose
    (``example.com``, ``docs.python.org/3``). Domains that belong to a URL
    or an email address are not prose.
    """
    if not _DOMAIN_PATTERN.match(text):
        return False
    before = line[:start]
    return not (before.endswith('://') or before.endswith('@'))
