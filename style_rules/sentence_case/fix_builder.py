"""
Fix Builder
Turns a failing heading or bold span into a sentence-case rewrite and
passes it through the autofix safety gate.
"""

import logging
import re
from typing import Any, List, Mapping, Optional

from ..autofix.safety import SENTENCE_CASE, create_safe_fix_info
from ..services.terms_config_service import TermDictionary
from ..shared.heuristics import get_code_span_ranges, is_acronym, is_code_identifier, is_in_code_span
from ..shared.utils import strip_leading_decorations
from ..types import FixInfo
from .case_classifier import ACRONYM_PREFIX_PATTERN, MISSPELLED_ACRONYM_PATTERN, is_all_caps_heading

logger = logging.getLogger(__name__)

# Markup, links, versions, dates, emphasis and quotes pass through untouched
_PRESERVED = re.compile(
    r'`[^`]+`'
    r'|\[[^\]]+\]\([^)]+\)|\[[^\]]+\]'
    r'|\b(v?\d+\.\d+(?:\.\d+)?(?:-[a-zA-Z0-9.]+)?)\b'
    r'|\b(\d{4}-\d{2}-\d{2})\b'
    r'|(\*\*|__)(.*?)\3'
    r'|(\*|_)(.*?)\5'
    r'|"[^"]+"'
    r"|'[^']+'"
)
# Lowercasing a word that embeds a placeholder must not break restoring it
_PLACEHOLDER = re.compile(r'__P_(\d+)__', re.IGNORECASE)
_HEADING_PREFIX = re.compile(r'^(#{1,6})(\s+)(.*)$')
_WORD_PARTS = re.compile(r'^(\W*)(.*?)(\W*)$', re.DOTALL)
_SIMPLE_ACRONYM_PREFIX = re.compile(r'^([A-Z]{2,})(-[a-z].*)$')
_PROPER_NOUN_SHAPE = re.compile(r'^[A-Z][a-z]')


def _is_placeholder(word: str) -> bool:
    return bool(_PLACEHOLDER.fullmatch(word))


def _sentence_cased(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def _canonical(word: str, dictionary: TermDictionary) -> Optional[str]:
    """Dictionary casing for ``word`` with surrounding punctuation kept."""
    canonical = dictionary.get(word.lower())
    if canonical is not None:
        return canonical
    lead, core, trail = _WORD_PARTS.match(word).groups()
    if core and core != word:
        canonical = dictionary.get(core.lower())
        if canonical is not None:
            return f"{lead}{canonical}{trail}"
    return None


def _canonical_compound(word: str, dictionary: TermDictionary) -> Optional[str]:
    # macos/linux -> macOS/Linux, only when every part is a dictionary term
    if '/' not in word or '://' in word:
        return None
    parts = word.split('/')
    if not all(part.lower() in dictionary for part in parts):
        return None
    return '/'.join(dictionary.get(part.lower()) for part in parts)


def _case_first_word(word: str, dictionary: TermDictionary) -> str:
    compound = _canonical_compound(word, dictionary)
    if compound is not None:
        return compound

    if _SIMPLE_ACRONYM_PREFIX.match(word) or ACRONYM_PREFIX_PATTERN.match(word):
        return word

    if '-' in word:
        base, rest = word.split('-', 1)
        canonical = dictionary.get(base.lower())
        if canonical is not None:
            return f"{canonical}-{rest.lower()}"

    misspelled = MISSPELLED_ACRONYM_PATTERN.match(word)
    if misspelled and misspelled.group(1).lower() not in dictionary.hyphen_prefix_exemptions:
        return misspelled.group(1).upper() + misspelled.group(2)

    return _sentence_cased(word)


def _case_later_word(word: str, dictionary: TermDictionary, all_caps: bool) -> str:
    _, core, _ = _WORD_PARTS.match(word).groups()
    if core == 'I':
        return word
    if is_code_identifier(core, dictionary.camel_case_exemptions):
        return word
    # In an all-caps heading every word looks like an acronym
    if not all_caps and len(core) > 1 and is_acronym(core):
        return word
    return word.lower()


def to_sentence_case(text: str, dictionary: TermDictionary) -> Optional[str]:
    """
    Rewrite ``text`` in sentence case.

    Only the first word keeps a capital; leading emoji are skipped when
    looking for it. Dictionary terms take their canonical casing and
    multi-word dictionary phrases are replaced as a whole before single
    words are looked at. Later words keep the
    pronoun "I", code identifiers and short acronyms.

    Returns None when the text is already in sentence case or has no
    word that can be rewritten.

    Example:
        >>> to_sentence_case('Setting Up The api', get_default_term_dictionary())
        'Setting up the API'
    """
    if not text:
        return None

    preserved: List[str] = []

    def stash(value: str) -> str:
        preserved.append(value)
        return f"__P_{len(preserved) - 1}__"

    processed = _PRESERVED.sub(lambda m: stash(m.group(0)), text)
    for phrase in dictionary.phrases:
        processed = phrase.pattern.sub(lambda m, canonical=phrase.canonical: stash(canonical), processed)

    words = processed.split()
    if all(_is_placeholder(word) for word in words):
        return None

    all_caps = is_all_caps_heading([word for word in words if not _is_placeholder(word)])

    first_visible_cased = False
    fixed_words = []
    for word in words:
        if _is_placeholder(word):
            fixed_words.append(word)
            continue
        if not first_visible_cased and not strip_leading_decorations(word):
            fixed_words.append(word)
            continue

        lower = word.lower()
        if dictionary.is_ambiguous(lower):
            if not first_visible_cased:
                first_visible_cased = True
                fixed_words.append(_sentence_cased(word))
            elif _PROPER_NOUN_SHAPE.match(word):
                fixed_words.append(word)
            else:
                fixed_words.append(lower)
            continue

        canonical = _canonical(word, dictionary)
        if canonical is not None:
            first_visible_cased = True
            fixed_words.append(canonical)
            continue

        if not first_visible_cased:
            first_visible_cased = True
            fixed_words.append(_case_first_word(word, dictionary))
            continue

        fixed_words.append(_case_later_word(word, dictionary, all_caps))

    fixed = _PLACEHOLDER.sub(lambda m: preserved[int(m.group(1))], ' '.join(fixed_words))
    return None if fixed == text else fixed


def _gate_context(line: str, context: Optional[Mapping[str, Any]]) -> dict:
    gate_context = dict(context or {})
    gate_context['line'] = line
    return gate_context


def build_heading_fix(line: str, text: str, dictionary: TermDictionary,
                      safety_config: Optional[Mapping[str, Any]] = None,
                      context: Optional[Mapping[str, Any]] = None) -> Optional[FixInfo]:
    """
    Build the fix replacing ``text`` right after the heading marker.

    Returns None when the line is not a plain ``#`` heading, when the text
    does not sit right after the marker, when nothing changes, or when the
    safety gate holds the fix back.
    """
    match = _HEADING_PREFIX.match(line)
    if not match:
        return None

    prefix_length = len(match.group(1)) + len(match.group(2))
    if line[prefix_length:prefix_length + len(text)] != text:
        logger.debug(f"Heading text '{text}' not found after marker in line: {line!r}")
        return None

    fixed_text = to_sentence_case(text, dictionary)
    if not fixed_text:
        return None

    fix_info = FixInfo(column=prefix_length + 1, delete_count=len(text), insert_text=fixed_text)
    return create_safe_fix_info(fix_info, SENTENCE_CASE, text, fixed_text,
                                _gate_context(line, context), safety_config, dictionary)


def _find_bold_text(line: str, original_text: str) -> int:
    code_spans = get_code_span_ranges(line)
    needle = '**' + original_text
    index = line.find(needle)
    while index != -1:
        if not is_in_code_span(code_spans, index, index + len(needle)):
            return index + 2
        index = line.find(needle, index + 1)
    return -1


def build_bold_fix(line: str, original_text: str, fixed_text: str,
                   safety_config: Optional[Mapping[str, Any]] = None,
                   context: Optional[Mapping[str, Any]] = None,
                   dictionary: Optional[TermDictionary] = None,
                   start: Optional[int] = None) -> Optional[FixInfo]:
    """
    Build the fix replacing ``original_text`` inside a ``**`` span.

    ``start`` is the offset of the text within ``line``; the rule passes
    the offset of the span it validated. Without it the first span that
    starts with the text outside inline code is used. The span may
    continue past the text (``**Label: rest**``).
    """
    if start is None:
        start = _find_bold_text(line, original_text)
    if start < 0 or line[start:start + len(original_text)] != original_text:
        return None

    fix_info = FixInfo(column=start + 1, delete_count=len(original_text), insert_text=fixed_text)
    return create_safe_fix_info(fix_info, SENTENCE_CASE, original_text, fixed_text,
                                _gate_context(line, context), safety_config, dictionary)
