"""
Case Classifier
Decides whether heading text or bold list-item text follows sentence case.

Every function here is pure: it returns a ValidationResult and never
reports anything itself. Classification stops at the first problem found.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Set

from ..services.terms_config_service import TermDictionary
from ..shared.heuristics import is_acronym, is_code_identifier, is_preserved_placeholder, preserve_segments
from ..types import ValidationResult
from .token_extraction import find_first_validation_word, strip_leading_symbols

_CODE_EXTENSIONS = (
    r'js|mjs|cjs|ts|tsx|jsx|py|sh|bash|zsh|json|yaml|yml|md|txt|html|css|scss|less|xml|toml|ini|cfg|conf|'
    r'env|sql|rb|go|rs|java|kt|swift|c|cpp|h|hpp|php|pl|r|lua|vim|el|ex|exs|erl|hs|scala|clj|groovy|gradle|'
    r'make|cmake|dockerfile|gitignore|gitattributes|editorconfig|prettierrc|eslintrc|babelrc|nvmrc|npmrc'
)

FILENAME_PATTERN = re.compile(rf'^[a-zA-Z][-a-zA-Z0-9_.]*\.(?:{_CODE_EXTENSIONS})$', re.IGNORECASE)
FILE_PATH_PATTERN = re.compile(rf'^[a-zA-Z_.~][-a-zA-Z0-9_./]*\.(?:{_CODE_EXTENSIONS})$', re.IGNORECASE)

_HTML_TAG = re.compile(r'<[^>]+>')
_INLINE_CODE = re.compile(r'`[^`]+`')
_BRACKETED = re.compile(r'\[([^\]]+)\]')
_QUOTED_LEAD = re.compile(r'^["\'][^"\']+["\']\s+[a-z]')
_ALL_CAPS_FILENAME = re.compile(r'^[A-Z][A-Z0-9_-]*\.[a-zA-Z]+$')
_CODE_CONTENT = re.compile(r'`[^`]+`|\([A-Z0-9]+\)')
_NUMBERED_ITEM = re.compile(r'^\d+\.\s')
_FIELD_DOC = re.compile(r'^\w+\s*\((?:required|optional|deprecated|readonly|read-only)\)$', re.IGNORECASE)
_CLEANUP = re.compile(r'[#*~!+={}|:;"<>,.?\\]')
_NUMERIC_ONLY = re.compile(r'^\d+[\d./-]*$')
_NON_ALNUM = re.compile(r'[^a-zA-Z0-9]')
_LEADING_YEAR = re.compile(r'^\d{4}(?:\D|$)')
_CRITERION_ID = re.compile(r'^\d+[.)]\s*[a-z]\b')

ACRONYM_PREFIX_PATTERN = re.compile(r'^([A-Z]{2,4}(?:/[A-Z][a-z]+)?(?:/[A-Z]{2,})*)(-[a-z].*)$')
MISSPELLED_ACRONYM_PATTERN = re.compile(r'^([A-Z][a-z]{1,3})(-[a-z].*)$')

EM_DASH = '\u2014'

CONVENTIONAL_COMMIT_TYPES = frozenset([
    'feat', 'fix', 'docs', 'style', 'refactor', 'perf', 'test',
    'build', 'ci', 'chore', 'revert', 'wip', 'release',
])

# Section words that may stay capitalized mid-phrase in bold lead-ins
STRUCTURAL_SECTION_WORDS = frozenset([
    'Background', 'Context', 'Overview', 'Summary', 'Introduction', 'Conclusion',
    'Step', 'Part', 'Section', 'Appendix', 'Chapter', 'Notes', 'References',
])

_EMPHASIS_WORD = re.compile(r'^[A-Z]{2,}$')
_KEBAB_CASE = re.compile(r'^[a-z][a-z0-9]*(?:-[a-z0-9]+)+$')
_DIRECTORY = re.compile(r'^[a-zA-Z][-a-zA-Z0-9_.]*/\**$')
_BOLD_PROBLEM_WORDS = (
    re.compile(r'\b(?:CODE|LINK|ITALIC|BOLD)\b'),
    re.compile(r'\bTest\b'),
    re.compile(r'\bDate\b'),
    re.compile(r'\bVersion\b'),
)


@dataclass(frozen=True)
class PreparedText:
    cleaned_text: str
    text_without_markup: str
    processed: str
    words: List[str]
    had_leading_emoji: bool


def _sentence_cased(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def _lookup_key(word: str) -> str:
    return _NON_ALNUM.sub('', word).lower()


def _expected_casing(word: str, dictionary: TermDictionary) -> Optional[str]:
    return dictionary.get(word.lower()) or dictionary.get(_lookup_key(word))


def _is_ambiguous(word: str, dictionary: TermDictionary) -> bool:
    return dictionary.is_ambiguous(word.lower()) or dictionary.is_ambiguous(_lookup_key(word))


def should_exempt_from_validation(heading_text: str, text_without_markup: str) -> bool:
    """Heading-level exemptions checked before any word is looked at."""
    trimmed = heading_text.strip()
    if not trimmed:
        return True

    if trimmed.startswith('[') and trimmed.endswith(']'):
        return True

    # A quoted command followed by prose ('"npm test" fails silently')
    if _QUOTED_LEAD.match(trimmed):
        return True

    if not any(ch.isalpha() for ch in text_without_markup):
        return True

    if FILENAME_PATTERN.match(trimmed) or FILE_PATH_PATTERN.match(trimmed):
        return True

    # README.md guidelines, SKILL.md format
    first_word = trimmed.split()[0]
    if _ALL_CAPS_FILENAME.match(first_word):
        return True

    code_length = sum(len(m.group(0)) for m in _CODE_CONTENT.finditer(heading_text))
    if code_length > 0 and code_length / len(heading_text) > 0.4:
        return True

    if first_word.startswith('`') and first_word.endswith('`'):
        return True

    # Numbered headings are only exempt behind an emoji ("🔧 1. getting started")
    cleaned, had_leading = strip_leading_symbols(heading_text)
    if had_leading and _NUMBERED_ITEM.match(cleaned):
        return True

    return bool(_FIELD_DOC.match(trimmed))


def prepare_text_for_validation(heading_text: str) -> Optional[PreparedText]:
    """
    Clean heading text and split it into words.

    Returns None when the text is exempt or has nothing to validate.
    Markup is replaced by ``__PRESERVED_N__`` tokens and punctuation by
    spaces before splitting.
    """
    text_without_html = _HTML_TAG.sub('', heading_text).strip()
    text_without_markup = _BRACKETED.sub(r'\1', _INLINE_CODE.sub('', text_without_html))

    if should_exempt_from_validation(text_without_html, text_without_markup):
        return None

    cleaned_text, had_leading_emoji = strip_leading_symbols(text_without_html)
    if not cleaned_text:
        return None

    processed = preserve_segments(cleaned_text).processed
    clean = _CLEANUP.sub(' ', processed).strip()
    if not clean or _NUMERIC_ONLY.match(clean):
        return None

    words = clean.split()
    if all(is_preserved_placeholder(word) for word in words):
        return None
    if find_first_validation_word(words) == -1:
        return None

    return PreparedText(cleaned_text, text_without_markup, processed, words, had_leading_emoji)


def get_proper_phrase_indices(words: List[str], dictionary: TermDictionary) -> Set[int]:
    """Indices of words that belong to a multi-word dictionary phrase."""
    indices: Set[int] = set()
    lower_words = [word.lower() for word in words]
    for phrase in dictionary.phrases:
        parts = phrase.key.split(' ')
        for i in range(len(lower_words) - len(parts) + 1):
            if lower_words[i:i + len(parts)] == parts:
                indices.update(range(i, i + len(parts)))
    return indices


def validate_proper_phrases(text: str, dictionary: TermDictionary) -> Optional[ValidationResult]:
    for phrase in dictionary.phrases:
        match = phrase.pattern.search(text)
        if match and match.group(0) != phrase.canonical:
            return ValidationResult.invalid(f'Phrase "{match.group(0)}" should be "{phrase.canonical}".')
    return None


def is_all_caps_heading(words: List[str]) -> bool:
    """
    True when every word longer than one character is uppercase.

    Placeholders and words without letters are ignored. Headings with
    digits or with a single relevant word are never all caps.
    """
    relevant = [
        word for word in words
        if len(word) > 1 and not is_preserved_placeholder(word) and any(ch.isalpha() for ch in word)
    ]
    if len(relevant) < 2:
        return False
    if any(ch.isdigit() for word in relevant for ch in word):
        return False
    return all(word.isupper() for word in relevant)


def _check_known_casing(word: str, expected: str) -> bool:
    # (TCO) is accepted for TCO
    return word == expected or word.replace('(', '').replace(')', '') == expected


def validate_first_word(first_word: str, first_index: int, phrase_ignore: Set[int],
                        dictionary: TermDictionary, heading_text: str,
                        had_leading_emoji: bool, bold: bool = False) -> ValidationResult:
    """Check the word that carries the sentence-initial capital."""
    lower = first_word.lower()
    expected = dictionary.get(lower)

    if _is_ambiguous(first_word, dictionary):
        return ValidationResult.valid()

    if first_word[:1].isdigit() or _LEADING_YEAR.match(heading_text):
        return ValidationResult.valid()

    # "1.a Scope" splits into "1" and "a"; the letter belongs to the numbering
    if _CRITERION_ID.match(heading_text) and len(first_word) == 1:
        return ValidationResult.valid()

    if first_index in phrase_ignore or is_preserved_placeholder(first_word):
        return ValidationResult.valid()

    if expected:
        if not _check_known_casing(first_word, expected):
            return ValidationResult.invalid(f'First word "{first_word}" should be "{expected}".')
        return ValidationResult.valid()

    if '/' in first_word and '://' not in first_word:
        # macOS/Linux: every part must be a known term to be checked here
        parts = first_word.split('/')
        if all(part.lower() in dictionary for part in parts):
            if all(part == dictionary.get(part.lower()) for part in parts):
                return ValidationResult.valid()
            corrected = '/'.join(dictionary.get(part.lower()) or part for part in parts)
            return ValidationResult.invalid(f'First word "{first_word}" should be "{corrected}".')
        return ValidationResult.valid()

    hyphen_expected = dictionary.get(lower.split('-')[0])
    if '-' in first_word and hyphen_expected:
        corrected = hyphen_expected + first_word[len(hyphen_expected):]
        if first_word != corrected:
            return ValidationResult.invalid(f'First word "{first_word}" should be "{corrected}".')
        return ValidationResult.valid()

    if ACRONYM_PREFIX_PATTERN.match(first_word):
        return ValidationResult.valid()

    misspelled = MISSPELLED_ACRONYM_PATTERN.match(first_word)
    if misspelled:
        prefix = misspelled.group(1)
        if prefix.lower() not in dictionary.hyphen_prefix_exemptions:
            return ValidationResult.invalid(
                f'First word "{first_word}" should be "{prefix.upper()}{misspelled.group(2)}".')

    expected_case = _sentence_cased(first_word)
    if first_word == expected_case:
        return ValidationResult.valid()
    if is_acronym(first_word):
        return ValidationResult.valid()
    if bold and first_word == lower:
        # Bold lead-ins are often phrase fragments ("**the API Gateway**")
        return ValidationResult.valid()
    if had_leading_emoji:
        return ValidationResult.invalid(f'First word "{first_word}" should be "{expected_case}".')
    if is_code_identifier(first_word, dictionary.camel_case_exemptions):
        return ValidationResult.valid()
    if bold:
        return ValidationResult.invalid(f'First word "{first_word}" in bold text should be properly capitalized.')
    return ValidationResult.invalid("Heading's first word should be capitalized.")


def _starts_secondary_sentence(word: str, word_pos: int, marker_index: int, heading_text: str,
                               expected: Optional[str]) -> bool:
    # Re-capitalization after ":", an em dash or "&" is tolerated when still well-formed
    if marker_index == -1 or word_pos <= marker_index:
        return False
    if not heading_text[marker_index + 1:].lstrip().startswith(word):
        return False
    if expected:
        return word == expected
    return word == _sentence_cased(word) or is_acronym(word)


def _in_parentheses(word: str, heading_text: str) -> bool:
    if f'({word})' in heading_text:
        return True
    open_index = heading_text.find('(')
    close_index = heading_text.find(')')
    if open_index == -1 or close_index == -1:
        return False
    return word in heading_text[open_index:close_index + 1]


def validate_subsequent_words(words: List[str], start_index: int, phrase_ignore: Set[int],
                              dictionary: TermDictionary, heading_text: str) -> ValidationResult:
    """Check every word after the first; all of them must be lowercase unless exempt."""
    colon_index = heading_text.find(':')
    em_dash_index = heading_text.find(EM_DASH)
    ampersand_index = heading_text.find('&')

    for i in range(start_index + 1, len(words)):
        if i in phrase_ignore:
            continue

        word = words[i]
        lower = word.lower()
        expected = _expected_casing(word, dictionary)

        if _is_ambiguous(word, dictionary):
            continue
        if '__PRESERVED_' in word:
            continue
        # Patel's
        if word.endswith("'s") or word.endswith('\u2019s'):
            continue

        word_pos = heading_text.find(word)
        if any(_starts_secondary_sentence(word, word_pos, marker, heading_text, expected)
               for marker in (colon_index, em_dash_index, ampersand_index)):
            continue

        if _in_parentheses(word, heading_text):
            continue

        if expected and not _check_known_casing(word, expected):
            if not (expected == 'Markdown' and lower == 'markdown'):
                return ValidationResult.invalid(f'Word "{word}" should be "{expected}".')

        if '-' in word:
            if ACRONYM_PREFIX_PATTERN.match(word):
                continue
            parts = word.split('-')
            known_first = dictionary.get(parts[0].lower())
            if known_first and parts[0] == known_first and all(p == p.lower() for p in parts[1:]):
                continue
            if parts[1] != parts[1].lower():
                return ValidationResult.invalid(f'Word "{parts[1]}" in heading should be lowercase.')

        # LICENSE from "LICENSE.md" after dots were cleaned away
        if len(word) > 1 and word == word.upper():
            if re.search(rf'\b{re.escape(word)}\.[a-zA-Z]+\b', heading_text):
                continue

        if (word != lower
                and not is_acronym(word)
                and word != 'I'
                and not expected
                and not is_code_identifier(word, dictionary.camel_case_exemptions)):
            return ValidationResult.invalid(f'Word "{word}" in heading should be lowercase.')

    return ValidationResult.valid()


def validate_heading(heading_text: str, dictionary: TermDictionary) -> ValidationResult:
    """
    Validate heading text for sentence case.

    Phrase-level problems are reported first, then all caps, then the
    first word, then the remaining words. ``cleaned_text`` on the result
    is the heading without leading emoji, for error context.

    Example:
        >>> validate_heading('This Is Title Case', dictionary).error_message
        'Word "Is" in heading should be lowercase.'
    """
    if not isinstance(heading_text, str):
        return ValidationResult.valid()

    prepared = prepare_text_for_validation(heading_text)
    if prepared is None:
        return ValidationResult.valid()

    cleaned_text = prepared.cleaned_text
    phrase_result = validate_proper_phrases(cleaned_text, dictionary)
    if phrase_result is not None:
        return ValidationResult.invalid(phrase_result.error_message, cleaned_text)

    words = prepared.words
    if is_all_caps_heading(words):
        return ValidationResult.invalid('Heading should not be in all caps.', cleaned_text)

    first_index = find_first_validation_word(words)
    phrase_ignore = get_proper_phrase_indices(words, dictionary)
    result = validate_first_word(words[first_index], first_index, phrase_ignore, dictionary,
                                 cleaned_text, prepared.had_leading_emoji)
    if result.is_valid:
        result = validate_subsequent_words(words, first_index, phrase_ignore, dictionary, cleaned_text)

    if result.is_valid:
        return ValidationResult.valid(cleaned_text)
    return ValidationResult.invalid(result.error_message, cleaned_text)


def _is_exempt_bold_text(trimmed: str) -> bool:
    return (
        trimmed.lower() in CONVENTIONAL_COMMIT_TYPES
        # **NEVER**, **WARNING**
        or bool(_EMPHASIS_WORD.match(trimmed))
        or bool(_KEBAB_CASE.match(trimmed))
        or bool(_DIRECTORY.match(trimmed))
        or bool(FILENAME_PATTERN.match(trimmed))
    )


def _find_problem_word(bold_text: str) -> Optional[str]:
    for raw in bold_text.split()[1:]:
        word = re.sub(r'[^a-zA-Z]', '', raw)
        if len(word) <= 1:
            continue
        if any(pattern.search(word) for pattern in _BOLD_PROBLEM_WORDS):
            return word
    return None


def _validate_bold_words(words: List[str], first_index: int, phrase_ignore: Set[int],
                         dictionary: TermDictionary) -> ValidationResult:
    for i in range(first_index + 1, len(words)):
        if i in phrase_ignore:
            continue

        word = words[i]
        expected = _expected_casing(word, dictionary)

        if _is_ambiguous(word, dictionary):
            continue
        if '__PRESERVED_' in word:
            continue
        if word.endswith("'s") or word.endswith('\u2019s'):
            continue
        # "Part B"
        if len(word) == 1:
            continue

        if expected:
            if not _check_known_casing(word, expected):
                return ValidationResult.invalid(f'Word "{word}" should be "{expected}".')
        elif word != 'I' and not is_acronym(word) and word not in STRUCTURAL_SECTION_WORDS:
            if word.isupper():
                return ValidationResult.invalid(f'Word "{word}" in bold text should not be in all caps.')
            if word != word.lower():
                return ValidationResult.invalid(f'Word "{word}" in bold text should be lowercase.')

        if '-' in word:
            parts = word.split('-')
            if parts[1] != parts[1].lower():
                return ValidationResult.invalid(f'Word "{parts[1]}" in bold text should be lowercase.')

    return ValidationResult.valid()


def validate_bold_text(bold_text: str, dictionary: TermDictionary) -> ValidationResult:
    """
    Validate bold list-item text with the stricter bold ruleset.

    Only dictionary terms, short acronyms, ``I`` and structural section
    words may be capitalized after the first word. An all-lowercase first
    word is accepted.
    """
    if not isinstance(bold_text, str) or not bold_text.strip():
        return ValidationResult.valid()

    trimmed = bold_text.strip()
    if _is_exempt_bold_text(trimmed):
        return ValidationResult.valid()

    problem_word = _find_problem_word(bold_text)
    if problem_word:
        return ValidationResult.invalid(f'Word "{problem_word}" in bold text should be lowercase.')

    prepared = prepare_text_for_validation(bold_text)
    if prepared is None:
        return ValidationResult.valid()

    cleaned_text = prepared.cleaned_text
    phrase_result = validate_proper_phrases(cleaned_text, dictionary)
    if phrase_result is not None:
        return ValidationResult.invalid(phrase_result.error_message, cleaned_text)

    words = prepared.words
    if is_all_caps_heading(words):
        return ValidationResult.invalid('Bold text should not be in all caps.', cleaned_text)

    first_index = find_first_validation_word(words)
    phrase_ignore = get_proper_phrase_indices(words, dictionary)
    # "**2 quick wins**": a leading number lifts the first-word rule
    starts_with_number = first_index > 0 and words[0][:1].isdigit()
    if not starts_with_number:
        result = validate_first_word(words[first_index], first_index, phrase_ignore, dictionary,
                                     cleaned_text, prepared.had_leading_emoji, bold=True)
        if not result.is_valid:
            return ValidationResult.invalid(result.error_message, cleaned_text)

    result = _validate_bold_words(words, first_index, phrase_ignore, dictionary)
    if result.is_valid:
        return ValidationResult.valid(cleaned_text)
    return ValidationResult.invalid(result.error_message, cleaned_text)
