"""
Code Patterns
Ordered bank of code-like patterns (paths, commands, flags, identifiers)
and the false-positive guards that keep prose from being flagged.

Every line is scanned by each pattern in order. The first pattern that
claims a span wins; later matches overlapping a claimed span are dropped.
URLs and bare ``$var`` usages claim their span without being reported.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import AbstractSet, Callable, FrozenSet, List, Optional, Pattern, Sequence, Tuple

from ..services.terms_config_service import get_terms_config
from ..shared.heuristics import (
    CODE_IDENTIFIER_PATTERNS, MC_MAC_NAME_PATTERN, get_code_span_ranges, is_domain_in_prose, is_in_code_span,
)
from ..types import CodeElementCategory, CodeElementMatch

# Words after "import" that make it prose ("import the data")
_IMPORT_STOP_WORDS = (
    'the|a|an|your|my|our|their|its|some|all|any|this|that|these|those|from|into|to|new|old|more|them|it|'
    'something|everything|anything|nothing|system|systems|updates|path|paths|is|are|was|were|will|be|data|'
    'files|modules|packages|settings|config|options|rules|code|process|other|changes|and|or|statements|'
    'functions|classes|types|errors|values|items|records|content|text|names|custom|external|internal|local|'
    'global|default|specific|relevant|existing|additional|required|necessary|important|direct|proper'
)

_URL_PREFIX = re.compile(r'^(?:https?|ftp|ftps|file)://', re.IGNORECASE)
_MARKDOWN_LINK = re.compile(r'!?\[[^\]]*\]\([^)]*\)')
_WIKI_LINK = re.compile(r'!?\[\[[^\]]+\]\]')
_HTML_COMMENT = re.compile(r'<!--.*?-->')
_EMAIL = re.compile(r'[\w.+-]+@[\w-]+(?:\.[\w-]+)+', re.ASCII)
_INLINE_MATH = re.compile(r'\$([^$]+?)\$')
_BLOCK_MATH = re.compile(r'\$\$(?:[^$]|\$[^$])*\$\$')
_LATEX_COMMAND = re.compile(r'\\(?:sum|frac|int|lim|sqrt|sin|cos|log|alpha|beta|gamma|delta|theta|pi|sigma)\b')
_PLAIN_NUMBER = re.compile(r'^\d+(?:\.\d+)?$')

_DOTTED_NAME = re.compile(r'^\.[\w.-]+$', re.ASCII)
_DOC_EXTENSION = re.compile(r'^\.(?:docx?|pdf|xlsx?|pptx?|odt|ods|odp|rtf|txt|csv)$', re.IGNORECASE)
_WORD_THEN_SPACE = re.compile(r'\w\s+$')
_COUNTRY_ABBREVIATION = re.compile(r'^[A-Z]\.[A-Z]\.?$', re.IGNORECASE)
_F_STOP = re.compile(r'^f/\d+(?:\.\d+)?$', re.IGNORECASE)
_TIME = re.compile(r'^(?:AM|PM|am|pm)?-?\d+-?\d*:\d+$')
_TIME_RANGE = re.compile(r'^\d+-\d+:\d+$')
_SNAKE_CASE = CODE_IDENTIFIER_PATTERNS['snake_case']
_DATE_IDENTIFIER = re.compile(r'^\d{4}_\d{2}_\d{2}$|_\d{4}_\d{2}_\d{2}$')
_PAREN_VERSION = re.compile(r'^v?\d+(?:\.\d+)*(?:\+|\.\d+)*$|^[A-Za-z]+\s+\d+(?:\.\d+)*\+?$')
_PLURAL_MARKER = re.compile(r'^\w+\([a-z]\)$')

_SENTENCE_BOUNDARY_SHAPE = re.compile(r'^[a-z]+\.[A-Z][a-z]*$')
_SENTENCE_END = re.compile(r'[.!?]\s+$')
_LOWERCASE_CONTINUATION = re.compile(r'^\s+[a-z]')

_NUMERIC_SEGMENT = re.compile(r'^\d+$')
_HAS_EXTENSION = re.compile(r'\.[^/]+$')
_RELATIVE_OR_ROOTED = re.compile(r'^(?:\.\.?/|/|~/)')
_UPPER_SEGMENT = re.compile(r'^[A-Z]+$')


@dataclass(frozen=True)
class CodePattern:
    """One entry of the pattern bank."""
    name: str
    regex: Pattern
    category: CodeElementCategory
    path_like: bool = False
    reported: bool = True


def _compile(pattern: str) -> Pattern:
    return re.compile(pattern, re.ASCII)


PATTERN_BANK: Tuple[CodePattern, ...] = (
    CodePattern('url', _compile(r"\b(?:https?|ftp|ftps|file)://[\w\-._~:/?#\[\]@!$&'()*+,;=%]+"),
                CodeElementCategory.URL, reported=False),
    # "grep $pattern", "export PATH=$HOME" are reported whole
    CodePattern('shell_command', _compile(r'\b(?:grep|export)\s+(?:-\w+\s+)*(?:\w+=)?\$\w+'),
                CodeElementCategory.SHELL_ASSIGNMENT),
    CodePattern('absolute_path', _compile(r'(?:^|(?<=\s))/(?:[\w.-]+/)*[\w.-]+(?=\s|$)'),
                CodeElementCategory.FILE_PATH, path_like=True),
    CodePattern('path', _compile(r'\b(?:\.?/?[\w.-]+/)+[\w.-]+\b'),
                CodeElementCategory.FILE_PATH, path_like=True),
    CodePattern('filename', _compile(r'\b(?=[^\d\s])[\w.-]*[a-zA-Z][\w.-]*\.[a-zA-Z0-9]{1,5}\b'),
                CodeElementCategory.FILENAME),
    CodePattern('function_call', _compile(r'\b[a-zA-Z][\w.-]*\([^)]*\)'),
                CodeElementCategory.FUNCTION_CALL),
    CodePattern('dotfile', _compile(r'\B\.[\w.-]+\b(?!/)'),
                CodeElementCategory.DOTFILE),
    CodePattern('shell_assignment', _compile(r'\b(?:export|set)\s+[A-Za-z_][\w.-]*=\$?[\w.-]+\b'),
                CodeElementCategory.SHELL_ASSIGNMENT),
    CodePattern('env_var', _compile(r'\b[A-Z][A-Z0-9]*_[A-Z0-9_]+\b'),
                CodeElementCategory.ENV_VAR),
    CodePattern('env_name', _compile(r'\b(?:PATH|HOME|TEMP|TMPDIR|USER|SHELL|PORT|HOST)\b'),
                CodeElementCategory.ENV_VAR),
    CodePattern('cli_flag', _compile(r'\B--?[a-zA-Z][\w-]*\b'),
                CodeElementCategory.CLI_FLAG),
    CodePattern('js_package_command', _compile(
        r'\b(?:npm|yarn|pnpm)\s+(?:install|i|run|start|test|build|init|publish|link|unlink|update|add|remove|'
        r'exec|create|ci|audit|outdated|ls|list|version|pack|cache|config|set|get)\b'),
        CodeElementCategory.CLI_COMMAND),
    CodePattern('git_command', _compile(
        r'\bgit\s+(?:clone|commit|push|pull|fetch|checkout|branch|merge|rebase|status|log|diff|add|rm|mv|reset|'
        r'stash|tag|remote|init|config|show|blame|bisect|cherry-pick|revert|clean|gc|prune|reflog)\b'),
        CodeElementCategory.CLI_COMMAND),
    CodePattern('pip_command', _compile(
        r'\b(?:pip|pip3)\s+(?:install|uninstall|freeze|list|show|search|download|wheel|hash|check|config|'
        r'cache|debug)\b'),
        CodeElementCategory.CLI_COMMAND),
    CodePattern('docker_command', _compile(
        r'\bdocker\s+(?:run|build|push|pull|exec|ps|images|logs|stop|start|rm|rmi|compose|network|volume|'
        r'system|inspect|tag|login|logout)\b'),
        CodeElementCategory.CLI_COMMAND),
    CodePattern('brew_command', _compile(
        r'\bbrew\s+(?:install|uninstall|update|upgrade|search|list|info|doctor|cleanup|tap|untap|services|'
        r'cask)\b'),
        CodeElementCategory.CLI_COMMAND),
    CodePattern('cargo_command', _compile(
        r'\bcargo\s+(?:build|run|test|bench|check|clean|doc|new|init|add|remove|update|publish|install|'
        r'uninstall|search|tree|fmt|clippy)\b'),
        CodeElementCategory.CLI_COMMAND),
    CodePattern('import_statement', _compile(rf'\bimport\s+(?!(?:{_IMPORT_STOP_WORDS})\b)\w+'),
                CodeElementCategory.IMPORT_STATEMENT),
    # Not "1:10" verse references, not "4.5:1" contrast ratios
    CodePattern('host_port', _compile(r'\b(?!\d+:\d+\b)(?<!\d\.)[\w.-]+:(?!1\b)\d+\b'),
                CodeElementCategory.HOST_PORT),
    CodePattern('key_combo', _compile(r'\b[A-Z]+\+[A-Z]\b'),
                CodeElementCategory.KEY_COMBO),
    # Not prices such as $50 or $19.99
    CodePattern('shell_var', _compile(r'\$(?!\d{2,}(?:\.\d*)?\b|\d\.\d+)\S+'),
                CodeElementCategory.SHELL_VAR, reported=False),
    CodePattern('snake_case', _compile(r'\b_?[a-z][a-z0-9]*(?:_[a-z0-9]+)+\b'),
                CodeElementCategory.IDENTIFIER),
    CodePattern('camel_case', _compile(r'\b[a-z][a-z0-9]*[A-Z][a-zA-Z0-9]*\b'),
                CodeElementCategory.IDENTIFIER),
)

# Off by default: brand names (CrowdStrike, OpenAI) look PascalCase too
PASCAL_CASE_PATTERN = CodePattern(
    'pascal_case', _compile(r'\b[A-Z](?=[a-zA-Z0-9]*[A-Z])[a-zA-Z0-9]*[a-z][a-zA-Z0-9]*\b'),
    CodeElementCategory.IDENTIFIER,
)


@dataclass(frozen=True)
class BacktickVocabulary:
    """Word lists consulted by the false-positive guards."""
    ignored_terms: FrozenSet[str]
    option_patterns: FrozenSet[str]
    conceptual_words: FrozenSet[str]
    directory_prefixes: FrozenSet[str]
    prose_list_words: FrozenSet[str]
    sentence_starters: FrozenSet[str]
    camel_case_exemptions: FrozenSet[str]
    snake_case_exemptions: FrozenSet[str]


@lru_cache(maxsize=1)
def get_backtick_vocabulary() -> BacktickVocabulary:
    service = get_terms_config()
    return BacktickVocabulary(
        ignored_terms=service.get_backtick_ignored_terms(),
        option_patterns=service.get_option_patterns(),
        conceptual_words=frozenset(w.lower() for w in service.get_conceptual_words()),
        directory_prefixes=frozenset(w.lower() for w in service.get_directory_prefixes()),
        prose_list_words=frozenset(w.lower() for w in service.get_prose_list_words()),
        sentence_starters=service.get_sentence_starters(),
        camel_case_exemptions=frozenset(service.get_camel_case_exemptions()),
        snake_case_exemptions=frozenset(service.get_snake_case_exemptions()),
    )


# === PATH HEURISTICS ===

def is_likely_file_path(text: str, vocabulary: Optional[BacktickVocabulary] = None) -> bool:
    """
    Decide whether slash-containing text is a real path rather than prose
    such as "read/write", "Heavy/Moderate/Light" or "tests/lints/quality".
    """
    vocabulary = vocabulary or get_backtick_vocabulary()
    if '/' not in text or re.search(r'\s', text):
        return False

    segments = text.split('/')
    if all(_NUMERIC_SEGMENT.match(s) or s == '' for s in segments):
        return False

    if text.lower() in vocabulary.option_patterns:
        return False

    if len(segments) >= 2:
        # Capitalized option sets: Essential/Useful/Nice-to-have, Data/API
        if all(s[:1].isupper() and s[:1].isascii() for s in segments):
            if len(segments) >= 3 or any('-' in s for s in segments) or all(len(s) <= 8 for s in segments):
                return False
        # GIVEN/WHEN/THEN
        if all(_UPPER_SEGMENT.match(s) for s in segments):
            return False

    last_has_extension = bool(_HAS_EXTENSION.search(segments[-1]))
    if len(segments) == 2 and not last_has_extension:
        first, second = segments
        if len(first) <= 2 or len(second) <= 2:
            return False
        if first.lower() in vocabulary.conceptual_words and second.lower() in vocabulary.conceptual_words:
            return False
        if first.lower() not in vocabulary.directory_prefixes and not _RELATIVE_OR_ROOTED.match(text):
            return False

    prose_count = sum(1 for s in segments if s.lower() in vocabulary.prose_list_words)
    if prose_count == len(segments):
        return False
    if prose_count >= len(segments) - 1 and not last_has_extension:
        return False

    return bool(re.search(r'[a-zA-Z]', text))


def is_sentence_boundary(text: str, line: str, start: int,
                         vocabulary: Optional[BacktickVocabulary] = None) -> bool:
    """True for "word.Word" shapes that are two sentences run together."""
    if not _SENTENCE_BOUNDARY_SHAPE.match(text):
        return False
    vocabulary = vocabulary or get_backtick_vocabulary()

    before = line[:start]
    if not _SENTENCE_END.search(before) and before.strip():
        return False

    after_period = text.split('.', 1)[1]
    if after_period in vocabulary.sentence_starters:
        return True
    return bool(_LOWERCASE_CONTINUATION.match(line[start + len(text):]))


def trim_url_trailing_punctuation(url: str) -> str:
    """
    Drop sentence punctuation, emphasis markers and unbalanced closing
    parentheses from the end of a URL.
    """
    open_parens = url.count('(')
    close_parens = url.count(')')
    trimmed = url
    while trimmed:
        last = trimmed[-1]
        if last in '.,:;!?*_':
            trimmed = trimmed[:-1]
        elif last == ')' and close_parens > open_parens:
            trimmed = trimmed[:-1]
            close_parens -= 1
        else:
            break
    return trimmed


# === CONTEXT GUARDS ===

def _within(pattern: Pattern, line: str, start: int, end: int) -> bool:
    return any(start >= m.start() and end <= m.end() for m in pattern.finditer(line))


def in_markdown_link(line: str, start: int, end: int) -> bool:
    return _within(_MARKDOWN_LINK, line, start, end) or _within(_WIKI_LINK, line, start, end)


def in_html_comment(line: str, start: int, end: int) -> bool:
    return _within(_HTML_COMMENT, line, start, end)


def in_email_address(line: str, start: int, end: int) -> bool:
    return '@' in line and _within(_EMAIL, line, start, end)


def _is_math_like(content: str) -> bool:
    return bool(
        re.search(r'[\\{}^_]', content)
        or re.search(r'[a-zA-Z][+\-*/=<> ]', content)
        or re.search(r' [+\-*/=] ', content)
        or not _PLAIN_NUMBER.match(content.strip())
    )


def in_latex_math(line: str, start: int, end: int) -> bool:
    """Inline ``$...$`` math, single-line ``$$...$$`` math, or a line using LaTeX commands."""
    for match in _INLINE_MATH.finditer(line):
        if _is_math_like(match.group(1)) and start >= match.start() and end <= match.end():
            return True
    if _within(_BLOCK_MATH, line, start, end):
        return True
    return bool(_LATEX_COMMAND.search(line))


def _is_email_local_part(text: str, line: str, start: int, end: int) -> bool:
    if not _SNAKE_CASE.match(text):
        return False
    if end < len(line) and line[end] == '@':
        return True
    return start > 0 and line[start - 1] == '<' and '@' in line[end:]


def _is_version_in_parentheses(text: str, line: str, start: int, end: int) -> bool:
    if start == 0 or end >= len(line):
        return False
    return line[start - 1] == '(' and line[end] == ')' and bool(_PAREN_VERSION.match(text))


def _is_document_extension(text: str, line: str, start: int) -> bool:
    # "Template .docx": an extension trailing a filename that contains spaces
    return (start > 0 and bool(_DOTTED_NAME.match(text))
            and bool(_WORD_THEN_SPACE.search(line[:start])) and bool(_DOC_EXTENSION.match(text)))


def _is_false_positive(text: str, line: str, start: int, end: int, code_spans,
                       ignored_terms: AbstractSet[str], vocabulary: BacktickVocabulary) -> bool:
    """Guards applied to every candidate, in order. True means drop it."""
    if _is_document_extension(text, line, start):
        return True
    if is_in_code_span(code_spans, start, end):
        return True
    if in_markdown_link(line, start, end) or in_html_comment(line, start, end):
        return True
    if _COUNTRY_ABBREVIATION.match(text) or _F_STOP.match(text):
        return True
    if _TIME.match(text) or _TIME_RANGE.match(text):
        return True
    if text in ignored_terms or text in vocabulary.snake_case_exemptions:
        return True
    if _is_email_local_part(text, line, start, end) or in_email_address(line, start, end):
        return True
    if _DATE_IDENTIFIER.search(text):
        return True
    if text in vocabulary.camel_case_exemptions or MC_MAC_NAME_PATTERN.match(text):
        return True
    if is_domain_in_prose(text, line, start):
        return True
    if _is_version_in_parentheses(text, line, start, end):
        return True
    if _PLURAL_MARKER.match(text):
        return True
    if in_latex_math(line, start, end):
        return True
    if is_sentence_boundary(text, line, start, vocabulary):
        return True
    return False


def find_code_elements(line: str, ignored_terms: AbstractSet[str] = frozenset(),
                       detect_pascal_case: bool = False,
                       vocabulary: Optional[BacktickVocabulary] = None) -> List[CodeElementMatch]:
    """
    Find unwrapped code-like elements in one line of prose.

    ``ignored_terms`` extends the default ignore list. Matches come back in
    pattern-bank order; no two matches overlap.

    Example:
        >>> [m.text for m in find_code_elements('Run npm install to set up.')]
        ['npm install']
    """
    if not isinstance(line, str) or not line.strip():
        return []

    vocabulary = vocabulary or get_backtick_vocabulary()
    all_ignored = vocabulary.ignored_terms | frozenset(ignored_terms)
    code_spans = get_code_span_ranges(line)
    bank: Sequence[CodePattern] = PATTERN_BANK + (PASCAL_CASE_PATTERN,) if detect_pascal_case else PATTERN_BANK

    claimed: List[Tuple[int, int]] = []
    matches: List[CodeElementMatch] = []

    for code_pattern in bank:
        for match in code_pattern.regex.finditer(line):
            text = match.group(0)
            start = match.start()
            if _URL_PREFIX.match(text):
                text = trim_url_trailing_punctuation(text)
            end = start + len(text)
            if not text:
                continue

            if any(start < claimed_end and end > claimed_start for claimed_start, claimed_end in claimed):
                continue
            if code_pattern.path_like and not is_likely_file_path(text, vocabulary):
                continue
            if code_pattern.reported and _is_false_positive(
                    text, line, start, end, code_spans, all_ignored, vocabulary):
                continue

            claimed.append((start, end))
            if code_pattern.reported:
                matches.append(CodeElementMatch(text, start, end, _refine_category(code_pattern.category, text)))

    return matches


def _refine_category(category: CodeElementCategory, text: str) -> CodeElementCategory:
    if category == CodeElementCategory.FILE_PATH and not re.search(r'\.[a-zA-Z0-9]+$', text):
        return CodeElementCategory.DIRECTORY_PATH
    return category


# === MESSAGES ===

_COMMAND_PREFIX = re.compile(
    r'^(?:git|npm|pip|yarn|docker|brew|cargo|pnpm|curl|wget|ssh|scp|rsync|grep|sed|awk|find|ls|cd|mkdir|rm|cp|'
    r'mv|chmod|chown|sudo|su|ps|top|htop|kill|killall|systemctl|service|crontab|tar|gzip|zip|unzip|cat|head|'
    r'tail|less|more|vim|nano|emacs|code|ping|traceroute|nslookup|dig|netstat|ss)\s'
)
_BARE_FILENAME = re.compile(r'^[a-zA-Z0-9._-]+\.[a-zA-Z0-9]{1,5}$')
_WCAG_RATIO = re.compile(r'^\d+(?:\.\d+)?:1$')
_TIME_SUFFIX = re.compile(r'(?:AM|PM)?-\d{1,2}:\d{2}$', re.IGNORECASE)
_HOST_PORT = re.compile(r'^[A-Za-z0-9.-]+:\d+$')

MessageRule = Tuple[Callable[[str, str], bool], str]

MESSAGE_RULES: Tuple[MessageRule, ...] = (
    (lambda text, line: bool(_COMMAND_PREFIX.match(text)),
     "Command '{text}' should be wrapped in backticks to distinguish it from regular text"),
    (lambda text, line: '$' in text and ('grep' in text or 'export' in text or 'set' in text),
     "Shell command '{text}' should be wrapped in backticks to show it's a code example"),
    (lambda text, line: '/' in text and bool(re.search(r'\.[a-zA-Z0-9]+$', text)),
     "File path '{text}' should be wrapped in backticks for clarity and to distinguish it from regular text"),
    (lambda text, line: text.endswith('/'),
     "Directory path '{text}' should be wrapped in backticks to show it's a file system location"),
    (lambda text, line: '/' in text,
     "Path '{text}' should be wrapped in backticks to indicate it's a file system reference"),
    (lambda text, line: bool(_BARE_FILENAME.match(text)) and not is_sentence_boundary(text, line, max(line.find(text), 0)),
     "Filename '{text}' should be wrapped in backticks to distinguish it from regular text"),
    (lambda text, line: bool(re.match(r'^\.[a-zA-Z]', text)),
     "Configuration file '{text}' should be wrapped in backticks to show it's a filename"),
    (lambda text, line: bool(re.match(r'^[A-Z][A-Z0-9]*_[A-Z0-9_]+$', text)),
     "Environment variable '{text}' should be wrapped in backticks to indicate it's a system variable"),
    (lambda text, line: bool(re.match(r'^(?:PATH|HOME|TEMP|TMPDIR|USER|SHELL|PORT|HOST)$', text)),
     "Environment variable '{text}' should be wrapped in backticks to indicate it's a system variable"),
    (lambda text, line: text.startswith('$'),
     "Shell variable '{text}' should be wrapped in backticks to show it's a variable reference"),
    (lambda text, line: bool(re.match(r'^--?[a-zA-Z]', text)),
     "Command flag '{text}' should be wrapped in backticks to show it's a command option"),
    (lambda text, line: bool(re.search(r'\([^)]*\)$', text)) and not _PLURAL_MARKER.match(text),
     "Function call '{text}' should be wrapped in backticks to show it's code"),
    (lambda text, line: bool(re.match(r'^import\s+', text)),
     "Import statement '{text}' should be wrapped in backticks to show it's code"),
    (lambda text, line: bool(re.match(r'^[A-Z]+\+[A-Z]+$', text)),
     "Key combination '{text}' should be wrapped in backticks to distinguish it from regular text"),
    (lambda text, line: (not _WCAG_RATIO.match(text) and not _TIME_SUFFIX.search(text)
                         and bool(_HOST_PORT.match(text))),
     "Network address '{text}' should be wrapped in backticks to show it's a technical reference"),
    (lambda text, line: bool(re.match(r'^(?:export|set)\s+', text)),
     "Variable assignment '{text}' should be wrapped in backticks to show it's a shell command"),
    (lambda text, line: bool(_SNAKE_CASE.match(text) or CODE_IDENTIFIER_PATTERNS['camel_case'].match(text)),
     "Identifier '{text}' should be wrapped in backticks to indicate it's a code variable or function name"),
    (lambda text, line: bool(CODE_IDENTIFIER_PATTERNS['pascal_case'].match(text)),
     "Identifier '{text}' should be wrapped in backticks to indicate it's a code class or type name"),
)

FALLBACK_MESSAGE = "Code-like element '{text}' should be wrapped in backticks for better readability"


def build_message(text: str, line: str = '') -> str:
    """Message for the first matching category, else the generic fallback."""
    for matches, template in MESSAGE_RULES:
        if matches(text, line):
            return template.format(text=text)
    return FALLBACK_MESSAGE.format(text=text)
