"""
Autofix Safety
Scores every computed fix and decides whether it is applied automatically,
flagged for review, or dropped.

Confidence is a base value plus the contributions of named heuristic
functions, clamped to [0, 1]. The heuristics are pure and know nothing
about telemetry; the gate records the full breakdown when telemetry is on.

Tiers:
    auto-fix      confidence >= confidence_threshold (default 0.5)
    needs-review  confidence >= review_threshold (default 0.3)
    skip          anything lower
"""

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Pattern, Sequence, Tuple

from ..services.config_validation import (
    AUTOFIX_SAFETY_SCHEMA, log_validation_errors, sanitize_config, validate_autofix_safety_config,
)
from ..services.terms_config_service import TermDictionary, get_default_term_dictionary, get_terms_config
from ..types import AmbiguityInfo, AutofixDecision, AutofixTier, ConfidenceScore, FixInfo
from .telemetry import NeedsReviewItem, get_needs_review_reporter, get_telemetry

logger = logging.getLogger(__name__)

SENTENCE_CASE = 'sentence-case'
BACKTICK = 'backtick'
NO_BARE_URL = 'no-bare-url'
NO_LITERAL_AMPERSAND = 'no-literal-ampersand'

AUTO_FIX_THRESHOLD = 0.5
REVIEW_THRESHOLD = 0.3
AMBIGUITY_PENALTY = 0.25
SAFE_WORD_BOOST = 0.2
UNSAFE_WORD_PENALTY = 0.5
# Code-vs-prose analysis below this vetoes a backtick fix
NOT_CODE_VETO = 0.3

# Rules whose fixes are structurally safe get a fixed confidence
FIXED_RULE_CONFIDENCE = {
    NO_BARE_URL: 0.9,
    NO_LITERAL_AMPERSAND: 0.85,
}

_STANDALONE_FILENAME = re.compile(
    r'^[a-zA-Z0-9._-]+\.(?:json|js|ts|py|md|txt|yml|yaml|xml|html|css|scss|sh|sql|env|cfg|conf|ini|toml|lock|log)$',
    re.IGNORECASE,
)
_IMPORT = re.compile(r'^import\s+\w+')
_ENV_VAR = re.compile(r'^[A-Z_][A-Z0-9_]*$')
_SNAKE_CASE = re.compile(r'^_?[a-z][a-z0-9]*(?:_[a-z0-9]+)+$')
_CAMEL_CASE = re.compile(r'^[a-z][a-z0-9]*[A-Z][a-zA-Z0-9]*$')
_PASCAL_CASE = re.compile(r'^[A-Z](?=[a-zA-Z0-9]*[A-Z])[a-zA-Z0-9]*[a-z][a-zA-Z0-9]*$')
_EXTENSION = re.compile(r'\.([^.]+)$')
_TRAILING_EXTENSION = re.compile(r'\.[a-zA-Z0-9]+$')
_LETTERS_ONLY = re.compile(r'^[a-zA-Z]+$')
_SHORT_LOWERCASE = re.compile(r'^[a-z]{1,3}$')

_DEFINITELY_NOT_CODE = tuple(re.compile(p, re.IGNORECASE) for p in (
    r'^(?:a|an|the|and|or|but|if|then|else|when|where|why|how|who|what|which|that|this|these|those|'
    r'here|there|now|today|yesterday|tomorrow)$',
    r'^(?:i|you|he|she|it|we|they|me|him|her|us|them|my|your|his|its|our|their)$',
    r'^(?:is|are|was|were|be|been|being|have|has|had|do|does|did|will|would|could|should|may|might|'
    r'can|must|shall)$',
    r'^(?:good|bad|big|small|new|old|first|last|next|previous|best|worst|better|worse|more|less|most|least)$',
    r'^(?:one|two|three|four|five|six|seven|eight|nine|ten|eleven|twelve|twenty|thirty|hundred|thousand)$',
))
_MODERATE_CODE_INDICATORS = tuple(re.compile(p) for p in (
    r'[A-Z]{2,}',
    r'_',
    r'\d',
    r'^[a-z]+[A-Z]',
    r'^[A-Z][a-z]+[A-Z]',
    r'^[a-z-]{4,}$',
))
_TECHNICAL_LINE = re.compile(r'command|execute|run|install|configure|setup|deploy|build|compile')
_EXAMPLE_LINE = re.compile(r'example|like|such as|for instance|namely')


@dataclass(frozen=True)
class AutofixVocabulary:
    """Word lists and patterns the heuristics consult, loaded once."""
    command_keywords: FrozenSet[str]
    file_extensions: FrozenSet[str]
    common_words: FrozenSet[str]
    natural_language_phrases: FrozenSet[str]
    problematic_patterns: Tuple[Pattern, ...]
    natural_language_indicators: Tuple[str, ...]
    technical_indicators: Tuple[str, ...]
    code_directory_prefixes: FrozenSet[str]
    technical_term_pattern: Optional[Pattern]
    strong_code_indicators: Tuple[Pattern, ...]
    default_safe_words: Tuple[str, ...]
    default_unsafe_words: Tuple[str, ...]


def _alternation(words) -> str:
    # Longest first so "HTTPS" wins over "HTTP"
    return '|'.join(re.escape(w) for w in sorted(words, key=len, reverse=True))


@lru_cache(maxsize=1)
def get_autofix_vocabulary() -> AutofixVocabulary:
    lists = get_terms_config().get_autofix_vocabulary()
    command_keywords = frozenset(w.lower() for w in lists['command_keywords'])
    file_extensions = frozenset(w.lower() for w in lists['file_extensions'])

    problematic = [_SHORT_LOWERCASE]
    for pattern in lists['problematic_patterns']:
        try:
            problematic.append(re.compile(pattern, re.IGNORECASE))
        except re.error as e:
            logger.warning(f"Ignoring invalid problematic pattern '{pattern}': {e}")

    technical_terms = lists['technical_terms']
    technical_term_pattern = None
    if technical_terms:
        technical_term_pattern = re.compile(rf'\b(?:{_alternation(technical_terms)})\b', re.IGNORECASE)

    strong = [re.compile(r'^[A-Z_][A-Z0-9_]*$')]
    if file_extensions:
        strong.append(re.compile(rf'\.(?:{_alternation(file_extensions)})$', re.IGNORECASE))
    if command_keywords:
        strong.append(re.compile(rf'^(?:{_alternation(command_keywords)})\s'))
    strong.extend(re.compile(p) for p in (
        r'\(.*\)$',
        r'^import\s+',
        r'^from\s+.*import',
        r'^\$[A-Z_]+$',
        r'^--[a-z-]+$',
        r'/.*/',
        r'^\.[a-zA-Z]',
    ))

    return AutofixVocabulary(
        command_keywords=command_keywords,
        file_extensions=file_extensions,
        common_words=frozenset(w.lower() for w in lists['common_words']),
        natural_language_phrases=frozenset(w.lower() for w in lists['natural_language_phrases']),
        problematic_patterns=tuple(problematic),
        natural_language_indicators=tuple(w.lower() for w in lists['natural_language_indicators']),
        technical_indicators=tuple(w.lower() for w in lists['technical_indicators']),
        code_directory_prefixes=frozenset(w.lower() for w in lists['code_directory_prefixes']),
        technical_term_pattern=technical_term_pattern,
        strong_code_indicators=tuple(strong),
        default_safe_words=tuple(lists['default_safe_words']),
        default_unsafe_words=tuple(lists['default_unsafe_words']),
    )


def get_default_safety_config() -> Dict[str, Any]:
    vocabulary = get_autofix_vocabulary()
    return {
        'enabled': True,
        'confidence_threshold': AUTO_FIX_THRESHOLD,
        'review_threshold': REVIEW_THRESHOLD,
        'safe_words': list(vocabulary.default_safe_words),
        'unsafe_words': list(vocabulary.default_unsafe_words),
        'require_manual_review': False,
        'always_review': [],
        'never_flag': [],
    }


def resolve_safety_config(config: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Merge a user ``autofix`` section over the defaults.

    Invalid options are logged and replaced by their defaults.
    """
    resolved = get_default_safety_config()
    if not config:
        return resolved

    is_valid, errors = validate_autofix_safety_config(config)
    if not is_valid:
        log_validation_errors('autofix-safety', errors)
    resolved.update(sanitize_config(config, AUTOFIX_SAFETY_SCHEMA, errors))
    return resolved


# === SENTENCE CASE HEURISTICS ===

Heuristic = Callable[[str, str, Mapping[str, Any]], float]


def _first_word_capitalization(original: str, fixed: str, context: Mapping[str, Any]) -> float:
    words = original.split()
    if not words:
        return 0.0
    first = words[0]
    return 0.3 if fixed.startswith(first[:1].upper() + first[1:].lower()) else 0.0


def _case_changes_only(original: str, fixed: str, context: Mapping[str, Any]) -> float:
    return 0.2 if original.lower() == fixed.lower() else 0.0


def _structural_changes(original: str, fixed: str, context: Mapping[str, Any]) -> float:
    return -0.2 if len(original.split()) != len(fixed.split()) else 0.0


def _many_words_changed(original: str, fixed: str, context: Mapping[str, Any]) -> float:
    original_words = original.split()
    fixed_words = fixed.split()
    changed = sum(1 for a, b in zip(original_words, fixed_words) if a.lower() != b.lower())
    return -0.3 if changed > len(original_words) * 0.5 else 0.0


def _technical_terms(original: str, fixed: str, context: Mapping[str, Any]) -> float:
    pattern = get_autofix_vocabulary().technical_term_pattern
    if pattern is None:
        return 0.0
    return 0.1 * min(len(pattern.findall(original)), 3)


SENTENCE_CASE_HEURISTICS: Sequence[Tuple[str, Heuristic]] = (
    ('first_word_capitalization', _first_word_capitalization),
    ('case_changes_only', _case_changes_only),
    ('structural_changes', _structural_changes),
    ('many_words_changed', _many_words_changed),
    ('technical_terms', _technical_terms),
)


# === BACKTICK HEURISTICS ===

def get_file_path_confidence(text: str) -> float:
    """Boost for path-like text, between 0 and 0.4."""
    if '/' not in text:
        return 0.0
    if _TRAILING_EXTENSION.search(text):
        return 0.4
    segments = text.split('/')
    if segments[0].lower() in get_autofix_vocabulary().code_directory_prefixes:
        return 0.3
    if len(segments) > 2:
        return 0.3
    return 0.15


def get_command_confidence(text: str) -> float:
    """Boost for command, filename and identifier shapes, capped at 0.4."""
    vocabulary = get_autofix_vocabulary()
    confidence = 0.0

    if _STANDALONE_FILENAME.match(text):
        confidence += 0.3
    if _IMPORT.match(text):
        confidence += 0.2
    words = text.split()
    if words and words[0].lower() in vocabulary.command_keywords:
        confidence += 0.3
    if _ENV_VAR.match(text) and len(text) > 2:
        confidence += 0.2
    extension = _EXTENSION.search(text)
    if extension and extension.group(1).lower() in vocabulary.file_extensions:
        confidence += 0.2
    if _SNAKE_CASE.match(text):
        confidence += 0.25
    if _CAMEL_CASE.match(text):
        confidence += 0.25
    # Brand names look PascalCase too, hence the smaller boost
    if _PASCAL_CASE.match(text):
        confidence += 0.2

    return min(confidence, 0.4)


def get_natural_language_penalty(text: str) -> float:
    """Penalty for text that reads like prose, between 0 and 0.9."""
    vocabulary = get_autofix_vocabulary()
    lower = text.lower()
    if lower in vocabulary.common_words:
        return 0.7
    if lower in vocabulary.natural_language_phrases:
        return 0.9
    if any(pattern.match(text) for pattern in vocabulary.problematic_patterns):
        return 0.5

    penalty = 0.0
    if len(text) <= 2:
        penalty += 0.3
    if _LETTERS_ONLY.match(text) and len(text) < 5:
        penalty += 0.2
    return penalty


def get_context_adjustment(text: str, context: Mapping[str, Any]) -> float:
    line = (context or {}).get('line')
    if not line:
        return 0.0

    vocabulary = get_autofix_vocabulary()
    line = line.lower()
    adjustment = 0.0
    if any(indicator in line for indicator in vocabulary.natural_language_indicators):
        adjustment -= 0.3
    # The same term repeated in one line reads as prose
    if len(re.findall(rf'\b{re.escape(text.lower())}\b', line)) > 1:
        adjustment -= 0.2
    if any(indicator in line for indicator in vocabulary.technical_indicators):
        adjustment += 0.2
    return adjustment


BACKTICK_HEURISTICS: Sequence[Tuple[str, Heuristic]] = (
    ('file_path_pattern', lambda original, fixed, context: get_file_path_confidence(original)),
    ('command_pattern', lambda original, fixed, context: get_command_confidence(original)),
    ('natural_language_penalty', lambda original, fixed, context: -get_natural_language_penalty(original)),
    ('context_adjustment', lambda original, fixed, context: get_context_adjustment(original, context)),
)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _score(heuristics: Sequence[Tuple[str, Heuristic]], original: str, fixed: str,
           context: Mapping[str, Any], base: float = 0.5) -> ConfidenceScore:
    breakdown: Dict[str, float] = {'base_confidence': base}
    confidence = base
    for name, heuristic in heuristics:
        contribution = heuristic(original, fixed, context)
        breakdown[name] = contribution
        confidence += contribution
    return ConfidenceScore(_clamp(confidence), breakdown)


def _zero_score(heuristics: Sequence[Tuple[str, Heuristic]]) -> ConfidenceScore:
    breakdown = {'base_confidence': 0.5}
    breakdown.update({name: 0.0 for name, _ in heuristics})
    return ConfidenceScore(0.0, breakdown)


def calculate_sentence_case_confidence(original: str, fixed: str,
                                       context: Optional[Mapping[str, Any]] = None) -> ConfidenceScore:
    """
    Confidence that a sentence-case rewrite is safe.

    Example:
        >>> calculate_sentence_case_confidence('This Is Title Case', 'This is title case').confidence
        1.0
    """
    if not original or not fixed or original == fixed:
        return _zero_score(SENTENCE_CASE_HEURISTICS)
    return _score(SENTENCE_CASE_HEURISTICS, original, fixed, context or {})


def calculate_backtick_confidence(original: str, context: Optional[Mapping[str, Any]] = None) -> ConfidenceScore:
    """Confidence that wrapping ``original`` in backticks is safe."""
    if not original:
        return _zero_score(BACKTICK_HEURISTICS)
    return _score(BACKTICK_HEURISTICS, original, f'`{original}`', context or {})


@dataclass(frozen=True)
class CodeAnalysis:
    is_likely_code: bool
    confidence: float
    reasons: Tuple[str, ...] = ()

    @property
    def should_autofix(self) -> bool:
        return self.confidence > 0.6


def analyze_code_vs_natural_language(text: str, context: Optional[Mapping[str, Any]] = None) -> CodeAnalysis:
    """Second opinion for backtick fixes: does ``text`` read as code or as prose?"""
    if any(pattern.match(text) for pattern in _DEFINITELY_NOT_CODE):
        return CodeAnalysis(False, 0.1, ('Matches common English word pattern',))

    confidence = 0.5
    reasons = []

    strong = sum(1 for pattern in get_autofix_vocabulary().strong_code_indicators if pattern.search(text))
    if strong:
        confidence += 0.4
        reasons.append(f"Strong code pattern: {strong} matches")

    moderate = sum(1 for pattern in _MODERATE_CODE_INDICATORS if pattern.search(text))
    if moderate:
        confidence += 0.1 * moderate
        reasons.append(f"Moderate code patterns: {moderate} matches")

    line = (context or {}).get('line')
    if line:
        line = line.lower()
        if _TECHNICAL_LINE.search(line):
            confidence += 0.2
            reasons.append('Technical context detected')
        if _EXAMPLE_LINE.search(line):
            confidence -= 0.3
            reasons.append('Example/illustration context detected')

    return CodeAnalysis(confidence > 0.5, confidence, tuple(reasons))


# === AMBIGUITY ===

def _ambiguity_type(reason: str) -> str:
    if 'programming language' in reason:
        return 'programming-language'
    if 'software' in reason or 'browser' in reason:
        return 'product-name'
    if 'SemVer' in reason:
        return 'semver-term'
    return 'proper-noun-or-common'


def detect_ambiguity(text: str, dictionary: Optional[TermDictionary] = None) -> Optional[AmbiguityInfo]:
    """Return details of the first ambiguous term in ``text``, if any."""
    dictionary = dictionary or get_default_term_dictionary()
    for word in text.lower().split():
        term = re.sub(r'[^a-z]', '', word)
        info = dictionary.ambiguous.get(term)
        if info is not None:
            reason = str(info.get('reason', ''))
            return AmbiguityInfo(
                term=term,
                type=_ambiguity_type(reason),
                reason=reason,
                proper_form=str(info.get('proper_form', term.capitalize())),
            )
    return None


# === DECISION ===

@dataclass(frozen=True)
class SafetyCheck:
    """Outcome of the gate for one fix."""
    safe: bool
    confidence: float
    tier: AutofixTier
    reason: str
    heuristics: Mapping[str, Any] = field(default_factory=dict)
    requires_review: bool = False
    ambiguity: Optional[AmbiguityInfo] = None
    suggested_fix: Optional[str] = None


def _find_listed_term(text: str, terms) -> Optional[str]:
    lower = text.lower()
    for term in terms or ():
        if isinstance(term, str) and term and term.lower() in lower:
            return term
    return None


def _classify_tier(confidence: float, auto_fix_threshold: float, review_threshold: float) -> AutofixTier:
    if confidence >= auto_fix_threshold:
        return AutofixTier.AUTO_FIX
    if confidence >= review_threshold:
        return AutofixTier.NEEDS_REVIEW
    return AutofixTier.SKIP


def should_apply_autofix(rule_type: str, original: str, fixed: str = '',
                         context: Optional[Mapping[str, Any]] = None,
                         config: Optional[Mapping[str, Any]] = None,
                         dictionary: Optional[TermDictionary] = None) -> SafetyCheck:
    """
    Score a fix and place it in a tier.

    ``never_flag`` terms skip the fix outright and ``always_review`` terms
    force the needs-review tier. Safe words add a boost and unsafe words a
    penalty. Ambiguous terms cost ``AMBIGUITY_PENALTY``.
    """
    config = config if config is not None else get_default_safety_config()
    context = context or {}
    auto_fix_threshold = config.get('confidence_threshold', AUTO_FIX_THRESHOLD)
    review_threshold = config.get('review_threshold', REVIEW_THRESHOLD)

    if not config.get('enabled', True):
        return SafetyCheck(True, 1.0, AutofixTier.AUTO_FIX, 'Safety checks disabled')

    original = original if isinstance(original, str) else str(original or '')

    never_flag_term = _find_listed_term(original, config.get('never_flag'))
    if never_flag_term is not None:
        return SafetyCheck(False, 0.0, AutofixTier.SKIP, f'Term "{never_flag_term}" is in never_flag list')

    if rule_type == SENTENCE_CASE:
        score = calculate_sentence_case_confidence(original, fixed, context)
        reason = f"Sentence case confidence: {score.confidence:.2f}"
    elif rule_type == BACKTICK:
        score = calculate_backtick_confidence(original, context)
        reason = f"Backtick confidence: {score.confidence:.2f}"
    elif rule_type in FIXED_RULE_CONFIDENCE:
        fixed_confidence = FIXED_RULE_CONFIDENCE[rule_type]
        score = ConfidenceScore(fixed_confidence, {'base_confidence': fixed_confidence})
        reason = f"{rule_type} confidence: {fixed_confidence:.2f}"
    else:
        score = ConfidenceScore(0.5, {})
        reason = 'Unknown rule type'

    confidence = score.confidence
    heuristics: Dict[str, Any] = dict(score.heuristics)

    lower = original.strip().lower()
    if lower and lower in {w.lower() for w in config.get('safe_words') or () if isinstance(w, str)}:
        heuristics['safe_word'] = SAFE_WORD_BOOST
        confidence = _clamp(confidence + SAFE_WORD_BOOST)
    if lower and lower in {w.lower() for w in config.get('unsafe_words') or () if isinstance(w, str)}:
        heuristics['unsafe_word'] = -UNSAFE_WORD_PENALTY
        confidence = _clamp(confidence - UNSAFE_WORD_PENALTY)

    ambiguity = detect_ambiguity(original, dictionary)
    if ambiguity is not None:
        confidence = _clamp(confidence - AMBIGUITY_PENALTY)
        heuristics['ambiguity_penalty'] = -AMBIGUITY_PENALTY
        heuristics['ambiguous_term'] = ambiguity.term
        reason += f" (ambiguous term: {ambiguity.term})"

    always_review_term = _find_listed_term(original, config.get('always_review'))
    if always_review_term is not None:
        return SafetyCheck(
            safe=False,
            confidence=min(confidence, auto_fix_threshold - 0.01),
            tier=AutofixTier.NEEDS_REVIEW,
            reason=f'Term "{always_review_term}" is in always_review list',
            heuristics=heuristics,
            requires_review=True,
            ambiguity=ambiguity,
            suggested_fix=fixed or None,
        )

    tier = _classify_tier(confidence, auto_fix_threshold, review_threshold)
    safe = tier == AutofixTier.AUTO_FIX
    return SafetyCheck(
        safe=safe,
        confidence=confidence,
        tier=tier,
        reason=reason,
        heuristics=heuristics,
        requires_review=tier == AutofixTier.NEEDS_REVIEW or (bool(config.get('require_manual_review')) and not safe),
        ambiguity=ambiguity,
        suggested_fix=fixed if tier == AutofixTier.NEEDS_REVIEW and fixed else None,
    )


def create_safe_fix_info(fix_info: Optional[FixInfo], rule_type: str, original: str, fixed: str,
                         context: Optional[Mapping[str, Any]] = None,
                         config: Optional[Mapping[str, Any]] = None,
                         dictionary: Optional[TermDictionary] = None) -> Optional[FixInfo]:
    """
    Gate a computed fix.

    Returns ``fix_info`` only for the auto-fix tier. Needs-review fixes
    go to the needs-review reporter when it is enabled, and every decision
    goes to telemetry when it is enabled. Nothing is built for a disabled
    sink.
    """
    if fix_info is None:
        return None

    context = context or {}
    check = should_apply_autofix(rule_type, original, fixed, context, config, dictionary)
    telemetry = get_telemetry()

    if rule_type == BACKTICK:
        analysis = analyze_code_vs_natural_language(original, context)
        if analysis.confidence < NOT_CODE_VETO:
            logger.debug(f"Skipping backtick fix for '{original}': reads as prose "
                         f"(confidence {analysis.confidence:.2f})")
            if telemetry.enabled:
                telemetry.record_decision(AutofixDecision(
                    rule=rule_type,
                    original=original,
                    fixed=fixed,
                    confidence=analysis.confidence,
                    applied=False,
                    tier=AutofixTier.SKIP,
                    reason=f'Advanced analysis indicates not code (confidence < {NOT_CODE_VETO})',
                    heuristics=check.heuristics,
                    line=context.get('line'),
                    line_number=context.get('line_number'),
                    file=context.get('file'),
                ))
            return None

    applied = check.tier == AutofixTier.AUTO_FIX
    if telemetry.enabled:
        telemetry.record_decision(AutofixDecision(
            rule=rule_type,
            original=original,
            fixed=fixed,
            confidence=check.confidence,
            applied=applied,
            tier=check.tier,
            reason=None if applied else check.reason,
            heuristics=check.heuristics,
            ambiguity=check.ambiguity,
            line=context.get('line'),
            line_number=context.get('line_number'),
            file=context.get('file'),
        ))

    reporter = get_needs_review_reporter()
    if check.tier == AutofixTier.NEEDS_REVIEW and reporter.enabled:
        reporter.add_item(NeedsReviewItem(
            file=context.get('file') or 'unknown',
            line=context.get('line_number') or 0,
            rule=rule_type,
            original=original,
            suggested=fixed,
            confidence=check.confidence,
            ambiguity=check.ambiguity,
            context=context.get('line'),
            heuristics=check.heuristics,
        ))

    if not applied:
        logger.debug(f"Autofix for '{original}' not applied: {check.tier.value} ({check.reason})")
        return None
    return fix_info
