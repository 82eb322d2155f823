"""
Sentence Case Heading Rule
Ensures ATX headings and bold list-item lead-ins use sentence case: first
word capitalized, the rest lowercase except dictionary terms, acronyms,
code identifiers and "I".
"""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from ..base_rule import BaseRule
from ..sentence_case.case_classifier import validate_bold_text, validate_heading
from ..sentence_case.fix_builder import build_bold_fix, build_heading_fix, to_sentence_case
from ..sentence_case.token_extraction import extract_heading_text
from ..services.config_validation import (
    log_validation_errors, validate_boolean, validate_config, validate_string_array,
)
from ..services.terms_config_service import TermDictionary, get_default_term_dictionary
from ..shared.heuristics import get_code_span_ranges, is_in_code_span
from ..shared.utils import get_code_block_lines, truncate_at_emoji
from ..types import Violation

logger = logging.getLogger(__name__)

_BOLD_SPAN = re.compile(r'\*\*([^*]+?)\*\*')
_LIST_ITEM = re.compile(r'^\s*[-*+]\s')
_HEADING_MARKER = re.compile(r'^#+\s*')
_README = re.compile(r'README\.md$', re.IGNORECASE)

DEPRECATED_TERM_KEYS = ('technical_terms', 'proper_nouns')


class SentenceCaseHeadingRule(BaseRule):
    """
    Checks headings and bold list-item text for sentence case.

    Configuration (all optional):
        special_terms: canonical spellings added to the term dictionary
        technical_terms, proper_nouns: deprecated aliases of special_terms
        ambiguous_terms: extra words skipped by case checks
        acronym_prefix_exemptions: extra hyphen prefixes never read as acronyms
        ignore_after_emoji: stop validating heading text at a trailing emoji
        autofix: autofix safety options
    """

    CONFIG_SCHEMA = {
        'special_terms': validate_string_array,
        'technical_terms': validate_string_array,
        'proper_nouns': validate_string_array,
        'ambiguous_terms': validate_string_array,
        'acronym_prefix_exemptions': validate_string_array,
        'ignore_after_emoji': validate_boolean,
        # validated by the safety gate
        'autofix': lambda value, field_name: [],
    }

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 dictionary: Optional[TermDictionary] = None) -> None:
        super().__init__(config)

        is_valid, errors = validate_config(self.config, self.CONFIG_SCHEMA, self.rule_type)
        if not is_valid:
            log_validation_errors(self.rule_type, errors)

        for key in DEPRECATED_TERM_KEYS:
            if self._string_list(key):
                logger.warning(f'Deprecation warning [{self.rule_type}]: "{key}" is deprecated. '
                               f'Please use "special_terms" instead.')

        user_terms = self._string_list('special_terms') + self._string_list('technical_terms') \
            + self._string_list('proper_nouns')
        base = dictionary or get_default_term_dictionary()
        self.dictionary = base.merged(
            user_terms,
            self._string_list('ambiguous_terms'),
            self._string_list('acronym_prefix_exemptions'),
        )
        ignore_after_emoji = self.config.get('ignore_after_emoji')
        self.ignore_after_emoji = ignore_after_emoji if isinstance(ignore_after_emoji, bool) else False

    def _get_rule_type(self) -> str:
        return 'sentence-case-heading'

    def _string_list(self, key: str) -> List[str]:
        value = self.config.get(key)
        if not isinstance(value, (list, tuple)):
            return []
        return [item for item in value if isinstance(item, str)]

    def analyze(self, lines: Sequence[str], context: Optional[Dict[str, Any]] = None) -> List[Violation]:
        """
        Validate every ATX heading outside code blocks and every bold span
        in a bullet list item.
        """
        lines = self._normalize_lines(lines)
        if not lines:
            return []
        context = context or {}
        file_name = context.get('file') or ''

        code_block_lines = get_code_block_lines(lines)
        violations: List[Violation] = []

        for index, line in enumerate(lines):
            if code_block_lines[index]:
                continue
            line_number = index + 1

            heading_text = extract_heading_text(line)
            if heading_text is not None:
                if line_number == 1 and _README.search(file_name):
                    continue
                violation = self._check_heading(line, heading_text, line_number, context)
                if violation is not None:
                    violations.append(violation)
                continue

            if _LIST_ITEM.match(line) and '**' in line:
                violations.extend(self._check_bold_spans(line, line_number, context))

        return violations

    # === HEADINGS ===

    def _check_heading(self, line: str, heading_text: str, line_number: int,
                       context: Dict[str, Any]) -> Optional[Violation]:
        if self.ignore_after_emoji:
            heading_text = truncate_at_emoji(heading_text)

        result = validate_heading(heading_text, self.dictionary)
        if result.is_valid:
            return None

        comment_index = line.find('<!--')
        heading_content = line[:comment_index].rstrip() if comment_index != -1 else line
        text_to_fix = _HEADING_MARKER.sub('', heading_content, count=1)

        fix_info = build_heading_fix(
            line, text_to_fix, self.dictionary, self.safety_config,
            self._gate_context(context, line_number),
        )
        return self._create_violation(
            line_number=line_number,
            message=result.error_message,
            matched_text=result.cleaned_text or heading_text,
            fix_info=fix_info,
        )

    # === BOLD TEXT ===

    def _check_bold_spans(self, line: str, line_number: int, context: Dict[str, Any]) -> List[Violation]:
        violations = []
        code_spans = get_code_span_ranges(line)

        for match in _BOLD_SPAN.finditer(line):
            if is_in_code_span(code_spans, match.start(), match.end()):
                continue

            bold_text = match.group(1).strip()
            text_start = match.start(1) + len(match.group(1)) - len(match.group(1).lstrip())
            # "**Label:** description" validates the label only
            text_to_validate = bold_text.split(':')[0].strip() if ':' in bold_text else bold_text
            if not text_to_validate:
                continue

            result = validate_bold_text(text_to_validate, self.dictionary)
            if result.is_valid:
                continue

            fix_info = None
            fixed_text = to_sentence_case(text_to_validate, self.dictionary)
            if fixed_text:
                fix_info = build_bold_fix(
                    line, text_to_validate, fixed_text, self.safety_config,
                    self._gate_context(context, line_number), self.dictionary, text_start,
                )
            violations.append(self._create_violation(
                line_number=line_number,
                message=result.error_message,
                matched_text=f'**{text_to_validate}**',
                fix_info=fix_info,
            ))

        return violations

    @staticmethod
    def _gate_context(context: Dict[str, Any], line_number: int) -> Dict[str, Any]:
        return {'file': context.get('file'), 'line_number': line_number}
