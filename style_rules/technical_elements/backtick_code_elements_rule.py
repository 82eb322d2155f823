"""
Backtick Code Elements Rule
Requires file names, paths, commands, flags and identifiers used in prose
to be wrapped in backticks.
"""

import logging
import re
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

from ..autofix.safety import BACKTICK, create_safe_fix_info
from ..base_rule import BaseRule
from ..services.config_validation import log_validation_errors, validate_boolean, validate_config, validate_string_array
from ..shared.utils import get_code_block_lines, is_fence_line
from ..types import CodeElementCategory, CodeElementMatch, FixInfo, Violation
from .code_patterns import build_message, find_code_elements

logger = logging.getLogger(__name__)

_HEADING = re.compile(r'^\s*#')
_LINK_REFERENCE = re.compile(r'^\s*\[[^\]]+\]:\s*\S')
# Shell usage that is still prose-worthy inside a $$ math block
_SHELL_IN_MATH = re.compile(r'(?:grep\s+\$\w+|export\s+(?:\w+=)?\$\w+)')


class BacktickCodeElementsRule(BaseRule):
    """
    Flags unwrapped code-like elements outside headings and code blocks.

    Configuration (all optional):
        ignored_terms: extra terms never flagged
        skip_code_blocks: skip fenced and indented code blocks (default True)
        skip_math_blocks: skip ``$$`` math blocks (default True)
        detect_pascal_case: also flag PascalCase identifiers (default False)
        autofix: autofix safety options
    """

    CONFIG_SCHEMA = {
        'ignored_terms': validate_string_array,
        'skip_code_blocks': validate_boolean,
        'skip_math_blocks': validate_boolean,
        'detect_pascal_case': validate_boolean,
        'autofix': lambda value, field_name: [],
    }

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(config)

        is_valid, errors = validate_config(self.config, self.CONFIG_SCHEMA, self.rule_type)
        if not is_valid:
            log_validation_errors(self.rule_type, errors)

        ignored = self.config.get('ignored_terms')
        self.ignored_terms: FrozenSet[str] = frozenset(
            term for term in ignored if isinstance(term, str)
        ) if isinstance(ignored, (list, tuple)) else frozenset()
        self.skip_code_blocks = self._bool_option('skip_code_blocks', True)
        self.skip_math_blocks = self._bool_option('skip_math_blocks', True)
        self.detect_pascal_case = self._bool_option('detect_pascal_case', False)

    def _get_rule_type(self) -> str:
        return 'backtick-code-elements'

    def _bool_option(self, key: str, default: bool) -> bool:
        value = self.config.get(key)
        return value if isinstance(value, bool) else default

    def analyze(self, lines: Sequence[str], context: Optional[Dict[str, Any]] = None) -> List[Violation]:
        lines = self._normalize_lines(lines)
        if not lines:
            return []
        context = context or {}

        code_block_lines = get_code_block_lines(lines)
        in_math_block = False
        violations: List[Violation] = []

        for index, line in enumerate(lines):
            in_code_block = code_block_lines[index]
            if in_code_block and is_fence_line(line):
                continue

            if line.strip() == '$$':
                in_math_block = not in_math_block
                continue

            if (self.skip_code_blocks and in_code_block) or _HEADING.match(line):
                continue
            if _LINK_REFERENCE.match(line):
                continue
            if self.skip_math_blocks and in_math_block and not _SHELL_IN_MATH.search(line):
                continue

            for element in find_code_elements(line, self.ignored_terms, self.detect_pascal_case):
                violations.append(self._report(element, line, index + 1, context))

        return violations

    def _report(self, element: CodeElementMatch, line: str, line_number: int,
                context: Dict[str, Any]) -> Violation:
        wrapped = f'`{element.text}`'
        fix_info = FixInfo(column=element.start_offset + 1, delete_count=len(element.text), insert_text=wrapped)
        gate_context = {
            'type': 'shell-command' if element.category == CodeElementCategory.SHELL_ASSIGNMENT else 'code-element',
            'line': line,
            'line_number': line_number,
            'file': context.get('file'),
        }
        return self._create_violation(
            line_number=line_number,
            message=build_message(element.text, line),
            matched_text=element.text,
            fix_info=create_safe_fix_info(fix_info, BACKTICK, element.text, wrapped, gate_context,
                                          self.safety_config),
            column=element.start_offset + 1,
            category=element.category,
        )
