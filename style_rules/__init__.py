"""
Markdown Style Rules Package

This package provides:
- SentenceCaseHeadingRule: sentence case for ATX headings and bold list-item text
- BacktickCodeElementsRule: backticks around code-like elements in prose
- create_rules / lint_lines / apply_fixes: run the rules and apply their fixes
"""

from .structure_and_format.sentence_case_heading_rule import SentenceCaseHeadingRule
from .technical_elements.backtick_code_elements_rule import BacktickCodeElementsRule
from .runner import apply_fixes, create_rules, init_autofix_telemetry, lint_lines
from .types import FixInfo, Violation

__all__ = [
    'SentenceCaseHeadingRule',
    'BacktickCodeElementsRule',
    'create_rules',
    'init_autofix_telemetry',
    'lint_lines',
    'apply_fixes',
    'FixInfo',
    'Violation',
]
