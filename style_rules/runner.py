"""
Rule Runner
Runs a set of rules over a document and applies the fixes they attach.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type

from config import Config

from .autofix.telemetry import AutofixTelemetry, init_needs_review_reporter, init_telemetry
from .base_rule import BaseRule
from .structure_and_format.sentence_case_heading_rule import SentenceCaseHeadingRule
from .technical_elements.backtick_code_elements_rule import BacktickCodeElementsRule
from .types import Violation

logger = logging.getLogger(__name__)

RULE_CLASSES = {
    'sentence-case-heading': SentenceCaseHeadingRule,
    'backtick-code-elements': BacktickCodeElementsRule,
}


def _autofix_section(rule_config: Mapping[str, Any], shared: Mapping[str, Any],
                     defaults: Mapping[str, Any]) -> Dict[str, Any]:
    # Environment defaults < shared ``autofix`` section < the rule's own section
    merged = dict(defaults)
    if isinstance(shared, Mapping):
        merged.update(shared)
    own = rule_config.get('autofix')
    if isinstance(own, Mapping):
        merged.update(own)
    return merged


def create_rules(config: Optional[Mapping[str, Any]] = None,
                 config_class: Type[Config] = Config) -> List[BaseRule]:
    """
    Build every rule from a document-level configuration.

    ``config`` maps rule names to their options; a top-level ``autofix``
    section applies to every rule. A rule set to ``False`` is disabled.
    """
    config = config if isinstance(config, Mapping) else {}
    shared_autofix = config.get('autofix') or {}
    defaults = config_class.get_autofix_config()

    rules: List[BaseRule] = []
    for name, rule_class in RULE_CLASSES.items():
        rule_config = config.get(name, {})
        if rule_config is False:
            logger.debug(f"Rule '{name}' disabled by configuration")
            continue
        if not isinstance(rule_config, Mapping):
            rule_config = {}
        rule_config = dict(rule_config)
        rule_config['autofix'] = _autofix_section(rule_config, shared_autofix, defaults)
        rules.append(rule_class(rule_config))
    return rules


def init_autofix_telemetry(config_class: Type[Config] = Config) -> AutofixTelemetry:
    """Create the process telemetry log and review queue from environment configuration."""
    telemetry_config = config_class.get_telemetry_config()
    init_needs_review_reporter(enabled=telemetry_config['review_queue'])
    return init_telemetry(enabled=telemetry_config['enabled'], verbose=telemetry_config['verbose'])


def lint_lines(lines: Sequence[str], rules: Optional[Iterable[BaseRule]] = None,
               context: Optional[Dict[str, Any]] = None) -> List[Violation]:
    """Run ``rules`` (all default rules if omitted) and return violations ordered by line."""
    if not isinstance(lines, (list, tuple)):
        return []
    rules = list(rules) if rules is not None else create_rules()

    violations: List[Violation] = []
    for rule in rules:
        violations.extend(rule.analyze(lines, context))
    violations.sort(key=lambda v: (v.line_number, v.column or 0))
    return violations


def apply_fixes(lines: Sequence[str], violations: Iterable[Violation]) -> List[str]:
    """
    Apply attached fixes and return the new lines.

    Fixes on one line are applied right to left. A fix overlapping one
    already applied on the same line is dropped; the next lint pass
    reports it again.
    """
    fixed_lines = list(lines)
    by_line: Dict[int, List] = {}
    for violation in violations:
        if violation.fix_info is not None and 1 <= violation.line_number <= len(fixed_lines):
            by_line.setdefault(violation.line_number, []).append(violation.fix_info)

    for line_number, fixes in by_line.items():
        line = fixed_lines[line_number - 1]
        applied_start = None
        for fix in sorted(fixes, key=lambda f: f.column, reverse=True):
            start = fix.column - 1
            end = start + fix.delete_count
            if start < 0 or end > len(line):
                logger.debug(f"Dropping out-of-range fix on line {line_number}: {fix}")
                continue
            if applied_start is not None and end > applied_start:
                continue
            line = fix.apply(line)
            applied_start = start
        fixed_lines[line_number - 1] = line

    return fixed_lines
