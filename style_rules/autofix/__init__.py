"""
Autofix Package

- safety: confidence heuristics and the auto-fix / needs-review / skip gate
- telemetry: decision log and needs-review reporter
"""

from .safety import (
    SafetyCheck, analyze_code_vs_natural_language, calculate_backtick_confidence,
    calculate_sentence_case_confidence, create_safe_fix_info, resolve_safety_config, should_apply_autofix,
)
from .telemetry import (
    AutofixTelemetry, NeedsReviewItem, NeedsReviewReporter, get_needs_review_reporter, get_telemetry,
    init_telemetry, reset_telemetry,
)

__all__ = [
    'SafetyCheck',
    'analyze_code_vs_natural_language',
    'calculate_backtick_confidence',
    'calculate_sentence_case_confidence',
    'create_safe_fix_info',
    'resolve_safety_config',
    'should_apply_autofix',
    'AutofixTelemetry',
    'NeedsReviewItem',
    'NeedsReviewReporter',
    'get_needs_review_reporter',
    'get_telemetry',
    'init_telemetry',
    'reset_telemetry',
]
