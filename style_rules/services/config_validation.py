"""
Configuration Validation
Validates user-supplied rule configuration against simple schemas.
Invalid fields are reported and replaced by defaults so linting continues.
"""

import logging
import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..types import ValidationError

logger = logging.getLogger(__name__)

Validator = Callable[[Any, str], List[ValidationError]]


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid threshold
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def validate_string_array(value: Any, field_name: str) -> List[ValidationError]:
    """Validate an optional list of non-empty strings."""
    errors = []
    if value is None:
        return errors

    if not isinstance(value, (list, tuple)):
        errors.append(ValidationError(
            field=field_name,
            message=f"{field_name} must be an array of strings",
            value=value,
            expected='array of strings',
        ))
        return errors

    for i, item in enumerate(value):
        if not isinstance(item, str):
            errors.append(ValidationError(
                field=f"{field_name}[{i}]",
                message=f"{field_name}[{i}] must be a string, got {type(item).__name__}",
                value=item,
                expected='string',
            ))
        elif not item.strip():
            errors.append(ValidationError(
                field=f"{field_name}[{i}]",
                message=f"{field_name}[{i}] cannot be empty or whitespace-only",
                value=item,
                expected='non-empty string',
            ))
    return errors


def validate_boolean(value: Any, field_name: str) -> List[ValidationError]:
    if value is None or isinstance(value, bool):
        return []
    return [ValidationError(
        field=field_name,
        message=f"{field_name} must be a boolean (true or false)",
        value=value,
        expected='boolean',
    )]


def validate_non_negative_number(value: Any, field_name: str) -> List[ValidationError]:
    if value is None:
        return []
    if not _is_number(value):
        return [ValidationError(field_name, f"{field_name} must be a number", value, 'number')]
    if value < 0:
        return [ValidationError(field_name, f"{field_name} must be non-negative", value, 'non-negative number')]
    return []


def validate_number_in_range(minimum: float, maximum: float) -> Validator:
    """Build a validator accepting numbers within ``[minimum, maximum]``."""
    expected = f"number between {minimum} and {maximum}"

    def validator(value: Any, field_name: str) -> List[ValidationError]:
        if value is None:
            return []
        if not _is_number(value):
            return [ValidationError(field_name, f"{field_name} must be a number", value, expected)]
        if value < minimum or value > maximum:
            return [ValidationError(field_name, f"{field_name} must be between {minimum} and {maximum}",
                                    value, expected)]
        return []

    return validator


def validate_config(config: Any, schema: Mapping[str, Validator],
                    rule_name: str) -> Tuple[bool, List[ValidationError]]:
    """
    Validate a rule configuration mapping.

    Returns:
        ``(is_valid, errors)``. Unknown options are reported as errors too.
        A missing or non-mapping configuration is treated as empty.
    """
    if not isinstance(config, Mapping):
        return True, []

    errors: List[ValidationError] = []
    for field_name, validator in schema.items():
        errors.extend(validator(config.get(field_name), field_name))

    known_fields = list(schema.keys())
    for field_name in config.keys():
        if field_name not in schema:
            errors.append(ValidationError(
                field=str(field_name),
                message=f'Unknown configuration option "{field_name}" for rule "{rule_name}"',
                value=config[field_name],
                expected=f"one of: {', '.join(known_fields)}",
            ))

    return len(errors) == 0, errors


def format_validation_errors(rule_name: str, errors: List[ValidationError]) -> str:
    if not errors:
        return ''
    error_lines = '\n'.join(f"  - {error.field}: {error.message}" for error in errors)
    return f'Configuration validation failed for rule "{rule_name}":\n{error_lines}'


def log_validation_errors(rule_name: str, errors: List[ValidationError],
                          log: Optional[Callable[[str], None]] = None) -> None:
    """Report validation errors through ``log`` or the module logger."""
    if not errors:
        return
    message = format_validation_errors(rule_name, errors)
    if log is not None:
        log(message)
    else:
        logger.warning(message)


AUTOFIX_SAFETY_SCHEMA: Dict[str, Validator] = {
    'enabled': validate_boolean,
    'confidence_threshold': validate_number_in_range(0, 1),
    'review_threshold': validate_number_in_range(0, 1),
    'safe_words': validate_string_array,
    'unsafe_words': validate_string_array,
    'require_manual_review': validate_boolean,
    'always_review': validate_string_array,
    'never_flag': validate_string_array,
}


def validate_autofix_safety_config(config: Any) -> Tuple[bool, List[ValidationError]]:
    """Validate an ``autofix`` section, including safe/unsafe word conflicts."""
    if not isinstance(config, Mapping):
        return True, []

    is_valid, errors = validate_config(config, AUTOFIX_SAFETY_SCHEMA, 'autofix-safety')

    safe_words = config.get('safe_words')
    unsafe_words = config.get('unsafe_words')
    if isinstance(safe_words, (list, tuple)) and isinstance(unsafe_words, (list, tuple)):
        safe_set = {w.lower() for w in safe_words if isinstance(w, str)}
        for word in unsafe_words:
            if isinstance(word, str) and word.lower() in safe_set:
                errors.append(ValidationError(
                    field='safe_words/unsafe_words',
                    message=f'Word "{word}" appears in both safe_words and unsafe_words (conflict)',
                    value=word,
                    expected='no overlap between safe_words and unsafe_words',
                ))
                is_valid = False

    return is_valid, errors


def sanitize_config(config: Any, schema: Mapping[str, Validator],
                    errors: List[ValidationError]) -> Dict[str, Any]:
    """
    Drop every option that failed validation so callers fall back to defaults.
    Unknown options are dropped as well. Lists with bad items are kept;
    consumers skip the non-string entries.
    """
    if not isinstance(config, Mapping):
        return {}
    invalid = {error.field for error in errors if "[" not in error.field}
    return {key: value for key, value in config.items() if key in schema and key not in invalid}
