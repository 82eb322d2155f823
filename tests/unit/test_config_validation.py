"""
Unit Tests for Rule Configuration Validation
"""

import pytest

from style_rules.services.config_validation import (
    AUTOFIX_SAFETY_SCHEMA, format_validation_errors, log_validation_errors, sanitize_config, validate_boolean,
    validate_config, validate_non_negative_number, validate_number_in_range, validate_string_array,
    validate_autofix_safety_config,
)

SCHEMA = {
    'special_terms': validate_string_array,
    'ignore_after_emoji': validate_boolean,
}


@pytest.mark.unit
class TestValidators:
    """Single-field validators."""

    def test_string_array(self):
        assert validate_string_array(None, 'terms') == []
        assert validate_string_array(['a', 'b'], 'terms') == []

        errors = validate_string_array('a', 'terms')
        assert [e.expected for e in errors] == ['array of strings']

        errors = validate_string_array(['a', 1, '  '], 'terms')
        assert [e.field for e in errors] == ['terms[1]', 'terms[2]']

    def test_boolean(self):
        assert validate_boolean(True, 'flag') == []
        assert validate_boolean(None, 'flag') == []
        assert validate_boolean('yes', 'flag')[0].message == 'flag must be a boolean (true or false)'

    def test_non_negative_number(self):
        assert validate_non_negative_number(0, 'n') == []
        assert validate_non_negative_number(-1, 'n')[0].expected == 'non-negative number'
        assert validate_non_negative_number(True, 'n')[0].message == 'n must be a number'

    def test_number_in_range(self):
        validator = validate_number_in_range(0, 1)
        assert validator(0.5, 'threshold') == []
        assert validator(1.5, 'threshold')[0].message == 'threshold must be between 0 and 1'
        assert validator(float('nan'), 'threshold')[0].message == 'threshold must be a number'


@pytest.mark.unit
class TestValidateConfig:
    """Whole-configuration validation."""

    def test_valid(self):
        assert validate_config({'special_terms': ['Kubeflow']}, SCHEMA, 'rule') == (True, [])

    def test_not_a_mapping_is_treated_as_empty(self):
        assert validate_config(None, SCHEMA, 'rule') == (True, [])

    def test_unknown_option(self):
        is_valid, errors = validate_config({'bogus': 1}, SCHEMA, 'rule')
        assert not is_valid
        assert errors[0].message == 'Unknown configuration option "bogus" for rule "rule"'
        assert errors[0].expected == 'one of: special_terms, ignore_after_emoji'

    def test_format_and_log(self):
        _, errors = validate_config({'ignore_after_emoji': 'no'}, SCHEMA, 'rule')
        message = format_validation_errors('rule', errors)
        assert message.startswith('Configuration validation failed for rule "rule":')
        assert '  - ignore_after_emoji:' in message
        assert format_validation_errors('rule', []) == ''

        logged = []
        log_validation_errors('rule', errors, logged.append)
        assert logged == [message]


@pytest.mark.unit
class TestAutofixSafetyConfig:
    """The autofix section and its sanitizing."""

    def test_conflicting_words(self):
        is_valid, errors = validate_autofix_safety_config({'safe_words': ['npm'], 'unsafe_words': ['NPM']})
        assert not is_valid
        assert errors[0].field == 'safe_words/unsafe_words'

    def test_sanitize_drops_invalid_and_unknown(self):
        config = {'confidence_threshold': 2, 'review_threshold': 0.2, 'bogus': True, 'never_flag': ['a', 3]}
        _, errors = validate_autofix_safety_config(config)
        sanitized = sanitize_config(config, AUTOFIX_SAFETY_SCHEMA, errors)
        assert sanitized == {'review_threshold': 0.2, 'never_flag': ['a', 3]}

    def test_sanitize_non_mapping(self):
        assert sanitize_config('nope', AUTOFIX_SAFETY_SCHEMA, []) == {}
