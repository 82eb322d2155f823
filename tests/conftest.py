"""
Shared fixtures for the style rule tests.
"""

import pytest

from style_rules.autofix.telemetry import init_needs_review_reporter, init_telemetry, reset_needs_review_reporter
from style_rules.shared.utils import clear_code_block_cache


@pytest.fixture(autouse=True)
def isolated_autofix_state():
    """Start every test with disabled telemetry, an empty review queue and a cold code block cache."""
    init_telemetry(enabled=False)
    init_needs_review_reporter()
    clear_code_block_cache()
    yield
    reset_needs_review_reporter()


@pytest.fixture
def telemetry():
    """Enabled telemetry log for tests that inspect gate decisions."""
    return init_telemetry(enabled=True)
