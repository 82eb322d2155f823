"""
Configuration for Markdown Style Rules.
"""

import os
import logging
from dotenv import load_dotenv
from typing import Dict, Any

# Load environment variables (optional - only if .env file exists)
load_dotenv()


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logging.warning(f"Invalid value for {name}: {raw!r}, using {default}")
        return default


class Config:
    """Process configuration."""

    TESTING = False

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Autofix Thresholds
    AUTOFIX_CONFIDENCE_THRESHOLD = _env_float('AUTOFIX_CONFIDENCE_THRESHOLD', 0.5)
    AUTOFIX_REVIEW_THRESHOLD = _env_float('AUTOFIX_REVIEW_THRESHOLD', 0.3)

    # Autofix Telemetry
    AUTOFIX_TELEMETRY = _env_flag('AUTOFIX_TELEMETRY')
    AUTOFIX_TELEMETRY_VERBOSE = _env_flag('AUTOFIX_TELEMETRY_VERBOSE')
    AUTOFIX_REVIEW_QUEUE = _env_flag('AUTOFIX_REVIEW_QUEUE', 'true')

    @classmethod
    def get_autofix_config(cls) -> Dict[str, Any]:
        """Get autofix threshold defaults (overridden by a rule's own ``autofix`` section)."""
        return {
            'confidence_threshold': cls.AUTOFIX_CONFIDENCE_THRESHOLD,
            'review_threshold': cls.AUTOFIX_REVIEW_THRESHOLD,
        }

    @classmethod
    def get_telemetry_config(cls) -> Dict[str, Any]:
        """Get autofix telemetry configuration."""
        return {
            'enabled': cls.AUTOFIX_TELEMETRY,
            'verbose': cls.AUTOFIX_TELEMETRY_VERBOSE,
            'review_queue': cls.AUTOFIX_REVIEW_QUEUE,
        }

    @classmethod
    def get_logging_config(cls) -> Dict[str, Any]:
        """Get logging configuration."""
        return {
            'level': cls.LOG_LEVEL,
            'format': cls.LOG_FORMAT,
        }

    @classmethod
    def configure_logging(cls) -> None:
        """Configure root logging once for a host process."""
        level = getattr(logging, str(cls.LOG_LEVEL).upper(), logging.INFO)
        logging.basicConfig(level=level, format=cls.LOG_FORMAT)


# For testing only
class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    LOG_LEVEL = 'DEBUG'
    AUTOFIX_CONFIDENCE_THRESHOLD = 0.5
    AUTOFIX_REVIEW_THRESHOLD = 0.3
    AUTOFIX_TELEMETRY = True
    AUTOFIX_TELEMETRY_VERBOSE = False
    AUTOFIX_REVIEW_QUEUE = True
