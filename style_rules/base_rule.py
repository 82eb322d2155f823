"""
Base Rule Class - Abstract interface for all Markdown style rules.
All rules must inherit from this class and implement the required methods.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .autofix.safety import resolve_safety_config
from .types import CodeElementCategory, FixInfo, Violation

logger = logging.getLogger(__name__)


class BaseRule(ABC):
    """
    Abstract base class for line-oriented Markdown rules.

    A rule is built once per configuration and may then analyze any number
    of documents. Configuration is a plain dict with snake_case keys; the
    shared ``autofix`` section is resolved against the safety defaults here.
    """

    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        self.rule_type = self._get_rule_type()
        self.config: Dict[str, Any] = dict(config) if isinstance(config, Mapping) else {}
        if config is not None and not isinstance(config, Mapping):
            logger.warning(f"Configuration for rule '{self.rule_type}' is not a mapping, using defaults")
        self.safety_config = resolve_safety_config(self.config.get('autofix'))

    @abstractmethod
    def _get_rule_type(self) -> str:
        """Return the rule identifier (e.g., 'sentence-case-heading')."""
        pass

    @abstractmethod
    def analyze(self, lines: Sequence[str], context: Optional[Dict[str, Any]] = None) -> List[Violation]:
        """
        Analyze a document and return the violations found.

        Args:
            lines: Document lines without line terminators
            context: Optional host information, e.g. ``{'file': 'docs/guide.md'}``

        Returns:
            List of Violation objects, in line order.
        """
        pass

    @staticmethod
    def _normalize_lines(lines: Any) -> List[str]:
        """Return a list of strings; anything that is not a line becomes empty."""
        if not isinstance(lines, (list, tuple)):
            return []
        return [line if isinstance(line, str) else '' for line in lines]

    def _create_violation(self, line_number: int, message: str, matched_text: str,
                          fix_info: Optional[FixInfo] = None, column: Optional[int] = None,
                          category: Optional[CodeElementCategory] = None) -> Violation:
        return Violation(
            rule=self.rule_type,
            line_number=line_number,
            message=str(message),
            matched_text=str(matched_text),
            fix_info=fix_info,
            column=column,
            category=category.value if category is not None else None,
        )
