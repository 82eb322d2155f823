"""
Style Rule Types
Core data structures shared by the sentence-case and backtick rules,
the markup preserver and the autofix safety gate.
"""
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


class CodeElementCategory(Enum):
    FILENAME = "filename"
    FILE_PATH = "file-path"
    DIRECTORY_PATH = "directory-path"
    FUNCTION_CALL = "function-call"
    DOTFILE = "dotfile"
    ENV_VAR = "env-var"
    CLI_FLAG = "cli-flag"
    CLI_COMMAND = "cli-command"
    IMPORT_STATEMENT = "import-statement"
    HOST_PORT = "host-port"
    KEY_COMBO = "key-combo"
    SHELL_VAR = "shell-var"
    SHELL_ASSIGNMENT = "shell-assignment"
    IDENTIFIER = "identifier"
    URL = "url"


class AutofixTier(Enum):
    AUTO_FIX = "auto-fix"
    NEEDS_REVIEW = "needs-review"
    SKIP = "skip"


@dataclass(frozen=True)
class FixInfo:
    """A single in-place substitution on one source line (1-based column)."""
    column: int
    delete_count: int
    insert_text: str

    def apply(self, line: str) -> str:
        start = self.column - 1
        return line[:start] + self.insert_text + line[start + self.delete_count:]


@dataclass
class Violation:
    """Represents one rule violation reported on a source line."""
    rule: str
    line_number: int
    message: str
    matched_text: str
    fix_info: Optional[FixInfo] = None
    column: Optional[int] = None
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'rule': self.rule,
            'line_number': self.line_number,
            'message': self.message,
            'matched_text': self.matched_text,
            'column': self.column,
            'category': self.category,
            'fix_info': None,
        }
        if self.fix_info is not None:
            data['fix_info'] = {
                'column': self.fix_info.column,
                'delete_count': self.fix_info.delete_count,
                'insert_text': self.fix_info.insert_text,
            }
        return data


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of classifying one heading or one bold-text span."""
    is_valid: bool
    error_message: Optional[str] = None
    cleaned_text: Optional[str] = None

    @classmethod
    def valid(cls, cleaned_text: Optional[str] = None) -> 'ValidationResult':
        return cls(True, None, cleaned_text)

    @classmethod
    def invalid(cls, message: str, cleaned_text: Optional[str] = None) -> 'ValidationResult':
        return cls(False, message, cleaned_text)


@dataclass(frozen=True)
class PreservedText:
    """
    Text with markup replaced by ``__PRESERVED_N__`` placeholders.

    ``segments[N]`` holds the original text of placeholder ``N``.
    """
    processed: str
    segments: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CodeElementMatch:
    text: str
    start_offset: int
    end_offset: int
    category: CodeElementCategory


@dataclass(frozen=True)
class ConfidenceScore:
    confidence: float
    heuristics: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class AmbiguityInfo:
    term: str
    type: str
    reason: str
    proper_form: str


@dataclass(frozen=True)
class AutofixDecision:
    """One autofix gate decision, immutable once created."""
    rule: str
    original: str
    fixed: str
    confidence: float
    applied: bool
    tier: AutofixTier
    reason: Optional[str] = None
    heuristics: Mapping[str, Any] = field(default_factory=dict)
    ambiguity: Optional[AmbiguityInfo] = None
    line: Optional[str] = None
    line_number: Optional[int] = None
    file: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'rule': self.rule,
            'original': self.original,
            'fixed': self.fixed,
            'confidence': self.confidence,
            'applied': self.applied,
            'tier': self.tier.value,
            'reason': self.reason,
            'heuristics': dict(self.heuristics),
            'file': self.file,
            'line_number': self.line_number,
            'timestamp': self.timestamp,
        }
        if self.ambiguity is not None:
            data['ambiguity'] = {
                'term': self.ambiguity.term,
                'type': self.ambiguity.type,
                'reason': self.ambiguity.reason,
                'proper_form': self.ambiguity.proper_form,
            }
        return data


@dataclass(frozen=True)
class ValidationError:
    """A single configuration validation problem."""
    field: str
    message: str
    value: Any
    expected: str


ViolationList = List[Violation]
