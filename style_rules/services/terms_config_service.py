"""
Terms Configuration Service
Manages the YAML-based casing dictionary and rule vocabularies, and builds
the immutable TermDictionary shared by the sentence-case and backtick rules.
"""

import os
import re
import logging
import threading
import yaml
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Pattern, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TermPhrase:
    """A multi-word dictionary entry and its whole-phrase matcher."""
    key: str
    canonical: str
    pattern: Pattern = field(compare=False)


@dataclass(frozen=True)
class TermDictionary:
    """
    Immutable casing dictionary.

    ``terms`` maps a lowercase term or phrase to its canonical casing.
    Multi-word keys are exposed separately through ``phrases`` so callers
    can check them before any single-word lookup.
    """
    terms: Mapping[str, str]
    ambiguous: Mapping[str, Mapping[str, str]]
    phrases: Tuple[TermPhrase, ...]
    canonical_forms: FrozenSet[str]
    camel_case_exemptions: FrozenSet[str] = frozenset()
    snake_case_exemptions: FrozenSet[str] = frozenset()
    hyphen_prefix_exemptions: FrozenSet[str] = frozenset()

    @classmethod
    def build(cls, terms: Mapping[str, str],
              ambiguous: Optional[Mapping[str, Mapping[str, str]]] = None,
              camel_case_exemptions: Iterable[str] = (),
              snake_case_exemptions: Iterable[str] = (),
              hyphen_prefix_exemptions: Iterable[str] = ()) -> 'TermDictionary':
        normalized = {str(key).lower(): str(value) for key, value in terms.items()}
        phrases = tuple(
            TermPhrase(key, canonical, re.compile(r'\b' + re.escape(key) + r'\b', re.IGNORECASE))
            for key, canonical in normalized.items()
            if ' ' in key
        )
        ambiguous_terms = {
            str(word).lower(): MappingProxyType(dict(info))
            for word, info in (ambiguous or {}).items()
        }
        return cls(
            terms=MappingProxyType(normalized),
            ambiguous=MappingProxyType(ambiguous_terms),
            phrases=phrases,
            canonical_forms=frozenset(normalized.values()),
            camel_case_exemptions=frozenset(camel_case_exemptions),
            snake_case_exemptions=frozenset(snake_case_exemptions),
            hyphen_prefix_exemptions=frozenset(p.lower() for p in hyphen_prefix_exemptions),
        )

    def get(self, word: str) -> Optional[str]:
        return self.terms.get(word)

    def __contains__(self, word: object) -> bool:
        return word in self.terms

    def is_ambiguous(self, word: str) -> bool:
        return word in self.ambiguous

    def merged(self, special_terms: Iterable[str] = (),
               ambiguous_terms: Iterable[str] = (),
               hyphen_prefix_exemptions: Iterable[str] = ()) -> 'TermDictionary':
        """
        Return a new dictionary with user configuration layered on top.

        User terms are keyed by their lowercase form. A user spelling that
        differs from an existing entry replaces it and the override is
        logged with both spellings. This dictionary is left untouched.
        """
        special_terms = [t for t in special_terms if isinstance(t, str) and t.strip()]
        ambiguous_terms = [t for t in ambiguous_terms if isinstance(t, str) and t.strip()]
        hyphen_prefix_exemptions = [t for t in hyphen_prefix_exemptions if isinstance(t, str) and t.strip()]
        if not (special_terms or ambiguous_terms or hyphen_prefix_exemptions):
            return self

        terms = dict(self.terms)
        for term in special_terms:
            key = term.lower()
            existing = terms.get(key)
            if existing is not None and existing != term:
                logger.info(f"Configured term '{term}' overrides default casing '{existing}'")
            terms[key] = term

        ambiguous = {word: dict(info) for word, info in self.ambiguous.items()}
        for word in ambiguous_terms:
            key = word.lower()
            ambiguous.setdefault(key, {
                'proper_form': key[:1].upper() + key[1:],
                'reason': f'Configured as ambiguous: "{key}"',
            })

        return TermDictionary.build(
            terms,
            ambiguous,
            self.camel_case_exemptions,
            self.snake_case_exemptions,
            set(self.hyphen_prefix_exemptions) | {p.lower() for p in hyphen_prefix_exemptions},
        )


class TermsConfigService:
    """
    Service for loading term dictionaries and vocabularies from YAML files.
    Provides cached access to casing terms, ambiguous terms, identifier
    exemptions, backtick vocabulary and autofix heuristic vocabulary.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        """Singleton pattern for configuration service."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(TermsConfigService, cls).__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the configuration service if not already initialized."""
        if not getattr(self, '_initialized', False):
            self._config_dir = os.path.join(os.path.dirname(__file__), '..', 'config')
            self._default_dictionary = None
            self._dictionary_lock = threading.Lock()
            self._initialized = True

    @lru_cache(maxsize=32)
    def _load_yaml_config(self, config_name: str) -> Dict[str, Any]:
        """
        Load and cache YAML configuration file.

        Args:
            config_name: Name of the configuration file (without .yaml extension)

        Returns:
            Dict containing the configuration data, or an empty dict when the
            file is missing or malformed
        """
        config_path = os.path.join(self._config_dir, f"{config_name}.yaml")

        if not os.path.exists(config_path):
            logger.warning(f"Vocabulary file {config_name}.yaml not found, using built-in defaults")
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as file:
                data = yaml.safe_load(file) or {}
        except (yaml.YAMLError, OSError) as e:
            logger.warning(f"Could not load {config_name}.yaml: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"{config_name}.yaml does not contain a mapping, using built-in defaults")
            return {}

        logger.debug(f"Loaded vocabulary: {config_name}.yaml")
        return data

    def _get_list(self, config_name: str, key: str, default: List[str]) -> List[str]:
        value = self._load_yaml_config(config_name).get(key, default)
        if not isinstance(value, list):
            logger.warning(f"'{key}' in {config_name}.yaml is not a list, using built-in defaults")
            return list(default)
        return [str(item) for item in value]

    # === CASING TERMS ===

    def get_casing_terms(self) -> Dict[str, str]:
        """Get the lowercase term to canonical casing map."""
        config = self._load_yaml_config('casing_terms')
        terms = config.get('casing_terms', {
            'api': 'API',
            'css': 'CSS',
            'html': 'HTML',
            'json': 'JSON',
            'yaml': 'YAML',
            'github': 'GitHub',
            'javascript': 'JavaScript',
            'markdown': 'Markdown',
        })
        return {str(k).lower(): str(v) for k, v in terms.items()}

    def get_ambiguous_terms(self) -> Dict[str, Dict[str, str]]:
        """Get words that read as common words or proper nouns depending on context."""
        config = self._load_yaml_config('ambiguous_terms')
        terms = config.get('ambiguous_terms', {
            'go': {'proper_form': 'Go', 'reason': 'Could be verb "go" OR Go programming language'},
            'word': {'proper_form': 'Word', 'reason': 'Could be common noun "word" OR Microsoft Word (the software)'},
        })
        return {str(k).lower(): dict(v) for k, v in terms.items()}

    # === IDENTIFIER EXEMPTIONS ===

    def get_camel_case_exemptions(self) -> List[str]:
        """Get brand names that look like camelCase identifiers."""
        return self._get_list('identifier_exemptions', 'camel_case_exemptions',
                              ['iPhone', 'iPad', 'iOS', 'macOS', 'eBay'])

    def get_snake_case_exemptions(self) -> List[str]:
        """Get locale codes that look like snake_case identifiers."""
        return self._get_list('identifier_exemptions', 'snake_case_exemptions',
                              ['en_US', 'en_GB', 'zh_CN'])

    def get_hyphen_prefix_exemptions(self) -> List[str]:
        """Get common English hyphen prefixes that are never misspelled acronyms."""
        return self._get_list('identifier_exemptions', 'hyphen_prefix_exemptions',
                              ['well', 'self', 'step', 'how', 'non', 'pre', 'post'])

    # === BACKTICK VOCABULARY ===

    def get_backtick_ignored_terms(self) -> FrozenSet[str]:
        """Get terms never wrapped in backticks (includes every canonical casing)."""
        ignored = self._get_list('backtick_terms', 'ignored_terms', ['e.g', 'i.e', 'CI/CD'])
        return frozenset(ignored) | frozenset(self.get_casing_terms().values())

    def get_option_patterns(self) -> FrozenSet[str]:
        return frozenset(p.lower() for p in self._get_list(
            'backtick_terms', 'option_patterns', ['on/off', 'true/false', 'yes/no', 'read/write']))

    def get_conceptual_words(self) -> FrozenSet[str]:
        return frozenset(self._get_list(
            'backtick_terms', 'conceptual_words', ['true', 'false', 'yes', 'no', 'on', 'off']))

    def get_directory_prefixes(self) -> FrozenSet[str]:
        return frozenset(self._get_list(
            'backtick_terms', 'directory_prefixes', ['src', 'lib', 'docs', 'tests', 'config']))

    def get_prose_list_words(self) -> FrozenSet[str]:
        return frozenset(self._get_list(
            'backtick_terms', 'prose_list_words', ['tests', 'lints', 'checks', 'files', 'folders']))

    def get_sentence_starters(self) -> FrozenSet[str]:
        return frozenset(self._get_list(
            'backtick_terms', 'sentence_starters', ['The', 'A', 'An', 'This', 'That', 'New', 'Then']))

    # === AUTOFIX HEURISTICS ===

    def get_autofix_vocabulary(self) -> Dict[str, List[str]]:
        """Get the word lists consulted by the autofix confidence heuristics."""
        keys = (
            'command_keywords', 'file_extensions', 'common_words', 'natural_language_phrases',
            'problematic_patterns', 'natural_language_indicators', 'technical_indicators',
            'code_directory_prefixes', 'technical_terms', 'default_safe_words', 'default_unsafe_words',
        )
        return {key: self._get_list('autofix_heuristics', key, []) for key in keys}

    # === TERM DICTIONARY ===

    def get_default_dictionary(self) -> TermDictionary:
        """Build (once) and return the default immutable term dictionary."""
        if self._default_dictionary is None:
            with self._dictionary_lock:
                if self._default_dictionary is None:
                    self._default_dictionary = TermDictionary.build(
                        self.get_casing_terms(),
                        self.get_ambiguous_terms(),
                        self.get_camel_case_exemptions(),
                        self.get_snake_case_exemptions(),
                        self.get_hyphen_prefix_exemptions(),
                    )
                    logger.debug(f"Built default term dictionary with {len(self._default_dictionary.terms)} terms")
        return self._default_dictionary


# Global instance
_config_service = None


def get_terms_config() -> TermsConfigService:
    """Get the global terms configuration service instance."""
    global _config_service
    if _config_service is None:
        _config_service = TermsConfigService()
    return _config_service


def get_default_term_dictionary() -> TermDictionary:
    return get_terms_config().get_default_dictionary()
