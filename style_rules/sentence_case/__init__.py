"""
Sentence Case Package

- token_extraction: heading text extraction and first-word lookup
- case_classifier: heading and bold-text validation
- fix_builder: sentence-case rewrites and fix construction
"""
