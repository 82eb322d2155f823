"""Helpers shared by the sentence-case and backtick rules."""
