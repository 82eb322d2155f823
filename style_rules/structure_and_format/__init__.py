"""Rules for document structure and formatting."""
