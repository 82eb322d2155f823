"""
Guard Test Suite

This package contains all Zero False Positive Guard tests for the Markdown style rules.

Each guard test file follows the Three-Part Analysis methodology:
1. Objective Truth Test - Validates that the unflagged pattern is actually correct
2. False Negative Risk Assessment - Ensures real errors are still caught
3. Inversion Test - Confirms the guard doesn't suppress legitimate errors

Guards implemented:
- Guard 1: Backtick Code Elements - Prose Shapes (option lists, times, ratios, domains)
- Guard 2: Sentence Case - Headings and Bold Lead-ins (filenames, emphasis, commit types)
"""
