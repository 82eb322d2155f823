"""Rules for technical elements in prose."""
