"""
Unit Tests for Markup Preservation
Tests that code spans, links, versions, dates and emphasis are hidden behind
placeholders during case checks and restored exactly afterwards.
"""

import pytest

from style_rules.shared.heuristics import (
    get_code_span_ranges, is_acronym, is_code_identifier, is_domain_in_prose, is_inside_code_span,
    is_preserved_placeholder, preserve_segments, restore_segments,
)


@pytest.mark.unit
class TestPreserveSegments:
    """Placeholder substitution and exact restoration."""

    @pytest.mark.parametrize("text", [
        "Use `npm` v1.2.3 here",
        "See [the docs](https://example.com/docs) for **Bold** and *italic* text",
        "Released on 2024-01-15 with `code` inside",
        "**Use `config.yml` now** and _this_",
        "Nothing to preserve here",
    ])
    def test_round_trip_is_exact(self, text):
        preserved = preserve_segments(text)
        assert restore_segments(preserved.processed, preserved.segments) == text

    def test_code_span_then_version(self):
        preserved = preserve_segments("Use `npm` v1.2.3 here")
        assert preserved.processed == "Use __PRESERVED_0__ __PRESERVED_1__ here"
        assert preserved.segments == ("`npm`", "v1.2.3")

    def test_passes_run_in_fixed_order(self):
        preserved = preserve_segments("Use `a` and [b](c) in v2.0")
        assert preserved.processed == "Use __PRESERVED_0__ and __PRESERVED_1__ in __PRESERVED_2__"
        assert preserved.segments == ("`a`", "[b](c)", "v2.0")

    def test_iso_date_preserved(self):
        preserved = preserve_segments("Released 2024-01-15")
        assert preserved.segments == ("2024-01-15",)

    def test_version_inside_link_not_preserved_separately(self):
        preserved = preserve_segments("See [v1.0 notes](https://example.com/v1.0)")
        assert len(preserved.segments) == 1
        assert preserved.processed == "See __PRESERVED_0__"

    def test_nested_code_inside_bold_restores_original(self):
        text = "**Use `code` now**"
        preserved = preserve_segments(text)
        assert preserved.processed == "__PRESERVED_1__"
        assert preserved.segments[1] == text

    def test_unknown_placeholder_left_untouched(self):
        assert restore_segments("keep __PRESERVED_9__", ()) == "keep __PRESERVED_9__"

    def test_placeholder_detection(self):
        assert is_preserved_placeholder("__PRESERVED_3__")
        assert not is_preserved_placeholder("word")


@pytest.mark.unit
class TestWordHeuristics:
    """Acronym and code identifier detection shared by both rules."""

    @pytest.mark.parametrize("word,expected", [
        ("API", True),
        ("GDPR", True),
        ("I", True),
        ("HTTPS", False),
        ("Api", False),
        ("", False),
    ])
    def test_is_acronym(self, word, expected):
        assert is_acronym(word) is expected

    @pytest.mark.parametrize("word,expected", [
        ("useEffect", True),
        ("MyComponent", True),
        ("user_name", True),
        ("_internal_helper", True),
        ("Paris", False),
        ("McDonald", False),
        ("plain", False),
    ])
    def test_is_code_identifier(self, word, expected):
        assert is_code_identifier(word) is expected

    def test_brand_exemption_is_not_identifier(self):
        assert is_code_identifier("iPhone")
        assert not is_code_identifier("iPhone", frozenset({"iPhone"}))


@pytest.mark.unit
class TestCodeSpans:
    """Inline code span ranges."""

    def test_ranges_include_backticks(self):
        assert get_code_span_ranges("a `b` c `d`") == [(2, 5), (8, 11)]

    def test_unpaired_backtick_is_not_a_span(self):
        assert get_code_span_ranges("a `b") == []

    def test_inside_code_span(self):
        assert is_inside_code_span("a `b` c", 3, 4)
        assert not is_inside_code_span("a `b` c", 6, 7)


@pytest.mark.unit
class TestDomainInProse:
    """Bare domains in prose versus domains inside URLs."""

    def test_bare_domain(self):
        assert is_domain_in_prose("example.com", "Visit example.com today", 6)

    def test_domain_inside_url(self):
        line = "Visit https://example.com today"
        assert not is_domain_in_prose("example.com", line, line.index("example"))

    def test_not_a_domain(self):
        assert not is_domain_in_prose("config.yaml", "Edit config.yaml", 5)
