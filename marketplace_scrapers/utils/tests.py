"""
Tests for shared extraction helpers
"""
import pytest

from .common_extractors import (
    CommonExtractors, absolute_url, extract_price, first_of, parse_document, parse_price
)


class TestExtractPrice:

    @pytest.mark.parametrize("value,expected", [
        ("$1,234.50", 1234.50),
        ("1234.50", 1234.50),
        ("$99", 99.0),
        ("From 45 USD", 45.0),
        ("$1,234,567", 1234567.0),
        (150, 150.0),
        (99.5, 99.5),
    ])
    def test_parses_numeric_values(self, value, expected):
        assert extract_price(value) == expected

    @pytest.mark.parametrize("value", [None, "", "free", "TBD", ",", True])
    def test_returns_none_without_digits(self, value):
        assert extract_price(value) is None

    def test_first_numeric_match_wins(self):
        assert extract_price("12 to 80") == 12.0

    def test_skips_separator_only_match(self):
        assert extract_price(", then 30") == 30.0


class TestParsePrice:

    def test_requires_currency_symbol(self):
        assert parse_price("$250.00") == 250.0
        assert parse_price("250.00") is None

    def test_strips_thousands_separators(self):
        assert parse_price("from $2,500 each") == 2500.0

    def test_first_match_wins(self):
        assert parse_price("$45 - $120") == 45.0

    @pytest.mark.parametrize("text", [None, "", "Sold out", "$"])
    def test_malformed_input_is_none(self, text):
        assert parse_price(text) is None


class TestUrlHelpers:

    def test_relative_href_is_joined_to_origin(self):
        assert absolute_url("/hamilton-tickets/production/123", "https://www.vividseats.com") == \
            "https://www.vividseats.com/hamilton-tickets/production/123"

    def test_absolute_href_is_kept(self):
        url = "https://m.vividseats.com/production/9"
        assert absolute_url(url, "https://www.vividseats.com") == url

    def test_missing_href(self):
        assert absolute_url(None, "https://www.vividseats.com") is None

    def test_first_of(self):
        assert first_of(["a", "b"]) == "a"
        assert first_of([]) is None
        assert first_of("a") == "a"


class TestCommonExtractors:

    @pytest.fixture
    def common(self):
        return CommonExtractors("https://www.vividseats.com")

    def test_select_text_uses_selector_priority(self, common):
        card = parse_document(
            '<div><span class="event-title">Fallback</span><h3>Primary</h3></div>'
        ).div
        assert common.select_text(card, ("h3", ".event-title")) == "Primary"
        assert common.select_text(card, (".missing", ".event-title")) == "Fallback"
        assert common.select_text(card, (".missing",), default="x") == "x"

    def test_first_anchor_and_image(self, common):
        card = parse_document('<div><img src="/a.png"><a href="/production/1">Go</a></div>').div
        assert common.first_anchor(card)["href"] == "/production/1"
        assert common.image_src(card) == "/a.png"

    def test_attribute_default(self, common):
        assert common.safe_extract_attribute(None, "href") is None
