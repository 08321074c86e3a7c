"""
Unit tests for shared parsing utilities.
"""

import pytest

from norgesglass.core.parsers import clean_html_text, local_name, parse_decimal


class TestParseDecimal:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("59.91", 59.91),
            ("-2", -2.0),
            ("+35", 35.0),
            ("60.", 60.0),
            (".5", 0.5),
            ("1e-3", 0.001),
            ("6.0E1", 60.0),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_decimal(value) == expected

    @pytest.mark.parametrize(
        "value",
        [None, "", " 59.91", "59.91 ", "abc", "10,75", "1_000", "NaN", "inf", "-Infinity", "1e999", "0x1A", ".", "٥٩.٩١", "５９"],
    )
    def test_invalid(self, value):
        assert parse_decimal(value) is None


class TestCleanHtmlText:
    def test_entities_and_whitespace(self):
        assert clean_html_text("  Kj&oslash;pmannsgata&nbsp;1 ") == "Kjøpmannsgata\xa01"
        assert clean_html_text("Bergen &amp; Omegn") == "Bergen & Omegn"
        assert clean_html_text("&#229;pen") == "åpen"

    def test_none(self):
        assert clean_html_text(None) == ""


class TestLocalName:
    @pytest.mark.parametrize(
        "tag,expected",
        [
            ("navn", "navn"),
            ("gml:featureMember", "featureMember"),
            ("{http://www.opengis.net/gml}boundedBy", "boundedBy"),
        ],
    )
    def test_local_name(self, tag, expected):
        assert local_name(tag) == expected
