"""
Unit tests for the Narvesen store extractors.
"""

import pytest

from norgesglass.services.extraction.store_extractor import (
    RegexStoreExtractor,
    SoupStoreExtractor,
    get_store_extractor,
)
from norgesglass.services.models import StoreRecord


# Trimmed copy of the "finn butikk" markup
SAMPLE_HTML = """
<section class="store-finder">
  <ul class="stores">
    <li data-lat="59.9111" data-lng="10.7503" data-title="Narvesen Oslo S" data-id="1">
      <div class="vcard">
        <div class="street-address">Jernbanetorget 1</div>
        <span class="postal-code">0154</span> <span class="locality">Oslo</span>
      </div>
    </li>
    <li data-lat="60.3929" data-lng="5.3241" data-title="Narvesen Bergen &amp; Omegn">
      <div class="street-address">Strømgaten 4</div>
    </li>
    <li data-lat="63.4305" data-lng="10.3951" data-title="  Narvesen Trondheim Torg  ">
      <span class="locality">Trondheim</span>
    </li>
  </ul>
</section>
"""

SAMPLE_HTML_BAD_COORDINATE = """
<li data-lat="59.9111" data-lng="10.7503" data-title="Good One"><span class="locality">Oslo</span></li>
<li data-lat="abc" data-lng="10.0" data-title="Broken"><span class="locality">Nowhere</span></li>
<li data-lat="69.6492" data-lng="18.9553" data-title="Good Two"><span class="locality">Tromsø</span></li>
"""

SAMPLE_HTML_NO_STORES = """
<h1>Finn butikk</h1>
<p>Siden er under vedlikehold.</p>
"""


class TestRegexStoreExtractor:
    """Test pattern-based store extraction."""

    @pytest.fixture
    def extractor(self):
        return RegexStoreExtractor()

    def test_extracts_all_stores_in_order(self, extractor):
        """Every <li> block becomes one record, in page order."""
        stores = extractor.extract(SAMPLE_HTML)

        assert [s.name for s in stores] == [
            "Narvesen Oslo S",
            "Narvesen Bergen & Omegn",
            "Narvesen Trondheim Torg",
        ]

    def test_full_record(self, extractor):
        """Test all fields of a complete block."""
        stores = extractor.extract(SAMPLE_HTML)

        assert stores[0] == StoreRecord(
            name="Narvesen Oslo S",
            lat=59.9111,
            lng=10.7503,
            address="Jernbanetorget 1",
            city="Oslo",
        )

    def test_missing_address_and_city_are_empty(self, extractor):
        """Optional parts default to empty strings, never leak from a neighbour."""
        stores = extractor.extract(SAMPLE_HTML)

        assert stores[1].address == "Strømgaten 4"
        assert stores[1].city == ""
        assert stores[2].address == ""
        assert stores[2].city == "Trondheim"

    def test_skips_block_with_bad_coordinate(self, extractor):
        """An unparseable coordinate drops only that block."""
        stores = extractor.extract(SAMPLE_HTML_BAD_COORDINATE)

        assert [(s.name, s.city) for s in stores] == [("Good One", "Oslo"), ("Good Two", "Tromsø")]

    def test_skips_block_with_non_ascii_digits(self, extractor):
        html = '<li data-lat="٥٩.٩١" data-lng="١٠.٧٥" data-title="Narvesen Arabisk"></li>'
        assert extractor.extract(html) == []

    def test_no_stores(self, extractor):
        """Unrelated markup gives an empty list, not an error."""
        assert extractor.extract(SAMPLE_HTML_NO_STORES) == []
        assert extractor.extract("") == []

    def test_accepts_bytes(self, extractor):
        """Raw response bodies are decoded as UTF-8."""
        stores = extractor.extract(SAMPLE_HTML.encode("utf-8"))
        assert stores[1].address == "Strømgaten 4"


class TestSoupStoreExtractor:
    """Test BeautifulSoup-based store extraction."""

    @pytest.fixture
    def extractor(self):
        return SoupStoreExtractor()

    def test_agrees_with_regex_extractor(self, extractor):
        """Both extractors read the real markup the same way."""
        assert extractor.extract(SAMPLE_HTML) == RegexStoreExtractor().extract(SAMPLE_HTML)

    def test_skips_block_with_bad_coordinate(self, extractor):
        stores = extractor.extract(SAMPLE_HTML_BAD_COORDINATE)
        assert [s.name for s in stores] == ["Good One", "Good Two"]

    def test_tolerates_attribute_order(self, extractor):
        """Unlike the pattern, CSS selection does not care about attribute order."""
        html = '<li data-title="Narvesen Bodø" data-lng="14.4049" data-lat="67.2804"></li>'

        stores = extractor.extract(html)

        assert stores == [StoreRecord(name="Narvesen Bodø", lat=67.2804, lng=14.4049)]
        assert RegexStoreExtractor().extract(html) == []

    def test_no_stores(self, extractor):
        assert extractor.extract(SAMPLE_HTML_NO_STORES) == []


class TestGetStoreExtractor:
    def test_known_names(self):
        assert isinstance(get_store_extractor("regex"), RegexStoreExtractor)
        assert isinstance(get_store_extractor("soup"), SoupStoreExtractor)

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown store extractor"):
            get_store_extractor("lxml")
