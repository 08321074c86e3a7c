"""
Store extraction from the Narvesen "finn butikk" page.

The page has no feed; every store is an <li> carrying its coordinates and
name as data attributes, with the street address and locality somewhere
inside it:

    <li data-lat="59.9111" data-lng="10.7503" data-title="Narvesen Oslo S" ...>
        <div class="street-address">Jernbanetorget 1</div>
        <span class="locality">Oslo</span>
    </li>

Two interchangeable extractors implement the same interface:
- RegexStoreExtractor: pattern match on exactly that shape (default)
- SoupStoreExtractor: BeautifulSoup CSS selection, tolerant of attribute order

Neither raises. An empty result means the markup no longer looks like the
above; callers must treat it as a failure, not as "no stores".
"""

import re
from typing import Protocol

from bs4 import BeautifulSoup

from norgesglass.core.parsers import clean_html_text, parse_decimal
from norgesglass.services.models import StoreRecord

# Whole <li> block; group 0 is the scope for the address/locality lookups
_RE_STORE_BLOCK = re.compile(
    r'<li\s+data-lat="([^"]+)"\s+data-lng="([^"]+)"\s+data-title="([^"]+)"[^>]*>.*?</li>',
    re.DOTALL,
)
_RE_STREET_ADDRESS = re.compile(r'<div class="street-address">([^<]+)</div>')
_RE_LOCALITY = re.compile(r'<span class="locality">([^<]+)</span>')


class StoreExtractor(Protocol):
    """Turns store locator HTML into StoreRecords in document order."""

    def extract(self, html: str | bytes) -> list[StoreRecord]:
        ...


def _as_text(html: str | bytes) -> str:
    if isinstance(html, bytes):
        return html.decode("utf-8", errors="replace")
    return html


class RegexStoreExtractor:
    """Pattern-based extractor scoped to each <li data-lat data-lng data-title> block."""

    def extract(self, html: str | bytes) -> list[StoreRecord]:
        stores = []

        for match in _RE_STORE_BLOCK.finditer(_as_text(html)):
            lat = parse_decimal(match.group(1))
            lng = parse_decimal(match.group(2))
            if lat is None or lng is None:
                continue

            block = match.group(0)
            address = _RE_STREET_ADDRESS.search(block)
            city = _RE_LOCALITY.search(block)

            stores.append(StoreRecord(
                name=clean_html_text(match.group(3)),
                lat=lat,
                lng=lng,
                address=clean_html_text(address.group(1)) if address else "",
                city=clean_html_text(city.group(1)) if city else "",
            ))

        return stores


class SoupStoreExtractor:
    """DOM-based extractor using BeautifulSoup CSS selectors."""

    def __init__(self, parser: str = "html.parser"):
        self.parser = parser

    def extract(self, html: str | bytes) -> list[StoreRecord]:
        soup = BeautifulSoup(_as_text(html), self.parser)
        stores = []

        for item in soup.select("li[data-lat][data-lng][data-title]"):
            lat = parse_decimal(item.get("data-lat"))
            lng = parse_decimal(item.get("data-lng"))
            if lat is None or lng is None:
                continue

            address = item.select_one("div.street-address")
            city = item.select_one("span.locality")

            stores.append(StoreRecord(
                name=item["data-title"].strip(),
                lat=lat,
                lng=lng,
                address=address.get_text(strip=True) if address else "",
                city=city.get_text(strip=True) if city else "",
            ))

        return stores


def get_store_extractor(name: str) -> StoreExtractor:
    """Look up an extractor by its STORE_EXTRACTOR setting value."""
    if name == "regex":
        return RegexStoreExtractor()
    if name == "soup":
        return SoupStoreExtractor()
    raise ValueError(f"Unknown store extractor: {name}")
