"""
Shared parsing utilities for data extraction.

Common functions for parsing and normalizing values pulled out of
upstream HTML attributes, query strings and GML text.
"""

import html
import math
import re

# Plain decimal notation, optionally with exponent. No surrounding
# whitespace, no thousands separators, no "nan"/"inf", ASCII digits only.
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def parse_decimal(value: str | None) -> float | None:
    """
    Parse a strictly formatted decimal number.

    Examples:
        "59.91" -> 59.91
        "-2" -> -2.0
        "1e-3" -> 0.001
        " 59.91" -> None (whitespace is not trimmed)
        "NaN" -> None
        "٥٩.٩١" -> None (non-ASCII digits)
        "abc" -> None
        None -> None

    Args:
        value: String representation of number or None

    Returns:
        Parsed finite float or None if not parseable
    """
    if value is None:
        return None

    if not _DECIMAL_RE.fullmatch(value):
        return None

    number = float(value)
    if not math.isfinite(number):
        # Exponent overflow, e.g. "1e999"
        return None
    return number


def clean_html_text(value: str | None) -> str:
    """
    Decode HTML entities and trim surrounding whitespace.

    Examples:
        "  Narvesen Oslo S " -> "Narvesen Oslo S"
        "Kj&oslash;pmannsgata 1" -> "Kjøpmannsgata 1"
        None -> ""
    """
    if value is None:
        return ""
    return html.unescape(value).strip()


def local_name(tag: str) -> str:
    """
    Strip a namespace prefix or Clark-notation URI from an XML tag name.

    Examples:
        "gml:featureMember" -> "featureMember"
        "{http://www.opengis.net/gml}boundedBy" -> "boundedBy"
        "navn" -> "navn"
    """
    if tag.startswith("{"):
        return tag.rpartition("}")[2]
    return tag.rpartition(":")[2]
