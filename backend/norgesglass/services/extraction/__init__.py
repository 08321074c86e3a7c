"""
Extraction subpackage for recovering records from upstream documents.

Modules:
- store_extractor: Narvesen store locator HTML -> StoreRecords (regex or BeautifulSoup)
- gml_extractor: WMS GetFeatureInfo GML -> fields of the first feature (streaming)
"""

from norgesglass.services.extraction.gml_extractor import (
    FirstFeatureMachine,
    GMLTokenizer,
    Token,
    TokenKind,
    aextract_first_feature,
    extract_first_feature,
    iter_tokens,
)
from norgesglass.services.extraction.store_extractor import (
    RegexStoreExtractor,
    SoupStoreExtractor,
    StoreExtractor,
    get_store_extractor,
)

__all__ = [
    "StoreExtractor",
    "RegexStoreExtractor",
    "SoupStoreExtractor",
    "get_store_extractor",
    "GMLTokenizer",
    "Token",
    "TokenKind",
    "iter_tokens",
    "FirstFeatureMachine",
    "extract_first_feature",
    "aextract_first_feature",
]
