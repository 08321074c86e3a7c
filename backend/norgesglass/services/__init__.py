"""
Services layer for Norgesglass upstream integrations.

MODULES:
- extraction/: Record extraction (store locator HTML, GML first feature)

STANDALONE SERVICES:
- fetcher: Bounded GET with size cap and outcome classification
- cache: Single-slot TTL cache
- geo: Coordinate validation, WMS bbox and WKT circle polygon
- narvesen: Store directory (fetch + extract + cache)
- ngu: Geology lookup via WMS GetFeatureInfo
- nve: HydAPI station search passthrough

ARCHITECTURE:
1. Route validates input (geo.validate_coordinates)
2. Upstream service builds the request and calls BoundedFetcher
3. Extractor turns the body into records (or JSON is checked and passed through)
4. Route serializes the result
"""
