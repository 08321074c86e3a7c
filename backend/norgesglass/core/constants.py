"""
Shared constants for the backend application.

These constants are used across multiple modules and should be
imported from here to ensure consistency.
"""

from typing import Literal

# =============================================================================
# Upstream limits
# =============================================================================

UPSTREAM_TIMEOUT_SECONDS = 15.0

NARVESEN_MAX_BODY_BYTES = 2 * 1024 * 1024  # 2 MB store locator page
NGU_MAX_BODY_BYTES = 2 * 1024 * 1024  # 2 MB GML response
NVE_MAX_BODY_BYTES = 512 * 1024  # 512 KB HydAPI JSON

STORE_CACHE_TTL_SECONDS = 24 * 60 * 60

# =============================================================================
# Norway bounding box
# =============================================================================

LAT_MIN = 57.0
LAT_MAX = 82.0
LON_MIN = -2.0
LON_MAX = 35.0

# =============================================================================
# Geometry
# =============================================================================

POLYGON_RADIUS_DEGREES = 0.1
POLYGON_VERTICES = 8

# Half-width of the map window sent with WMS GetFeatureInfo
WMS_BBOX_OFFSET_DEGREES = 0.01

# =============================================================================
# NGU geology layers
# =============================================================================

# MapServer msGMLOutput wraps each result record in <{layer}_feature>
GML_FEATURE_SUFFIX = "_feature"

GeologyLayerName = Literal["bedrock", "sediment"]

DEFAULT_GEOLOGY_LAYER: GeologyLayerName = "bedrock"

# layer name -> (WMS endpoint, WMS layer list)
GEOLOGY_LAYERS: dict[str, tuple[str, str]] = {
    "bedrock": (
        "https://geo.ngu.no/mapserver/BerggrunnWMS3",
        "Berggrunn_sammenstilt_hovedbergarter",
    ),
    "sediment": (
        "https://geo.ngu.no/mapserver/LosmasserWMS3",
        "Losmasser_temakart_nasjonal",
    ),
}

# Fixed image-space parameters for GetFeatureInfo: query the centre pixel
WMS_FEATURE_INFO_PARAMS = {
    "SERVICE": "WMS",
    "VERSION": "1.1.1",
    "REQUEST": "GetFeatureInfo",
    "INFO_FORMAT": "application/vnd.ogc.gml",
    "SRS": "EPSG:4326",
    "WIDTH": "101",
    "HEIGHT": "101",
    "X": "50",
    "Y": "50",
}

# =============================================================================
# NVE HydAPI
# =============================================================================

# Water level (1000) and discharge (1001) stations only
NVE_STATION_PARAMETERS = "1000,1001"
