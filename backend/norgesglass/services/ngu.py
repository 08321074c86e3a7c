"""
NGU geology lookup via WMS GetFeatureInfo.

Asks NGU's MapServer what lies under the centre pixel of a small map
window around the coordinate and returns the first feature's attributes.
"""

from contextlib import aclosing

import structlog

from norgesglass.core.constants import (
    DEFAULT_GEOLOGY_LAYER,
    GEOLOGY_LAYERS,
    NGU_MAX_BODY_BYTES,
    WMS_FEATURE_INFO_PARAMS,
)
from norgesglass.core.exceptions import InvalidInputError
from norgesglass.services.extraction import aextract_first_feature
from norgesglass.services.fetcher import BoundedFetcher
from norgesglass.services.geo import wms_bbox
from norgesglass.services.models import Coordinate, GeologyLayerSpec, GeologyResult

logger = structlog.get_logger()

SOURCE = "ngu"


def resolve_layer(name: str | None) -> GeologyLayerSpec:
    """
    Map the public layer name to NGU's WMS endpoint and layer list.

    An empty or missing name means bedrock.

    Raises:
        InvalidInputError: unknown layer name
    """
    name = name or DEFAULT_GEOLOGY_LAYER
    if name not in GEOLOGY_LAYERS:
        raise InvalidInputError("layer must be 'bedrock' or 'sediment'", {"layer": name[:50]})

    wms_url, wms_layers = GEOLOGY_LAYERS[name]
    return GeologyLayerSpec(name=name, wms_url=wms_url, wms_layers=wms_layers)


def build_feature_info_params(coordinate: Coordinate, layer: GeologyLayerSpec) -> dict[str, str]:
    """Query string for a GetFeatureInfo request on the given layer."""
    return {
        **WMS_FEATURE_INFO_PARAMS,
        "LAYERS": layer.wms_layers,
        "QUERY_LAYERS": layer.wms_layers,
        "BBOX": wms_bbox(coordinate),
    }


class NGUGeologyClient:
    """Client for NGU's bedrock and sediment WMS services."""

    def __init__(
        self,
        fetcher: BoundedFetcher,
        max_body_bytes: int = NGU_MAX_BODY_BYTES,
    ):
        self.fetcher = fetcher
        self.max_body_bytes = max_body_bytes
        self.log = logger.bind(component="NGUGeologyClient")

    async def feature_info(self, coordinate: Coordinate, layer: GeologyLayerSpec) -> GeologyResult:
        """
        Look up the geology at a coordinate.

        The response is parsed while it streams in; once the first feature
        closes the rest of the body is not read.

        Raises:
            UpstreamUnavailableError: transport failure, non-2xx, oversized body
            FeatureParseError: malformed GML
        """
        log = self.log.bind(layer=layer.name, lat=coordinate.lat, lon=coordinate.lon)

        chunks = self.fetcher.iter_bytes(
            layer.wms_url,
            source=SOURCE,
            max_bytes=self.max_body_bytes,
            params=build_feature_info_params(coordinate, layer),
        )
        async with aclosing(chunks):
            fields = await aextract_first_feature(chunks)

        log.debug("ngu_feature_info", field_count=len(fields))
        return GeologyResult(layer=layer.name, fields=fields)
