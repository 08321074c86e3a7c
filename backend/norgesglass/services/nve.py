"""
NVE HydAPI station search.

Proxies the station list for a small circle around a coordinate. The body
is passed through untouched once it is known to be complete, valid JSON.
"""

import json

import structlog

from norgesglass.core.constants import NVE_MAX_BODY_BYTES, NVE_STATION_PARAMETERS
from norgesglass.core.exceptions import ConfigurationMissingError, InvalidUpstreamJSONError
from norgesglass.services.fetcher import BoundedFetcher
from norgesglass.services.geo import build_circle_polygon
from norgesglass.services.models import Coordinate

logger = structlog.get_logger()

SOURCE = "nve"


def _reject_constant(name: str) -> None:
    """NaN, Infinity and -Infinity are Python extensions, not JSON."""
    raise ValueError(f"invalid JSON constant {name}")


class NVEHydrologyClient:
    """
    HydAPI client that injects the configured API key.

    Without a key the client still constructs; every call then raises
    ConfigurationMissingError so only the hydrology endpoint degrades.
    """

    def __init__(
        self,
        fetcher: BoundedFetcher,
        api_url: str,
        api_key: str | None,
        max_body_bytes: int = NVE_MAX_BODY_BYTES,
    ):
        self.fetcher = fetcher
        self.api_url = api_url
        self._api_key = api_key
        self.max_body_bytes = max_body_bytes
        self.log = logger.bind(component="NVEHydrologyClient")

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def ensure_configured(self) -> None:
        """Raises ConfigurationMissingError when no API key is set."""
        if not self.configured:
            raise ConfigurationMissingError("NVE_API_KEY is not set", {"source": SOURCE})

    async def stations(self, coordinate: Coordinate) -> bytes:
        """
        Active water level / discharge stations near a coordinate.

        Returns:
            Raw JSON body from HydAPI

        Raises:
            ConfigurationMissingError: no API key
            UpstreamUnavailableError: transport failure, non-2xx, oversized body
            InvalidUpstreamJSONError: body is not JSON
        """
        self.ensure_configured()

        body = await self.fetcher.fetch(
            self.api_url,
            source=SOURCE,
            max_bytes=self.max_body_bytes,
            headers={"X-API-Key": self._api_key, "Accept": "application/json"},
            params={
                "Active": "1",
                "ParameterName": NVE_STATION_PARAMETERS,
                "Polygon": build_circle_polygon(coordinate.lat, coordinate.lon),
            },
        )

        try:
            json.loads(body, parse_constant=_reject_constant)
        except (ValueError, RecursionError) as e:
            self.log.warning("nve_invalid_json", body_bytes=len(body), error_type=type(e).__name__)
            raise InvalidUpstreamJSONError(
                f"upstream returned non-JSON body: {e}",
                SOURCE,
                {"body_bytes": len(body)},
            ) from e

        return body
