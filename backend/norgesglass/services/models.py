"""
Data classes passed between the upstream services and the API layer.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class StoreRecord:
    """A store recovered from the Narvesen store locator page."""
    name: str
    lat: float
    lng: float
    address: str = ""
    city: str = ""


@dataclass(frozen=True)
class Coordinate:
    """A validated WGS84 point inside Norway."""
    lat: float
    lon: float


@dataclass(frozen=True)
class GeologyLayerSpec:
    """Where to ask NGU for a named geology layer."""
    name: str
    wms_url: str
    wms_layers: str


@dataclass
class GeologyResult:
    """First feature returned by NGU for a point, if any."""
    layer: str
    fields: dict[str, str]

    @property
    def available(self) -> bool:
        return len(self.fields) > 0
