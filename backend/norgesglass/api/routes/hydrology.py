"""
NVE HydAPI stations near a point.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from norgesglass.api.dependencies import get_hydrology_client
from norgesglass.api.middleware import add_coordinate_to_wide_event
from norgesglass.core.logging import enrich_event
from norgesglass.core.models import ErrorResponse
from norgesglass.services.geo import validate_coordinates
from norgesglass.services.nve import NVEHydrologyClient

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid coordinates"},
    502: {"model": ErrorResponse, "description": "HydAPI unreachable, failing or not JSON"},
    503: {"model": ErrorResponse, "description": "NVE API key not configured"},
}


@router.get("/hydrology", responses=ERROR_RESPONSES)
@router.get("/nve", include_in_schema=False)
async def get_hydrology(
    lat: str = Query(""),
    lon: str = Query(""),
    client: NVEHydrologyClient = Depends(get_hydrology_client),
) -> Response:
    """HydAPI station list, passed through verbatim."""
    # Missing key is reported before any input validation
    client.ensure_configured()

    coordinate = validate_coordinates(lat, lon)
    add_coordinate_to_wide_event(coordinate)

    body = await client.stations(coordinate)
    enrich_event(**{"nve.body_bytes": len(body)})

    return Response(content=body, media_type="application/json")
