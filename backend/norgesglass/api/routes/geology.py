"""
NGU bedrock / sediment lookup.
"""

from fastapi import APIRouter, Depends, Query

from norgesglass.api.dependencies import get_geology_client
from norgesglass.api.middleware import add_coordinate_to_wide_event
from norgesglass.core.logging import enrich_event
from norgesglass.core.models import ErrorResponse, GeologyResponse
from norgesglass.services.geo import validate_coordinates
from norgesglass.services.ngu import NGUGeologyClient, resolve_layer

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid coordinates or layer"},
    500: {"model": ErrorResponse, "description": "Malformed GML from NGU"},
    502: {"model": ErrorResponse, "description": "NGU unreachable or failing"},
}


@router.get("/geology", response_model=GeologyResponse, responses=ERROR_RESPONSES)
@router.get("/ngu", response_model=GeologyResponse, include_in_schema=False)
async def get_geology(
    lat: str = Query(""),
    lon: str = Query(""),
    layer: str = Query(""),
    client: NGUGeologyClient = Depends(get_geology_client),
) -> GeologyResponse:
    """
    Geology at a point in Norway.

    `available` is false when NGU has no feature under the point.
    """
    coordinate = validate_coordinates(lat, lon)
    add_coordinate_to_wide_event(coordinate)

    layer_spec = resolve_layer(layer)
    enrich_event(layer=layer_spec.name)

    result = await client.feature_info(coordinate, layer_spec)
    enrich_event(available=result.available)

    return GeologyResponse(
        layer=result.layer,
        available=result.available,
        fields=result.fields,
    )
