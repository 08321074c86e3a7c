"""
Narvesen store list.
"""

from fastapi import APIRouter, Depends

from norgesglass.api.dependencies import get_store_directory
from norgesglass.core.models import ErrorResponse, Store
from norgesglass.services.narvesen import NarvesenStoreDirectory

router = APIRouter()

ERROR_RESPONSES = {
    502: {"model": ErrorResponse, "description": "Store page unreachable or no longer parseable"},
}


@router.get("/stores", response_model=list[Store], responses=ERROR_RESPONSES)
@router.get("/narvesen", response_model=list[Store], include_in_schema=False)
async def list_stores(
    directory: NarvesenStoreDirectory = Depends(get_store_directory),
) -> list[Store]:
    """Every Narvesen store with coordinates, address and city."""
    stores = await directory.list_stores()
    return [Store.model_validate(store) for store in stores]
