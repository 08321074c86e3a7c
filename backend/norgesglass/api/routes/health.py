"""
Health check endpoints.
"""

from fastapi import APIRouter, Depends

from norgesglass.api.dependencies import get_hydrology_client, get_store_directory
from norgesglass.services.narvesen import NarvesenStoreDirectory
from norgesglass.services.nve import NVEHydrologyClient

router = APIRouter()


@router.get("/api/health")
async def health_check() -> dict:
    """Basic health check."""
    return {"status": "healthy"}


@router.get("/api/ready")
async def readiness_check(
    directory: NarvesenStoreDirectory = Depends(get_store_directory),
    hydrology: NVEHydrologyClient = Depends(get_hydrology_client),
) -> dict:
    """Readiness check - reports degraded endpoints without calling upstreams."""
    age = directory.cache.age()
    return {
        "status": "ready" if hydrology.configured else "degraded",
        "hydrology": "configured" if hydrology.configured else "missing_api_key",
        "store_cache_age_seconds": round(age) if age is not None else None,
    }
