"""
FastAPI application factory and main entry point.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from norgesglass.api.middleware import WideEventMiddleware, add_error_to_wide_event
from norgesglass.api.routes import geology, health, hydrology, stores
from norgesglass.core.config import Settings, get_settings
from norgesglass.core.exceptions import (
    ConfigurationMissingError,
    ExtractionFailedError,
    FeatureParseError,
    InvalidInputError,
    NorgesglassException,
    UpstreamUnavailableError,
)
from norgesglass.core.logging import configure_logging
from norgesglass.services.cache import SingleSlotTTLCache
from norgesglass.services.extraction import get_store_extractor
from norgesglass.services.fetcher import BoundedFetcher
from norgesglass.services.models import StoreRecord
from norgesglass.services.narvesen import NarvesenStoreDirectory
from norgesglass.services.ngu import NGUGeologyClient
from norgesglass.services.nve import NVEHydrologyClient

logger = structlog.get_logger()

HTTP_ERROR_TYPES = {
    404: "not_found",
    405: "method_not_allowed",
}


def _error_response(exc: NorgesglassException) -> JSONResponse:
    add_error_to_wide_event(exc.error_type, exc.message, exc.details)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "message": exc.public_message,
                "type": exc.error_type,
            }
        },
    )


def create_app(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the environment
        http_client: Outbound client to use instead of a fresh one
            (tests pass one backed by httpx.MockTransport)
    """
    settings = settings or get_settings()
    owns_client = http_client is None
    client = http_client or httpx.AsyncClient(
        timeout=settings.upstream_timeout,
        follow_redirects=True,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        logger.info("Starting Norgesglass API", version=settings.app_version, listen=settings.listen_addr)
        if not settings.has_nve_api_key:
            logger.warning("NVE_API_KEY environment variable is not set; /api/hydrology will return 503")

        yield

        logger.info("Shutting down Norgesglass API")
        if owns_client:
            await client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Narvesen stores, NGU geology and NVE hydrology as stable JSON",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Upstream wiring, one instance per process
    fetcher = BoundedFetcher(client, timeout=settings.upstream_timeout)
    app.state.settings = settings
    app.state.store_directory = NarvesenStoreDirectory(
        fetcher=fetcher,
        extractor=get_store_extractor(settings.store_extractor),
        cache=SingleSlotTTLCache[StoreRecord](settings.narvesen_cache_ttl_seconds, name="narvesen"),
        url=settings.narvesen_url,
        user_agent=settings.user_agent,
        max_body_bytes=settings.narvesen_max_body_bytes,
    )
    app.state.geology_client = NGUGeologyClient(fetcher, max_body_bytes=settings.ngu_max_body_bytes)
    app.state.hydrology_client = NVEHydrologyClient(
        fetcher,
        api_url=settings.nve_api_url,
        api_key=settings.nve_api_key,
        max_body_bytes=settings.nve_max_body_bytes,
    )

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["GET"],
            allow_headers=["*"],
        )

    # Wide Events middleware - canonical log line per request
    app.add_middleware(WideEventMiddleware)

    # Include routers - order matters for route matching
    app.include_router(health.router, tags=["Health"])
    app.include_router(stores.router, prefix="/api", tags=["Stores"])
    app.include_router(geology.router, prefix="/api", tags=["Geology"])
    app.include_router(hydrology.router, prefix="/api", tags=["Hydrology"])

    # Exception Handlers
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Render routing errors (unknown path, wrong method) in the app error format"""
        error_type = HTTP_ERROR_TYPES.get(exc.status_code, "http_error")
        add_error_to_wide_event(error_type, str(exc.detail))
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "message": exc.detail,
                    "type": error_type,
                }
            },
            headers=exc.headers,
        )

    @app.exception_handler(InvalidInputError)
    async def invalid_input_exception_handler(request: Request, exc: InvalidInputError):
        """Handle bad query parameters"""
        logger.info("Invalid input", url=str(request.url), message=exc.message)
        return _error_response(exc)

    @app.exception_handler(ConfigurationMissingError)
    async def configuration_exception_handler(request: Request, exc: ConfigurationMissingError):
        """Handle endpoints disabled by missing configuration"""
        logger.warning("Configuration missing", url=str(request.url), message=exc.message)
        return _error_response(exc)

    @app.exception_handler(UpstreamUnavailableError)
    async def upstream_exception_handler(request: Request, exc: UpstreamUnavailableError):
        """Handle upstream transport, status and body errors"""
        logger.error(
            "Upstream error",
            url=str(request.url),
            source=exc.source,
            error_type=type(exc).__name__,
            message=exc.message,
            details=exc.details,
        )
        return _error_response(exc)

    @app.exception_handler(ExtractionFailedError)
    async def extraction_exception_handler(request: Request, exc: ExtractionFailedError):
        """Handle upstream documents that no longer match the expected shape"""
        logger.error("Extraction failed", url=str(request.url), message=exc.message, details=exc.details)
        return _error_response(exc)

    @app.exception_handler(FeatureParseError)
    async def parse_exception_handler(request: Request, exc: FeatureParseError):
        """Handle malformed upstream XML"""
        logger.error("GML parse error", url=str(request.url), message=exc.message, details=exc.details)
        return _error_response(exc)

    @app.exception_handler(NorgesglassException)
    async def app_exception_handler(request: Request, exc: NorgesglassException):
        """Handle any other application exception"""
        logger.error("App error", url=str(request.url), message=exc.message)
        return _error_response(exc)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions"""
        logger.error("Unexpected error", url=str(request.url), error=str(exc), exc_info=True)

        # Don't expose internal details in production
        message = str(exc) if settings.debug else "An unexpected error occurred"

        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "message": message,
                    "type": "internal_server_error",
                }
            },
        )

    # Static client, mounted last so /api/* wins; StaticFiles never lists directories
    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.info("Static directory not found, serving API only", static_dir=str(static_dir))

    return app


def run() -> None:
    """Console entry point."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "norgesglass.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


_settings = get_settings()

# Configure structured logging with wide events support
configure_logging(
    json_logs=not _settings.debug,  # JSON in production, console in dev
    log_level="DEBUG" if _settings.debug else "INFO",
)

app = create_app(_settings)


if __name__ == "__main__":
    run()
