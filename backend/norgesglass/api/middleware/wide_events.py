"""
Request middleware emitting one canonical log line per API call.

The event is opened before routing, filled in by the route and service
layers (coordinate, layer, store cache, upstream sizes, handled errors)
and written out once the response status is known:

    app.add_middleware(WideEventMiddleware)

    # anywhere on the request path
    add_coordinate_to_wide_event(coordinate)
    enrich_event(layer="sediment")
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from norgesglass.core.logging import (
    emit_wide_event,
    enrich_event,
    finalize_request_event,
    init_request_event,
)
from norgesglass.services.models import Coordinate

API_PREFIX = "/api/"


class WideEventMiddleware(BaseHTTPMiddleware):
    """
    Opens, finalizes and emits the wide event around each /api request.

    Probes and static client files pass straight through without an event.
    """

    SKIP_PATHS = frozenset({"/api/health", "/api/ready"})

    def _is_tracked(self, path: str) -> bool:
        return path.startswith(API_PREFIX) and path not in self.SKIP_PATHS

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self._is_tracked(request.url.path):
            return await call_next(request)

        headers = request.headers
        init_request_event(
            request_id=headers.get("x-request-id"),
            method=request.method,
            path=request.url.path,
            client_ip=client_ip(request),
            user_agent=headers.get("user-agent", ""),
        )
        if request.query_params:
            enrich_event(**{"http.query_params": dict(request.query_params)})

        status_code, error = 500, None
        try:
            response = await call_next(request)
        except Exception as e:
            error = e
            raise
        else:
            status_code = response.status_code
            return response
        finally:
            emit_wide_event(finalize_request_event(status_code, error))


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For, then X-Real-IP, then the socket peer."""
    forwarded_for = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded_for.split(",")[0].strip()
    if first_hop:
        return first_hop
    if real_ip := request.headers.get("x-real-ip"):
        return real_ip
    return request.client.host if request.client else "unknown"


def add_coordinate_to_wide_event(coordinate: Coordinate) -> None:
    """Record the validated lat/lon the request asked about."""
    enrich_event(coordinate={"lat": coordinate.lat, "lon": coordinate.lon})


def add_error_to_wide_event(error_type: str, message: str, details: dict | None = None) -> None:
    """
    Record an application error that an exception handler turned into a response.

    Such errors never reach the middleware as exceptions, so the handler
    reports them here instead.
    """
    enrich_event(error={"type": error_type, "message": message[:500], "details": details or {}})
