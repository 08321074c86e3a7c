"""
Structured logging and per-request wide events.

Each /api request accumulates one dict of context while it runs (query
coordinate, geology layer, store cache hit or miss, upstream body size,
error) and is logged once as ``request_completed`` when it finishes.
Ordinary component logs still go through structlog and carry the same
request_id.

Keeping every request would mostly log cache hits, so only a sample of
fast successful requests is emitted; errors, slow requests and store
refreshes are always kept.
"""

import logging
import random
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from norgesglass import __version__
from norgesglass.core.config import get_settings

SLOW_REQUEST_MS = 2000
SAMPLE_RATE = 0.10
SERVICE_NAME = "norgesglass-api"

_current_event: ContextVar[dict[str, Any] | None] = ContextVar("wide_event", default=None)
_started_at: ContextVar[float] = ContextVar("wide_event_started_at", default=0.0)


def _assign(event: dict[str, Any], key: str, value: Any) -> None:
    # "stores.cache" -> event["stores"]["cache"]
    *parents, leaf = key.split(".")
    for name in parents:
        event = event.setdefault(name, {})
    event[leaf] = value


def enrich_event(**fields: Any) -> None:
    """
    Attach fields to the wide event of the request being handled.

        enrich_event(layer="bedrock", **{"stores.cache": "hit"})

    Dotted keys become nested objects. Called outside a request (startup,
    unit tests) it does nothing.
    """
    event = _current_event.get()
    if event is None:
        return
    for key, value in fields.items():
        _assign(event, key, value)


def init_request_event(
    request_id: str | None = None,
    method: str = "",
    path: str = "",
    client_ip: str = "",
    user_agent: str = "",
) -> dict[str, Any]:
    """Start a fresh wide event for the current request context."""
    settings = get_settings()
    event: dict[str, Any] = {
        "request_id": request_id or uuid.uuid4().hex[:8],
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        "http": {
            "method": method,
            "path": path,
            "client_ip": client_ip,
            "user_agent": user_agent[:200] or None,
        },
        "service": {
            "name": SERVICE_NAME,
            "version": __version__,
            "environment": settings.environment,
        },
    }
    _current_event.set(event)
    _started_at.set(time.perf_counter())
    return event


def finalize_request_event(status_code: int, error: Exception | None = None) -> dict[str, Any]:
    """Stamp status, duration and outcome on the wide event and return it."""
    event = _current_event.get()
    if event is None:
        event = {}

    duration_ms = int((time.perf_counter() - _started_at.get()) * 1000)
    _assign(event, "http.status_code", status_code)
    event["duration_ms"] = duration_ms
    event["outcome"] = "error" if status_code >= 400 else "success"

    if error is not None:
        event["error"] = {"type": type(error).__name__, "message": str(error)[:500]}
        details = getattr(error, "details", None)
        if details:
            event["error"]["details"] = details

    return event


def should_sample(event: dict[str, Any]) -> bool:
    """
    Decide whether a finished request is logged.

    Kept unconditionally: any 4xx/5xx, anything slower than SLOW_REQUEST_MS
    and requests that refreshed the store cache. The rest at SAMPLE_RATE.
    """
    if event.get("http", {}).get("status_code", 200) >= 400:
        return True
    if event.get("duration_ms", 0) > SLOW_REQUEST_MS:
        return True
    if event.get("stores", {}).get("cache") == "miss":
        return True
    return random.random() < SAMPLE_RATE


def add_request_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """structlog processor: tag component logs with the current request_id."""
    event = _current_event.get()
    if event is not None and "request_id" in event:
        event_dict.setdefault("request_id", event["request_id"])
    return event_dict


def configure_logging(json_logs: bool = True, log_level: str = "INFO") -> None:
    """
    Set up structlog and the stdlib root logger.

    Args:
        json_logs: One JSON object per line (production); otherwise the
            coloured console renderer (development).
        log_level: Minimum level name, e.g. "DEBUG" or "INFO".
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_request_id,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_logs:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    # uvicorn and httpx log through the stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)


def emit_wide_event(event: dict[str, Any]) -> None:
    """Log the finished request at a level matching its status, if sampled."""
    if not should_sample(event):
        return

    status_code = event.get("http", {}).get("status_code", 200)
    log = structlog.get_logger("wide_event")
    if status_code >= 500:
        log.error("request_completed", **event)
    elif status_code >= 400:
        log.warning("request_completed", **event)
    else:
        log.info("request_completed", **event)
