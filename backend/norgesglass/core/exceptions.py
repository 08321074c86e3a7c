"""
Application exceptions.

Every error the request path can produce is one of these. Each class
carries the HTTP status it maps to and the fixed message shown to clients;
the detailed ``message`` and ``details`` are only logged.
"""

from typing import Any


class NorgesglassException(Exception):
    """Base class for application errors."""

    status_code: int = 500
    error_type: str = "application_error"
    public_message: str = "An unexpected error occurred"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidInputError(NorgesglassException):
    """Bad, missing or out-of-range request parameters."""

    status_code = 400
    error_type = "invalid_input"

    @property
    def public_message(self) -> str:  # type: ignore[override]
        # Validation messages are written by us and safe to echo back
        return self.message


class ConfigurationMissingError(NorgesglassException):
    """A credential required by one endpoint is not configured."""

    status_code = 503
    error_type = "configuration_missing"
    public_message = "NVE API key not configured"


class UpstreamUnavailableError(NorgesglassException):
    """The upstream could not deliver a usable response."""

    status_code = 502
    error_type = "upstream_unavailable"
    public_message = "upstream request failed"

    def __init__(self, message: str, source: str, details: dict[str, Any] | None = None):
        self.source = source
        super().__init__(message, {"source": source, **(details or {})})


class UpstreamTransportError(UpstreamUnavailableError):
    """DNS failure, refused connection, timeout or broken read."""


class UpstreamStatusError(UpstreamUnavailableError):
    """Upstream answered with a non-2xx status."""

    def __init__(self, source: str, status: int):
        self.status = status
        super().__init__(f"upstream returned {status}", source, {"status": status})


class BodyTooLargeError(UpstreamUnavailableError):
    """Upstream body exceeded the per-source size ceiling."""

    public_message = "upstream response too large"

    def __init__(self, source: str, limit: int):
        self.limit = limit
        super().__init__(
            f"upstream response exceeded {limit} byte limit",
            source,
            {"limit_bytes": limit},
        )


class InvalidUpstreamJSONError(UpstreamUnavailableError):
    """Upstream promised JSON but sent something else."""

    public_message = "upstream returned invalid JSON"


class ExtractionFailedError(NorgesglassException):
    """Extraction yielded nothing; the upstream page shape likely changed."""

    status_code = 502
    error_type = "extraction_failed"
    public_message = "upstream request failed"


class FeatureParseError(NorgesglassException):
    """The GML response is not well-formed XML."""

    status_code = 500
    error_type = "parse_error"
    public_message = "failed to parse upstream response"
