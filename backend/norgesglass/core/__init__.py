"""
Core package initialization.
"""

from norgesglass.core.config import Settings, get_settings, settings
from norgesglass.core.exceptions import (
    BodyTooLargeError,
    ConfigurationMissingError,
    ExtractionFailedError,
    FeatureParseError,
    InvalidInputError,
    InvalidUpstreamJSONError,
    NorgesglassException,
    UpstreamStatusError,
    UpstreamTransportError,
    UpstreamUnavailableError,
)
from norgesglass.core.models import (
    ErrorResponse,
    GeologyLayer,
    GeologyResponse,
    Store,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "settings",
    # Exceptions
    "NorgesglassException",
    "InvalidInputError",
    "ConfigurationMissingError",
    "UpstreamUnavailableError",
    "UpstreamTransportError",
    "UpstreamStatusError",
    "BodyTooLargeError",
    "InvalidUpstreamJSONError",
    "ExtractionFailedError",
    "FeatureParseError",
    # Models
    "GeologyLayer",
    "Store",
    "GeologyResponse",
    "ErrorResponse",
]
