"""
Core models and types for Norgesglass.

Pydantic schemas for what the API sends to the client.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================


class GeologyLayer(str, Enum):
    BEDROCK = "bedrock"
    SEDIMENT = "sediment"


# =============================================================================
# Base Models
# =============================================================================


class BaseSchema(BaseModel):
    """Base schema with common configuration."""
    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# API Response Models
# =============================================================================


class Store(BaseSchema):
    """One Narvesen store as served by /api/stores."""
    name: str
    lat: float
    lng: float
    address: str = ""
    city: str = ""


class GeologyResponse(BaseSchema):
    layer: GeologyLayer
    available: bool
    fields: dict[str, str] = Field(default_factory=dict)


class ErrorDetail(BaseModel):
    message: str
    type: str


class ErrorResponse(BaseModel):
    error: ErrorDetail
