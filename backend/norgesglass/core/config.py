"""
Core configuration and settings for Norgesglass.
"""

import json
from functools import lru_cache
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from norgesglass.core.constants import (
    NARVESEN_MAX_BODY_BYTES,
    NGU_MAX_BODY_BYTES,
    NVE_MAX_BODY_BYTES,
    STORE_CACHE_TTL_SECONDS,
    UPSTREAM_TIMEOUT_SECONDS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Norgesglass"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False

    # Server
    listen_addr: str = "localhost:8080"
    cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=list)
    static_dir: str = "static"

    # Upstreams
    upstream_timeout: float = UPSTREAM_TIMEOUT_SECONDS
    user_agent: str = "Norgesglass/1.0"

    # Narvesen store locator (HTML)
    narvesen_url: str = "https://narvesen.no/finn-butikk"
    narvesen_max_body_bytes: int = NARVESEN_MAX_BODY_BYTES
    narvesen_cache_ttl_seconds: float = STORE_CACHE_TTL_SECONDS
    store_extractor: Literal["regex", "soup"] = "regex"

    # NGU geology (WMS GetFeatureInfo)
    ngu_max_body_bytes: int = NGU_MAX_BODY_BYTES

    # NVE HydAPI (JSON)
    nve_api_url: str = "https://hydapi.nve.no/api/v1/Stations"
    nve_api_key: str | None = None
    nve_max_body_bytes: int = NVE_MAX_BODY_BYTES

    @property
    def host(self) -> str:
        host, _, _ = self.listen_addr.rpartition(":")
        return host or "0.0.0.0"

    @property
    def port(self) -> int:
        _, _, port = self.listen_addr.rpartition(":")
        return int(port)

    @property
    def has_nve_api_key(self) -> bool:
        return bool(self.nve_api_key)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from JSON string if needed."""
        if isinstance(v, str):
            if not v.strip():
                return []
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # If not valid JSON, treat as comma-separated
                return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("nve_api_key", mode="before")
    @classmethod
    def blank_api_key_is_unset(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("listen_addr")
    @classmethod
    def validate_listen_addr(cls, v: str) -> str:
        """LISTEN_ADDR must be host:port with a numeric port."""
        _, sep, port = v.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError("listen_addr must look like host:port")
        return v

    @field_validator("narvesen_max_body_bytes", "ngu_max_body_bytes", "nve_max_body_bytes")
    @classmethod
    def validate_body_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("body size limits must be positive")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
