"""
Unit tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from norgesglass.core.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("LISTEN_ADDR", "NVE_API_KEY", "CORS_ORIGINS", "STORE_EXTRACTOR", "NVE_MAX_BODY_BYTES"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.listen_addr == "localhost:8080"
        assert settings.host == "localhost"
        assert settings.port == 8080
        assert settings.nve_api_key is None
        assert not settings.has_nve_api_key
        assert settings.narvesen_cache_ttl_seconds == 86400
        assert settings.nve_max_body_bytes == 512 * 1024
        assert settings.store_extractor == "regex"
        assert settings.cors_origins == []

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("LISTEN_ADDR", ":9000")
        monkeypatch.setenv("NVE_API_KEY", "abc123")
        monkeypatch.setenv("STORE_EXTRACTOR", "soup")

        settings = Settings(_env_file=None)

        assert settings.host == "0.0.0.0"
        assert settings.port == 9000
        assert settings.nve_api_key == "abc123"
        assert settings.has_nve_api_key
        assert settings.store_extractor == "soup"

    def test_blank_api_key_is_unset(self, monkeypatch):
        monkeypatch.setenv("NVE_API_KEY", "   ")
        assert Settings(_env_file=None).nve_api_key is None

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ('["http://localhost:3000"]', ["http://localhost:3000"]),
            ("http://a.example, http://b.example", ["http://a.example", "http://b.example"]),
            ("", []),
        ],
    )
    def test_cors_origins(self, monkeypatch, raw, expected):
        monkeypatch.setenv("CORS_ORIGINS", raw)
        assert Settings(_env_file=None).cors_origins == expected

    @pytest.mark.parametrize("listen_addr", ["localhost", "localhost:http", "8080:"])
    def test_invalid_listen_addr(self, listen_addr):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, listen_addr=listen_addr)

    def test_body_limit_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("NVE_MAX_BODY_BYTES", "0")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_unknown_extractor_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, store_extractor="lxml")
