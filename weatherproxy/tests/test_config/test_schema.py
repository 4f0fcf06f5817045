"""Tests for config schema validation."""

import pytest
from pydantic import ValidationError

from weatherproxy.config.schema import (
    CacheBackend,
    CacheConfig,
    ProxyConfig,
    ServerConfig,
    UpstreamConfig,
)


class TestProxyConfig:
    def test_defaults(self):
        config = ProxyConfig()
        assert config.server.port == 8090
        assert config.upstream.timeout_seconds == 2.0
        assert config.upstream.base_url == "https://api.openweathermap.org/data/2.5"
        assert config.cache.backend == CacheBackend.REDIS
        assert config.cache.host == "localhost"
        assert config.cache.port == 6379
        assert config.cache.ttl_minutes == 600

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError, match="Extra inputs are not permitted"):
            ProxyConfig(unknown_field="bad")

    def test_nested_extra_fields_rejected(self):
        with pytest.raises(ValidationError, match="Extra inputs are not permitted"):
            CacheConfig(ttl_minutes=10, bogus=True)


class TestSections:
    def test_ttl_seconds(self):
        assert CacheConfig().ttl_seconds == 36000
        assert CacheConfig(ttl_minutes=1).ttl_seconds == 60

    def test_ttl_must_be_positive(self):
        with pytest.raises(ValidationError):
            CacheConfig(ttl_minutes=0)

    def test_port_bounds(self):
        with pytest.raises(ValidationError):
            ServerConfig(port=0)
        with pytest.raises(ValidationError):
            ServerConfig(port=70000)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            UpstreamConfig(timeout_seconds=0)

    def test_memory_backend(self):
        assert CacheConfig(backend="memory").backend == CacheBackend.MEMORY
