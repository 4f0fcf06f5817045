"""Pydantic v2 configuration schema with strict validation."""

from enum import StrEnum

from pydantic import BaseModel, Field

from weatherproxy.config.defaults import (
    DEFAULT_CACHE_TTL_MINUTES,
    DEFAULT_HTTP_PORT,
    DEFAULT_REDIS_HOST,
    DEFAULT_REDIS_PORT,
    DEFAULT_UPSTREAM_TIMEOUT,
    OPENWEATHER_BASE_URL,
)


class CacheBackend(StrEnum):
    REDIS = "redis"
    MEMORY = "memory"


class ServerConfig(BaseModel):
    model_config = {"extra": "forbid"}

    host: str = "0.0.0.0"
    port: int = Field(default=DEFAULT_HTTP_PORT, ge=1, le=65535)


class UpstreamConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = OPENWEATHER_BASE_URL
    api_key: str = ""
    timeout_seconds: float = Field(default=DEFAULT_UPSTREAM_TIMEOUT, gt=0.0)


class CacheConfig(BaseModel):
    model_config = {"extra": "forbid"}

    backend: CacheBackend = CacheBackend.REDIS
    host: str = DEFAULT_REDIS_HOST
    port: int = Field(default=DEFAULT_REDIS_PORT, ge=1, le=65535)
    db: int = Field(default=0, ge=0)
    password: str | None = None
    ttl_minutes: int = Field(default=DEFAULT_CACHE_TTL_MINUTES, ge=1)

    @property
    def ttl_seconds(self) -> int:
        return self.ttl_minutes * 60


class LoggingConfig(BaseModel):
    model_config = {"extra": "forbid"}

    level: str = "INFO"
    json_format: bool = False


class ProxyConfig(BaseModel):
    model_config = {"extra": "forbid"}

    server: ServerConfig = ServerConfig()
    upstream: UpstreamConfig = UpstreamConfig()
    cache: CacheConfig = CacheConfig()
    logging: LoggingConfig = LoggingConfig()
