"""Lookup pipeline: cache-aside forecast retrieval for one city."""

import logging
from typing import Protocol

from weatherproxy.config.schema import ProxyConfig
from weatherproxy.errors import CacheReadError, InvalidCityError
from weatherproxy.ingest.openweather_client import OpenWeatherClient
from weatherproxy.models.common import CacheSource, LookupResult
from weatherproxy.models.forecast import ForecastRecord
from weatherproxy.storage.cache_store import CacheStore, build_cache_store

logger = logging.getLogger(__name__)


class ForecastGateway(Protocol):
    def fetch_forecast(self, city: str) -> ForecastRecord: ...


class LookupPipeline:
    """Serve a forecast from the cache, falling back to the upstream provider.

    Holds no per-request state. Concurrent misses for the same city each hit
    the upstream and each write the cache; the last write wins.
    """

    def __init__(self, cache: CacheStore, gateway: ForecastGateway, ttl_seconds: int):
        self.cache = cache
        self.gateway = gateway
        self.ttl_seconds = ttl_seconds

    def run(self, city: str | None) -> LookupResult:
        """Return the forecast for ``city``.

        Cache read faults and undecodable cache entries count as misses.
        Upstream failures and cache write faults propagate to the caller.
        """
        if not city or not city.strip():
            raise InvalidCityError()

        cached = self._read_cache(city)
        if cached is not None:
            return cached

        logger.info("Cache miss for city=%s, fetching upstream", city)
        record = self.gateway.fetch_forecast(city)
        payload = record.to_json()

        # CacheWriteError propagates: the fetched data must not be served as
        # if it had been persisted.
        self.cache.set(city, payload, self.ttl_seconds)
        logger.info("Cached forecast for city=%s (ttl=%ds)", city, self.ttl_seconds)

        return LookupResult(
            city=city, record=record, payload=payload, source=CacheSource.UPSTREAM
        )

    def _read_cache(self, city: str) -> LookupResult | None:
        try:
            raw = self.cache.get(city)
        except CacheReadError as e:
            logger.warning("Cache read failed, treating as miss: %s", e)
            return None
        if raw is None:
            return None

        try:
            record = ForecastRecord.from_json(raw)
        except ValueError as e:
            logger.warning("Discarding undecodable cache entry for city=%s: %s", city, e)
            return None

        logger.debug("Cache hit for city=%s", city)
        return LookupResult(
            city=city, record=record, payload=record.to_json(), source=CacheSource.CACHE
        )


def build_pipeline(config: ProxyConfig, cache: CacheStore | None = None) -> LookupPipeline:
    """Wire the configured cache store and OpenWeather client into a pipeline."""
    if cache is None:
        cache = build_cache_store(config.cache)
    gateway = OpenWeatherClient(
        api_key=config.upstream.api_key,
        base_url=config.upstream.base_url,
        timeout=config.upstream.timeout_seconds,
    )
    return LookupPipeline(cache, gateway, ttl_seconds=config.cache.ttl_seconds)
