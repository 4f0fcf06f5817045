"""Health checker: cache store and upstream reachability."""

from weatherproxy.ingest.openweather_client import OpenWeatherClient
from weatherproxy.models.common import utc_now_iso
from weatherproxy.models.reporting import HealthStatus
from weatherproxy.storage.cache_store import CacheStore


class HealthChecker:
    def __init__(self, cache: CacheStore, client: OpenWeatherClient | None = None):
        self.cache = cache
        self.client = client

    def check(self, probe_upstream: bool = False) -> HealthStatus:
        upstream_ok: bool | None = None
        if probe_upstream and self.client is not None:
            upstream_ok = self.client.ping()

        return HealthStatus(
            cache_backend=getattr(self.cache, "backend", "unknown"),
            cache_reachable=self.cache.ping(),
            upstream_reachable=upstream_ok,
            checked_at=utc_now_iso(),
        )
