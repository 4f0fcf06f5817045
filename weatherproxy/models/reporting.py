"""Operational health models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class HealthStatus:
    cache_backend: str
    cache_reachable: bool
    upstream_reachable: bool | None  # None when the upstream was not probed
    checked_at: str

    @property
    def ok(self) -> bool:
        return self.cache_reachable and self.upstream_reachable is not False
