"""Common types and helpers shared across models."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from weatherproxy.models.forecast import ForecastRecord


class CacheSource(StrEnum):
    CACHE = "cache"
    UPSTREAM = "upstream"


@dataclass(frozen=True)
class LookupResult:
    city: str
    record: ForecastRecord
    payload: str  # JSON text written to the response
    source: CacheSource

    @property
    def cache_hit(self) -> bool:
        return self.source == CacheSource.CACHE


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_now_iso() -> str:
    return utc_now().isoformat()
