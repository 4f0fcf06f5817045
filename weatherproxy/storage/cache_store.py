"""Key-value forecast cache: Redis in production, an in-process dict for local runs.

Both stores hold serialized forecast payloads under the raw city name with a
fixed time-to-live. Expired and never-written keys look the same to callers.
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Protocol

import redis

from weatherproxy.config.schema import CacheBackend, CacheConfig
from weatherproxy.errors import CacheReadError, CacheWriteError

logger = logging.getLogger(__name__)


class CacheStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    def ping(self) -> bool: ...


class RedisCacheStore:
    """Thin wrapper around a redis-py client.

    redis.Redis keeps its own connection pool and is safe to share between
    request threads.
    """

    backend = "redis"

    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_settings(
        cls,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: str | None = None,
    ) -> "RedisCacheStore":
        client = redis.Redis(
            host=host,
            port=port,
            db=db,
            password=password,
            decode_responses=True,
        )
        return cls(client)

    def get(self, key: str) -> str | None:
        try:
            value = self.client.get(key)
        except redis.RedisError as e:
            raise CacheReadError(f"Cache read failed for {key!r}: {e}") from e
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            self.client.set(key, value, ex=ttl_seconds)
        except redis.RedisError as e:
            raise CacheWriteError(f"Cache write failed for {key!r}: {e}") from e

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            logger.warning("Redis ping failed: %s", e)
            return False


class MemoryCacheStore:
    """Process-local TTL cache.

    Each worker process has its own copy, so it only fits single-process runs
    and tests.
    """

    backend = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._store: dict[str, tuple[float, str]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            item = self._store.get(key)
            if item is None:
                return None
            expires_at, value = item
            if self._clock() >= expires_at:
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._store[key] = (self._clock() + ttl_seconds, value)

    def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._store)


def build_cache_store(cache: CacheConfig) -> CacheStore:
    """Create the store selected by ``cache.backend``."""
    if cache.backend == CacheBackend.MEMORY:
        logger.warning("Using in-process memory cache; entries are not shared between workers")
        return MemoryCacheStore()
    return RedisCacheStore.from_settings(
        host=cache.host, port=cache.port, db=cache.db, password=cache.password
    )
