"""
Key-value store used as the session registry and rate-limit counter.

Two adapters share one interface:
- RedisKeyValueStore: production, backed by redis-py
- InMemoryKeyValueStore: tests and local development without Redis

Store failures surface as StoreUnavailableError. Callers never retry;
an unreachable store is fatal for the call that hit it.

Configuration (environment variables):
- REDIS_URL: Redis connection URL (default: "redis://localhost:6379/0").
             "memory://" selects the in-memory adapter.
"""

import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

import redis

from mediagate.platform.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

MEMORY_URL = "memory://"

# In-memory store: minimum spacing between full sweeps of expired keys.
DEFAULT_SWEEP_INTERVAL_SECONDS = 60


class KeyValueStore(ABC):
    """Namespaced key-value capability with per-key TTL."""

    @abstractmethod
    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        ...

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent or expired."""

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def increment(self, key: str) -> int:
        """Increment an integer counter, creating it at 1. Returns the new count."""

    @abstractmethod
    def expire(self, key: str, ttl_seconds: int) -> None:
        ...

    @abstractmethod
    def ping(self) -> bool:
        ...


class RedisKeyValueStore(KeyValueStore):
    """
    redis-py adapter.

    The connection is created lazily on first use so that the module can
    be imported even when Redis is not yet available.
    """

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self._redis = client

    def _get_redis(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
        return self._redis

    def _unavailable(self, operation: str, key: str, exc: Exception) -> StoreUnavailableError:
        logger.error(
            "Key-value store operation failed",
            extra={
                "operation": operation,
                "key_prefix": key.split(":", 1)[0],
                "error_type": type(exc).__name__,
            },
        )
        return StoreUnavailableError()

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            self._get_redis().set(key, value, ex=max(int(ttl_seconds), 1))
        except redis.RedisError as exc:
            raise self._unavailable("set", key, exc) from exc

    def get(self, key: str) -> Optional[str]:
        try:
            return self._get_redis().get(key)
        except redis.RedisError as exc:
            raise self._unavailable("get", key, exc) from exc

    def delete(self, key: str) -> None:
        try:
            self._get_redis().delete(key)
        except redis.RedisError as exc:
            raise self._unavailable("delete", key, exc) from exc

    def increment(self, key: str) -> int:
        try:
            return int(self._get_redis().incr(key))
        except redis.RedisError as exc:
            raise self._unavailable("increment", key, exc) from exc

    def expire(self, key: str, ttl_seconds: int) -> None:
        try:
            self._get_redis().expire(key, max(int(ttl_seconds), 1))
        except redis.RedisError as exc:
            raise self._unavailable("expire", key, exc) from exc

    def ping(self) -> bool:
        try:
            return bool(self._get_redis().ping())
        except redis.RedisError:
            return False


class InMemoryKeyValueStore(KeyValueStore):
    """
    Process-local store honouring TTLs against an injectable clock.

    Intended for tests and single-process development (``REDIS_URL=memory://``).
    Expired keys are dropped when read, and writes sweep every expired key
    at most once per ``sweep_interval_seconds`` so per-client counters do
    not pile up.

    ``time_fn`` returns epoch seconds; tests pass a controllable clock to
    move past expiries without sleeping.
    """

    def __init__(
        self,
        time_fn: Callable[[], float] = time.time,
        sweep_interval_seconds: int = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ):
        self._time_fn = time_fn
        self._sweep_interval = sweep_interval_seconds
        self._values: dict[str, str] = {}
        self._expires_at: dict[str, float] = {}
        self._lock = threading.Lock()
        self._last_sweep = time_fn()

    def _sweep_expired(self) -> None:
        now = self._time_fn()
        if now - self._last_sweep < self._sweep_interval:
            return
        self._last_sweep = now
        expired = [key for key, deadline in self._expires_at.items() if now >= deadline]
        for key in expired:
            self._values.pop(key, None)
            self._expires_at.pop(key, None)

    def _purge_if_expired(self, key: str) -> None:
        deadline = self._expires_at.get(key)
        if deadline is not None and self._time_fn() >= deadline:
            self._values.pop(key, None)
            self._expires_at.pop(key, None)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._sweep_expired()
            self._values[key] = value
            self._expires_at[key] = self._time_fn() + max(int(ttl_seconds), 1)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            self._purge_if_expired(key)
            return self._values.get(key)

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)
            self._expires_at.pop(key, None)

    def increment(self, key: str) -> int:
        with self._lock:
            self._sweep_expired()
            self._purge_if_expired(key)
            count = int(self._values.get(key, "0")) + 1
            self._values[key] = str(count)
            return count

    def expire(self, key: str, ttl_seconds: int) -> None:
        with self._lock:
            self._purge_if_expired(key)
            if key in self._values:
                self._expires_at[key] = self._time_fn() + max(int(ttl_seconds), 1)

    def ping(self) -> bool:
        return True

    def ttl(self, key: str) -> Optional[float]:
        """Seconds left before ``key`` expires, or None if absent or persistent."""
        with self._lock:
            self._purge_if_expired(key)
            deadline = self._expires_at.get(key)
            if key not in self._values or deadline is None:
                return None
            return deadline - self._time_fn()


# --------------------------------------------------------------------------
# Module-level singleton
# --------------------------------------------------------------------------

_kv_store: Optional[KeyValueStore] = None


def get_kv_store() -> KeyValueStore:
    """
    Return the module-level KeyValueStore singleton.

    Uses REDIS_URL (default: redis://localhost:6379/0).
    """
    global _kv_store
    if _kv_store is None:
        redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
        if redis_url == MEMORY_URL:
            logger.info("Using in-memory key-value store")
            _kv_store = InMemoryKeyValueStore()
        else:
            logger.info("Using Redis key-value store")
            _kv_store = RedisKeyValueStore(redis_url)
    return _kv_store


def reset_kv_store() -> None:
    """Drop the singleton so the next call re-reads configuration."""
    global _kv_store
    _kv_store = None
