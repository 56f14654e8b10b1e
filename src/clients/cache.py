"""
Explanation cache backends.

All backends share one contract: get() and set() never raise. A cache that
cannot reach its store logs the problem and behaves like a miss.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

from redis.asyncio import Redis

from src.config import DEFAULT_CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)


class ExplanationCache(ABC):
    """Key/value string store with per-entry TTL."""

    def __init__(self, default_ttl: int = DEFAULT_CACHE_TTL_SECONDS):
        self.default_ttl = default_ttl

    async def connect(self) -> None:
        """Open any backing connection. Called once at startup."""

    async def close(self) -> None:
        """Release any backing connection. Called once at shutdown."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the cached value, or None on miss or failure."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Store a value for ttl seconds (default_ttl when None)."""


class NoOpCache(ExplanationCache):
    """Caching disabled: every read misses, every write is dropped."""

    def __init__(self, default_ttl: int = DEFAULT_CACHE_TTL_SECONDS):
        super().__init__(default_ttl)
        logger.info("Caching is disabled")

    async def get(self, key: str) -> Optional[str]:
        return None

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        return None


class InMemoryCache(ExplanationCache):
    """In-process cache with absolute expiry per entry."""

    def __init__(self, default_ttl: int = DEFAULT_CACHE_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        super().__init__(default_ttl)
        self._clock = clock
        self._entries: Dict[str, Tuple[float, str]] = {}
        logger.info("Using in-memory caching")

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        now = self._clock()
        self._purge_expired(now)
        self._entries[key] = (now + (ttl if ttl is not None else self.default_ttl), value)

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]


def normalize_redis_url(connection_string: str) -> str:
    """Accept 'host:port' as well as full redis:// URLs."""
    if "://" in connection_string:
        return connection_string
    return f"redis://{connection_string}"


class RedisCache(ExplanationCache):
    """Redis-backed cache. A failed connection leaves the cache disconnected, not broken."""

    def __init__(self, connection_string: str, default_ttl: int = DEFAULT_CACHE_TTL_SECONDS, client: Optional[Redis] = None):
        super().__init__(default_ttl)
        self.url = normalize_redis_url(connection_string)
        self._client = client
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        try:
            if self._client is None:
                self._client = Redis.from_url(self.url, decode_responses=True)
            await self._client.ping()
            self._connected = True
            logger.info(f"Connected to Redis successfully at {self.url}")
        except Exception as e:
            logger.error(f"Redis connection failed: {e}")
            self._connected = False

    async def close(self) -> None:
        if self._client is not None:
            try:
                await self._client.aclose()
            except Exception as e:
                logger.warning(f"Error closing Redis connection: {e}")
        self._connected = False

    async def get(self, key: str) -> Optional[str]:
        if not self._connected:
            return None
        try:
            return await self._client.get(key)
        except Exception as e:
            logger.error(f"Error retrieving cache for key: {key}: {e}")
            return None

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        if not self._connected:
            return None
        try:
            await self._client.set(key, value, ex=ttl if ttl is not None else self.default_ttl)
        except Exception as e:
            logger.error(f"Error setting cache for key: {key}: {e}")
