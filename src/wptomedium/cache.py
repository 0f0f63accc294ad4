"""Key-value stores with TTL semantics for cached provider data."""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class CacheStore(ABC):
    """Async cache interface. Values must be JSON-serializable."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the cached value or None if missing or expired."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Store a value for ttl seconds."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a value if present."""

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass


class MemoryCacheStore(CacheStore):
    """Process-local cache."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[float, Any]] = {}

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: Any, ttl: int) -> None:
        self._entries[key] = (time.monotonic() + ttl, value)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)


class RedisCacheStore(CacheStore):
    """Redis-backed cache shared between workers."""

    def __init__(self, redis_url: str, max_connections: int = 10):
        """
        Initialize the store. Call connect() before use.

        Args:
            redis_url: Redis connection URL
            max_connections: Connection pool size
        """
        self.redis_url = redis_url
        self.max_connections = max_connections
        self.redis_client: redis.Redis | None = None
        self.connection_pool: redis.ConnectionPool | None = None

    async def connect(self) -> None:
        """Connect to Redis using a connection pool."""
        try:
            self.connection_pool = redis.ConnectionPool.from_url(
                self.redis_url,
                max_connections=self.max_connections,
                retry_on_timeout=True,
                health_check_interval=30,
                decode_responses=True,
            )
            self.redis_client = redis.Redis(connection_pool=self.connection_pool)
            await self.redis_client.ping()
            logger.info(
                f"Connected to Redis for model cache (max_connections={self.max_connections})"
            )
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    async def disconnect(self) -> None:
        """Close the client and its connection pool."""
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None

        if self.connection_pool:
            await self.connection_pool.disconnect()
            self.connection_pool = None

        logger.info("Disconnected from Redis")

    def _client(self) -> redis.Redis:
        if not self.redis_client:
            raise RuntimeError("Redis cache is not connected")
        return self.redis_client

    async def get(self, key: str) -> Any | None:
        data = await self._client().get(key)
        if data is None:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            logger.warning(f"Discarding unreadable cache entry {key}")
            await self.delete(key)
            return None

    async def set(self, key: str, value: Any, ttl: int) -> None:
        await self._client().setex(key, ttl, json.dumps(value))

    async def delete(self, key: str) -> None:
        await self._client().delete(key)
