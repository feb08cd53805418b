"""
Redis connection management for one-time code storage.
"""
import asyncio
from typing import Optional
import redis.asyncio as redis
from redis.asyncio import ConnectionPool
from redis.exceptions import RedisError
import structlog

from .config import Settings

logger = structlog.get_logger()

CONNECT_TIMEOUT_SECONDS = 5.0


class RedisManager:
    """Owns the pooled client the code store writes through."""

    def __init__(self, settings: Settings):
        self.url = settings.REDIS_URL
        self.max_connections = settings.REDIS_POOL_SIZE
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[redis.Redis] = None

    async def initialize(self) -> None:
        """
        Open the pool and make sure the server answers.

        Raises:
            ConnectionError: If the server does not answer within the timeout
        """
        self._pool = ConnectionPool.from_url(
            self.url,
            max_connections=self.max_connections,
            decode_responses=True,
            socket_keepalive=True,
        )
        self._client = redis.Redis(connection_pool=self._pool)

        try:
            await asyncio.wait_for(self._client.ping(), timeout=CONNECT_TIMEOUT_SECONDS)
        except (asyncio.TimeoutError, RedisError) as e:
            logger.error("Redis unreachable at startup", error=str(e))
            await self.close()
            raise ConnectionError("Redis connection test failed") from e

        logger.info("Redis connection initialized", max_connections=self.max_connections)

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            raise RuntimeError("Redis client not initialized")
        return self._client

    async def health_check(self) -> bool:
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.error("Redis health check failed", error=str(e))
            return False

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None
        logger.info("Redis connections closed")
