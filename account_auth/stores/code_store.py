"""
One-time code stores.

Both implementations own expiry: a read past a key's TTL behaves exactly like
a read of a key that was never written.
"""
import enum
import heapq
import time
from typing import Callable, Dict, List, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError, WatchError
import structlog

from ..core.exceptions import InfrastructureError
from ..core.security import SecurityService
from ..interfaces.code_store_interface import ICodeStore

logger = structlog.get_logger()


class CodePurpose(str, enum.Enum):
    """Purpose of a one-time code; the value is the key prefix."""

    EMAIL_VERIFICATION = "verify_email"
    PASSWORD_RESET = "reset_password"


def code_key(purpose: CodePurpose, email: str) -> str:
    """Store key for a code, e.g. ``verify_email:a@x.com``."""
    return f"{purpose.value}:{email}"


def _decode(value) -> Optional[str]:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisCodeStore(ICodeStore):
    """Redis-backed code store; expiry is Redis' own key TTL."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self.redis.set(self._make_key(key), value, ex=ttl_seconds)
        except RedisError as e:
            logger.error("Code store set failed", error=str(e))
            raise InfrastructureError() from e

    async def get(self, key: str) -> Optional[str]:
        try:
            value = await self.redis.get(self._make_key(key))
        except RedisError as e:
            logger.error("Code store get failed", error=str(e))
            raise InfrastructureError() from e

        return _decode(value)

    async def delete(self, key: str) -> None:
        try:
            await self.redis.delete(self._make_key(key))
        except RedisError as e:
            logger.error("Code store delete failed", error=str(e))
            raise InfrastructureError() from e

    async def consume(self, key: str, expected: str) -> bool:
        """
        Compare-and-delete under WATCH/MULTI.

        A write to the key between the read and the delete aborts the
        transaction, and the comparison is retried against whatever is stored
        now. A replaced code therefore never matches the stale one.
        """
        full_key = self._make_key(key)
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                while True:
                    try:
                        await pipe.watch(full_key)
                        stored = _decode(await pipe.get(full_key))
                        if stored is None or not SecurityService.codes_match(stored, expected):
                            await pipe.unwatch()
                            return False

                        pipe.multi()
                        pipe.delete(full_key)
                        await pipe.execute()
                        return True
                    except WatchError:
                        logger.debug("Code changed during consume, retrying")
        except RedisError as e:
            logger.error("Code store consume failed", error=str(e))
            raise InfrastructureError() from e


class InMemoryCodeStore(ICodeStore):
    """
    Process-local code store for development and tests.

    Entries are indexed by expiry time in a min-heap and evicted lazily on
    each access, so no background sweeper is needed. Heap entries made stale
    by an overwrite are skipped because their expiry no longer matches the
    live entry.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._expiry_heap: List[Tuple[float, str]] = []

    def _evict_expired(self) -> None:
        now = self._clock()
        while self._expiry_heap and self._expiry_heap[0][0] <= now:
            expires_at, key = heapq.heappop(self._expiry_heap)
            entry = self._entries.get(key)
            if entry is not None and entry[1] == expires_at:
                del self._entries[key]

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._evict_expired()
        expires_at = self._clock() + ttl_seconds
        self._entries[key] = (value, expires_at)
        heapq.heappush(self._expiry_heap, (expires_at, key))

    async def get(self, key: str) -> Optional[str]:
        self._evict_expired()
        entry = self._entries.get(key)
        return entry[0] if entry else None

    async def delete(self, key: str) -> None:
        self._evict_expired()
        self._entries.pop(key, None)

    async def consume(self, key: str, expected: str) -> bool:
        # No await between the check and the pop.
        self._evict_expired()
        entry = self._entries.get(key)
        if entry is None or not SecurityService.codes_match(entry[0], expected):
            return False
        del self._entries[key]
        return True

    def __len__(self) -> int:
        self._evict_expired()
        return len(self._entries)
