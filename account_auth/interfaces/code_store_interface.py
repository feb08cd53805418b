"""
One-time code store interface.
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class ICodeStore(Protocol):
    """Key/value store with per-key expiry. The store alone decides expiry."""

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store ``value`` under ``key``, replacing any prior value and TTL.

        Args:
            key: Store key
            value: Value to store
            ttl_seconds: Time to live in seconds
        """
        ...

    async def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Returns:
            The value, or None if the key is absent or expired
        """
        ...

    async def delete(self, key: str) -> None:
        """Remove ``key``; removing an absent key is not an error."""
        ...

    async def consume(self, key: str, expected: str) -> bool:
        """
        Atomically remove ``key`` if its live value equals ``expected``.

        At most one of several concurrent callers presenting the same value
        wins. A mismatched value leaves the stored one untouched, so a stale
        value can never remove a newer one written under the same key.

        Returns:
            True if the value matched and was removed, False otherwise
        """
        ...
