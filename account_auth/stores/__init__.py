"""
Ephemeral one-time code storage.
"""

from .code_store import CodePurpose, InMemoryCodeStore, RedisCodeStore, code_key

__all__ = [
    "CodePurpose",
    "InMemoryCodeStore",
    "RedisCodeStore",
    "code_key",
]
