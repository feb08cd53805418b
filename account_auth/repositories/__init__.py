"""
Repository implementations following the Repository pattern.
Provides data access layer abstraction over the account table.
"""

from .account_repository import AccountRepository

__all__ = [
    "AccountRepository"
]
