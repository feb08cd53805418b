"""
Database models for the account auth service.
"""
from .base import Base
from .account import Account, AccountRecord, CredentialRecord, Role

__all__ = [
    "Base",
    "Account",
    "AccountRecord",
    "CredentialRecord",
    "Role",
]
