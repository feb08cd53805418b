"""
Service layer.
"""

from .auth import AuthenticationService, TokenService

__all__ = [
    "AuthenticationService",
    "TokenService",
]
