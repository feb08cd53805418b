"""
Authentication services.
Token signing is kept apart from the flow orchestration that uses it.
"""

from .authentication_service import AuthenticationService
from .token_service import TokenClaims, TokenPair, TokenService

__all__ = [
    "AuthenticationService",
    "TokenClaims",
    "TokenPair",
    "TokenService",
]
