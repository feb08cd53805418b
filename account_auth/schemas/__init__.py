"""
Request and response schemas.
"""

from .auth_schemas import (
    AuthTokensResponse,
    ErrorResponse,
    ForgotPasswordRequest,
    IdentityResponse,
    LoginRequest,
    MessageResponse,
    RefreshTokenRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UserProfileResponse,
    VerifyEmailRequest,
)

__all__ = [
    "AuthTokensResponse",
    "ErrorResponse",
    "ForgotPasswordRequest",
    "IdentityResponse",
    "LoginRequest",
    "MessageResponse",
    "RefreshTokenRequest",
    "RegisterRequest",
    "ResetPasswordRequest",
    "UserProfileResponse",
    "VerifyEmailRequest",
]
