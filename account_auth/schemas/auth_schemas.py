"""
Authentication-related Pydantic schemas for request/response validation.
Field names on the wire are camelCase; Python attributes are snake_case.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field

PASSWORD_MIN_LENGTH = 6


class RegisterRequest(BaseModel):
    """Registration request schema."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "email": "user@example.com",
                "password": "securepassword123",
                "firstName": "Ada",
                "lastName": "Lovelace",
            }
        },
    )

    email: EmailStr = Field(..., description="Email address, used as the login identifier")
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, description="Account password")
    first_name: Optional[str] = Field(None, alias="firstName", max_length=100)
    last_name: Optional[str] = Field(None, alias="lastName", max_length=100)


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")


class VerifyEmailRequest(BaseModel):
    """Email verification request schema."""

    email: EmailStr
    otp: str = Field(..., min_length=1, max_length=16, description="One-time code sent by email")


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Password reset confirmation schema."""

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    otp: str = Field(..., min_length=1, max_length=16)
    new_password: str = Field(..., alias="newPassword", min_length=PASSWORD_MIN_LENGTH)


class RefreshTokenRequest(BaseModel):
    """Refresh token request schema."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"example": {"refreshToken": "eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9..."}},
    )

    refresh_token: str = Field(..., alias="refreshToken", min_length=1)


class MessageResponse(BaseModel):
    message: str


class UserProfileResponse(BaseModel):
    """Public projection of an account."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    role: str
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")


class AuthTokensResponse(BaseModel):
    """Login and refresh response schema."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    user: UserProfileResponse


class IdentityResponse(BaseModel):
    """Claims of the bearer token that authenticated the request."""

    sub: str
    email: str
    role: str
    isVerified: bool
    iat: int
    exp: int


class ErrorResponse(BaseModel):
    """Body of every error response."""

    success: bool = False
    statusCode: int
    message: str
    error: str
    errorCode: str
    path: str
    timestamp: str
    correlationId: Optional[str] = None
