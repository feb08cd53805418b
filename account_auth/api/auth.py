"""
Authentication API endpoints.
Each endpoint maps one request onto one AuthenticationService operation.
"""
from typing import Any, Dict
from fastapi import APIRouter, Depends, status

from ..schemas.auth_schemas import (
    AuthTokensResponse,
    ErrorResponse,
    ForgotPasswordRequest,
    IdentityResponse,
    LoginRequest,
    MessageResponse,
    RefreshTokenRequest,
    RegisterRequest,
    ResetPasswordRequest,
    VerifyEmailRequest,
)
from ..services.auth.authentication_service import AuthenticationService
from .deps import get_auth_service, get_current_identity

router = APIRouter(prefix="/auth", tags=["Authentication"])

_errors = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_errors,
)
async def register(
    body: RegisterRequest,
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    """Create an account and email a verification code."""
    return await auth_service.register(
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )


@router.post("/login", response_model=AuthTokensResponse, responses=_errors)
async def login(
    body: LoginRequest,
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    """Exchange credentials of a verified account for an access/refresh pair."""
    return await auth_service.authenticate(body.email, body.password)


@router.post("/verify-email", response_model=MessageResponse, responses=_errors)
async def verify_email(
    body: VerifyEmailRequest,
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    return await auth_service.verify_email(body.email, body.otp)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    """Acknowledge a reset request without revealing whether the account exists."""
    return await auth_service.forgot_password(body.email)


@router.post("/reset-password", response_model=MessageResponse, responses=_errors)
async def reset_password(
    body: ResetPasswordRequest,
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    return await auth_service.reset_password(body.email, body.otp, body.new_password)


@router.post("/refresh", response_model=AuthTokensResponse, responses=_errors)
async def refresh(
    body: RefreshTokenRequest,
    auth_service: AuthenticationService = Depends(get_auth_service),
):
    return await auth_service.refresh_token(body.refresh_token)


@router.get("/me", response_model=IdentityResponse, responses={401: {"model": ErrorResponse}})
async def me(identity: Dict[str, Any] = Depends(get_current_identity)):
    """Claims of the access token presented with the request."""
    return identity
