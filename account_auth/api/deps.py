"""
Dependency injection for FastAPI endpoints.
Resolves services from the app container and authenticates bearer tokens.
"""
from typing import Any, Dict, Optional
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..container.container import Container
from ..core.context import RequestContext, current_context
from ..core.exceptions import UnauthenticatedError
from ..services.auth.authentication_service import AuthenticationService

security = HTTPBearer(auto_error=False)


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_auth_service(container: Container = Depends(get_container)) -> AuthenticationService:
    return container.get(AuthenticationService)


def get_request_context(request: Request) -> RequestContext:
    """
    Context opened by the request-context middleware.

    Falls back to a fresh context when the app runs without that middleware.
    """
    ctx = current_context() or getattr(request.state, "context", None)
    if ctx is None:
        ctx = RequestContext.new(method=request.method, path=request.url.path)
        request.state.context = ctx
    return ctx


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    ctx: RequestContext = Depends(get_request_context),
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """
    Authenticate the bearer access token and return its claims.

    Raises:
        UnauthenticatedError: If the header is missing or the token is invalid
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthenticatedError("Authentication required")

    auth_service.authenticate_access_token(ctx, credentials.credentials)
    return auth_service.current_identity(ctx)
