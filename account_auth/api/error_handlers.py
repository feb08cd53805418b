"""
Exception handlers rendering every failure in the same JSON shape.
"""
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from ..core.context import current_correlation_id
from ..core.exceptions import AuthServiceError, InfrastructureError

logger = structlog.get_logger()


def _correlation_id(request: Request) -> Optional[str]:
    correlation_id = current_correlation_id()
    if correlation_id is None:
        ctx = getattr(request.state, "context", None)
        correlation_id = ctx.correlation_id if ctx else None
    return correlation_id


def error_response(
    request: Request,
    status_code: int,
    message: str,
    error: str,
    error_code: str,
    headers: Optional[dict] = None,
) -> JSONResponse:
    body = {
        "success": False,
        "statusCode": status_code,
        "message": message,
        "error": error,
        "errorCode": error_code,
        "path": request.url.path,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "correlationId": _correlation_id(request),
    }
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def auth_service_error_handler(request: Request, exc: AuthServiceError) -> JSONResponse:
    if isinstance(exc, InfrastructureError):
        logger.error("Backing store unavailable", error=str(exc.__cause__ or exc))
    else:
        logger.info("Request rejected", error=exc.error, status_code=exc.status_code)

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return error_response(
        request, exc.status_code, exc.message, exc.error, exc.error_code, headers=headers
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors."""
    logger.warning("Validation error", errors=exc.errors())
    messages = [
        f"{'.'.join(str(part) for part in err.get('loc', ())[1:]) or 'body'}: {err.get('msg')}"
        for err in exc.errors()
    ]
    return error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "; ".join(messages) or "Validation failed",
        "ValidationError",
        "VALIDATION_ERROR",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle routing and framework HTTP exceptions."""
    try:
        phrase = HTTPStatus(exc.status_code).phrase
    except ValueError:
        phrase = "Error"
    return error_response(
        request,
        exc.status_code,
        str(exc.detail),
        phrase.replace(" ", ""),
        f"HTTP_{exc.status_code}",
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        method=request.method,
        path=request.url.path,
        exc_info=exc,
    )
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred",
        "InternalServerError",
        "INTERNAL_ERROR",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthServiceError, auth_service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
