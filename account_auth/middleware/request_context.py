"""
Middleware that opens a request scope for every inbound request.
"""

import time
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp
import structlog

from ..api.error_handlers import unhandled_exception_handler
from ..core.context import RequestContext, request_scope
from .middleware_config import RequestContextConfig, SecurityHeadersConfig

logger = structlog.get_logger()


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Reuse the inbound correlation id (or generate one), make a RequestContext
    visible to the request's task, and echo the id on the response.

    Exceptions escaping the app are rendered here rather than by Starlette's
    outermost error middleware, so a 500 carries the id as well.
    """

    def __init__(self, app: ASGIApp, config: RequestContextConfig):
        super().__init__(app)
        self.config = config

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        ctx = RequestContext.new(
            correlation_id=request.headers.get(self.config.header_name) or None,
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
        request.state.context = ctx

        start_time = time.perf_counter()
        with request_scope(ctx):
            try:
                response = await call_next(request)
            except Exception as exc:
                response = await unhandled_exception_handler(request, exc)
            process_time = time.perf_counter() - start_time

            response.headers[self.config.header_name] = ctx.correlation_id
            if self.config.log_requests:
                logger.info(
                    "Request completed",
                    status_code=response.status_code,
                    process_time=round(process_time, 4),
                )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add configured headers to every response."""

    def __init__(self, app: ASGIApp, config: SecurityHeadersConfig):
        super().__init__(app)
        self.config = config

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for header, value in self.config.headers.items():
            response.headers.setdefault(header, value)
        return response
