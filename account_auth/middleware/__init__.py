"""
Middleware pipeline configured from dataclasses at startup.
"""

from .middleware_config import (
    MiddlewareConfig,
    MiddlewareType,
    RequestContextConfig,
    SecurityHeadersConfig,
)
from .middleware_factory import MiddlewareFactory, default_middleware_configs
from .request_context import RequestContextMiddleware, SecurityHeadersMiddleware

__all__ = [
    "MiddlewareConfig",
    "MiddlewareType",
    "RequestContextConfig",
    "SecurityHeadersConfig",
    "MiddlewareFactory",
    "default_middleware_configs",
    "RequestContextMiddleware",
    "SecurityHeadersMiddleware",
]
