"""
Configuration classes for the middleware pipeline.
Each middleware is declared by one of these dataclasses; the factory orders
and installs them at startup.
"""

from typing import Dict, Optional
from dataclasses import dataclass, field
from enum import Enum


class MiddlewareType(str, Enum):
    """Enumeration of available middleware types."""

    REQUEST_CONTEXT = "request_context"
    SECURITY_HEADERS = "security_headers"


@dataclass
class MiddlewareConfig:
    """Base configuration for middleware."""

    enabled: bool = True
    priority: int = 50  # Lower number runs first on the way in
    name: Optional[str] = None

    def __post_init__(self):
        if self.name is None:
            self.name = self.__class__.__name__.replace("Config", "")


@dataclass
class RequestContextConfig(MiddlewareConfig):
    """Correlation id handling and per-request log context."""

    priority: int = 10
    header_name: str = "X-Correlation-Id"
    log_requests: bool = True


@dataclass
class SecurityHeadersConfig(MiddlewareConfig):
    """Static headers added to every response."""

    priority: int = 20
    headers: Dict[str, str] = field(default_factory=lambda: {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Cache-Control": "no-store",
    })
