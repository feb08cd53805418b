"""
Factory that turns middleware configuration into an installed pipeline.
"""

from typing import Dict, List, Optional, Sequence, Tuple, Type
from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

from ..core.config import Settings
from .middleware_config import (
    MiddlewareConfig,
    MiddlewareType,
    RequestContextConfig,
    SecurityHeadersConfig,
)
from .request_context import RequestContextMiddleware, SecurityHeadersMiddleware

logger = structlog.get_logger()


class MiddlewareFactory:
    """Registry of middleware classes keyed by their configuration type."""

    def __init__(self):
        self._registry: Dict[Type[MiddlewareConfig], Tuple[MiddlewareType, Type[BaseHTTPMiddleware]]] = {
            RequestContextConfig: (MiddlewareType.REQUEST_CONTEXT, RequestContextMiddleware),
            SecurityHeadersConfig: (MiddlewareType.SECURITY_HEADERS, SecurityHeadersMiddleware),
        }

    def resolve(self, configs: Sequence[MiddlewareConfig]) -> List[Tuple[MiddlewareConfig, Type[BaseHTTPMiddleware]]]:
        """
        Order enabled configs by priority and pair each with its middleware class.

        Raises:
            ValueError: If a config type has no registered middleware
        """
        resolved = []
        for config in sorted(configs, key=lambda c: c.priority):
            if not config.enabled:
                logger.debug("Middleware disabled", name=config.name)
                continue
            entry = self._registry.get(type(config))
            if entry is None:
                raise ValueError(f"Unknown middleware config: {type(config).__name__}")
            middleware_type, middleware_class = entry
            logger.debug("Middleware resolved", name=config.name, type=middleware_type.value)
            resolved.append((config, middleware_class))
        return resolved

    def apply(self, app: FastAPI, configs: Sequence[MiddlewareConfig]) -> List[str]:
        """
        Install the pipeline on ``app``.

        Starlette wraps each added middleware around the previous ones, so the
        stack is added back to front to leave the lowest priority outermost.

        Returns:
            Middleware names in request order
        """
        resolved = self.resolve(configs)
        for config, middleware_class in reversed(resolved):
            app.add_middleware(middleware_class, config=config)

        names = [config.name for config, _ in resolved]
        logger.info("Middleware pipeline configured", middleware=names)
        return names


def default_middleware_configs(settings: Optional[Settings] = None) -> List[MiddlewareConfig]:
    """Default pipeline for the service."""
    header_name = settings.CORRELATION_ID_HEADER if settings else "X-Correlation-Id"
    return [
        RequestContextConfig(header_name=header_name),
        SecurityHeadersConfig(),
    ]
