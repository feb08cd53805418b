"""
FastAPI application entry point for the account authentication service.
"""
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
import structlog
import uvicorn

from .api.auth import router as auth_router
from .api.error_handlers import register_exception_handlers
from .container.container import Container, build_container
from .core.config import Settings, get_settings
from .core.database import DatabaseManager
from .core.logging import configure_logging
from .core.redis import RedisManager
from .middleware.middleware_factory import MiddlewareFactory, default_middleware_configs

logger = structlog.get_logger()


def create_app(settings: Optional[Settings] = None, container: Optional[Container] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use; read from the environment when omitted
        container: Pre-wired container; the lifespan initializes an empty one
    """
    settings = settings or get_settings()
    container = container or build_container(settings)
    configure_logging(settings.DEBUG)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting auth service", version=settings.VERSION, environment=settings.ENVIRONMENT)
        try:
            await container.initialize(settings)
            await container.startup()
            yield
        finally:
            logger.info("Shutting down auth service")
            await container.cleanup()
            logger.info("Auth service shutdown complete")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Account registration, email verification and session tokens",
        version=settings.VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )
    app.state.container = container
    app.state.settings = settings

    MiddlewareFactory().apply(app, default_middleware_configs(settings))
    register_exception_handlers(app)
    app.include_router(auth_router)

    @app.get("/health", tags=["health"])
    async def health_check():
        """Liveness plus the state of the backing stores that are configured."""
        checks = {}
        if container.has(DatabaseManager):
            checks["database"] = await container.get(DatabaseManager).health_check()
        if container.has(RedisManager):
            checks["redis"] = await container.get(RedisManager).health_check()

        healthy = all(checks.values())
        return JSONResponse(
            status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "healthy" if healthy else "degraded",
                "service": settings.APP_NAME,
                "version": settings.VERSION,
                "checks": checks,
            },
        )

    return app


def run_dev():
    """Run development server."""
    uvicorn.run(
        "account_auth.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="debug",
    )


def run_prod():
    """Run production server."""
    uvicorn.run(
        "account_auth.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        workers=4,
        log_level="info",
        access_log=False,
    )


if __name__ == "__main__":
    run_dev()
