"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pms.core.auth import PermissionService
from pms.core.config import settings
from pms.api.routes import router as api_router
from pms.api.middleware.logging import LoggingMiddleware
from pms.api.middleware.request_id import RequestIdMiddleware
from pms.utils.logging import configure_logging

logger = structlog.get_logger()


def create_app(permission_service: PermissionService | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        permission_service: Prebuilt service; when omitted the configuration
            file from settings is loaded at startup
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan events."""
        configure_logging(settings.log_level, settings.log_format)

        # A broken configuration must stop startup
        service = permission_service or PermissionService.from_file(
            settings.permissions.config_path
        )
        app.state.permission_service = service
        logger.info(
            "Permission configuration loaded",
            roles=service.get_available_roles(),
            resources=len(service.get_available_resources()),
        )

        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # Middleware (last added is outermost; the request ID must wrap logging)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # Routes
    app.include_router(api_router, prefix="/api")

    # Exception handlers
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.exception("Unhandled error", path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": str(exc) if settings.debug else "An error occurred",
                "request_id": getattr(request.state, "request_id", None),
            },
        )

    @app.get("/health")
    async def health_check(request: Request):
        """Health check; unhealthy until the permission configuration is loaded."""
        service = getattr(request.app.state, "permission_service", None)
        if service is None:
            return JSONResponse(status_code=503, content={"status": "starting"})

        return {
            "status": "healthy",
            "version": settings.app_version,
            "roles": len(service.get_available_roles()),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("pms.main:app", host="0.0.0.0", port=8000)
