"""FastAPI server setup for the control plane API."""

import os
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..haproxy.controller import ProxyController
from ..shared.exceptions import ConfigError, ProcessError, ProxyIOError
from .models import HealthStatus

logger = logging.getLogger(__name__)


def create_api_app(controller: ProxyController, lifespan=None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        controller: Controller every router applies registry changes through
        lifespan: Optional lifespan context manager for startup work

    Returns:
        FastAPI app with all routers registered
    """
    app = FastAPI(
        title="Proxy Sidecar API",
        description="Service registration and HAProxy reconfiguration API",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.controller = controller

    @app.exception_handler(ConfigError)
    async def config_error_handler(request: Request, exc: ConfigError):
        logger.error(f"Configuration error on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(ProxyIOError)
    async def io_error_handler(request: Request, exc: ProxyIOError):
        logger.error(f"I/O error on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": str(exc), "path": exc.path})

    @app.exception_handler(ProcessError)
    async def process_error_handler(request: Request, exc: ProcessError):
        logger.error(f"Proxy process error on {request.url.path}: {exc}")
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.get("/health", response_model=HealthStatus)
    async def health_check():
        """Health check endpoint."""
        cert_count = len(controller.registry.cert_names())
        return HealthStatus(
            status="healthy",
            services_registered=len(controller.registry),
            certificates_loaded=cert_count,
            https_enabled=cert_count > 0,
            config_written=os.path.exists(controller.reader.config_path),
        )

    from .routers import register_all_routers
    register_all_routers(app)

    return app
