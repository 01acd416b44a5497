"""Router registration for the control plane API."""

import logging
from fastapi import FastAPI

from .certificates import create_router as create_certificates_router
from .config import create_router as create_config_router
from .services import create_router as create_services_router

logger = logging.getLogger(__name__)


def register_all_routers(app: FastAPI) -> None:
    """Register all routers with the FastAPI app.

    Args:
        app: FastAPI application with ``controller`` in app.state

    Raises:
        RuntimeError: If the controller has not been attached
    """
    if not hasattr(app.state, 'controller'):
        raise RuntimeError("Required component 'controller' not found in app.state")

    controller = app.state.controller

    routers_config = [
        ("services", create_services_router(controller), "/services"),
        ("certificates", create_certificates_router(controller), "/certificates"),
        ("config", create_config_router(controller), "/config"),
    ]

    for name, router, prefix in routers_config:
        app.include_router(router, prefix=prefix)
        logger.info(f"Included {name} router at {prefix}")
