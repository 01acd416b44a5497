"""ASGI app entry point for production deployments.

Usage:
    hypercorn "proxy_sidecar.app:create_app()"
    uvicorn proxy_sidecar.app:create_app --factory
"""

import logging

logger = logging.getLogger(__name__)


def create_app():
    """Factory function to create the ASGI app."""
    from .main import create_asgi_app
    logger.info("Creating ASGI app via factory function")
    return create_asgi_app()
