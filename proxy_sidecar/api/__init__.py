"""HTTP API for service registration."""

from .server import create_api_app

__all__ = [
    'create_api_app',
]
