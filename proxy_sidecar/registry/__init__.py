"""Service registry component."""

from .models import Service, ServiceDest
from .registry import ServiceRegistry, RegistrySnapshot

__all__ = [
    'Service',
    'ServiceDest',
    'ServiceRegistry',
    'RegistrySnapshot',
]
