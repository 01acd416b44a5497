"""In-memory service registry.

The registry is the single piece of shared mutable state in the control plane.
Every mutation and every snapshot taken for compilation happens under one lock,
so a compile never observes a half-applied change.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional

from ..certmanager.store import CertificateStore, validate_cert_name
from .models import Service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrySnapshot:
    """Consistent copy of the registry, services ordered by name."""
    services: List[Service]
    certs: FrozenSet[str]

    @property
    def is_empty(self) -> bool:
        return not self.services


class ServiceRegistry:
    """Service name -> Service map plus the set of known certificate names."""

    def __init__(self, cert_store: Optional[CertificateStore] = None):
        self.cert_store = cert_store or CertificateStore()
        self._services: Dict[str, Service] = {}
        self._certs: set = set()
        self._lock = threading.RLock()

    def add_cert(self, cert_name: str) -> None:
        """Remember a certificate name. Adding a known name is a no-op.

        Raises:
            ValueError: If the name would resolve outside the certificate directory
        """
        validate_cert_name(cert_name)
        with self._lock:
            if cert_name in self._certs:
                return
            self._certs.add(cert_name)
        logger.info(f"Registered certificate {cert_name}")

    def get_certs(self) -> Dict[str, bytes]:
        """Read the content of every known certificate.

        Returns:
            Mapping of certificate name to raw file content

        Raises:
            ProxyIOError: If any certificate cannot be read
        """
        return self.cert_store.read_all(self.cert_names())

    def cert_names(self) -> List[str]:
        with self._lock:
            return sorted(self._certs)

    def add_service(self, service: Service) -> None:
        """Insert a service, replacing any previous definition with the same name."""
        stored = service.model_copy(deep=True)
        with self._lock:
            replaced = stored.service_name in self._services
            self._services[stored.service_name] = stored
        logger.info(f"{'Replaced' if replaced else 'Added'} service {stored.service_name}")

    def remove_service(self, service_name: str) -> None:
        """Remove a service. Removing an unknown name is a no-op."""
        with self._lock:
            removed = self._services.pop(service_name, None)
        if removed is not None:
            logger.info(f"Removed service {service_name}")
        else:
            logger.debug(f"Service {service_name} not registered, nothing to remove")

    def get_service(self, service_name: str) -> Optional[Service]:
        with self._lock:
            service = self._services.get(service_name)
            return service.model_copy(deep=True) if service else None

    def list_services(self) -> List[Service]:
        """List all services ordered by name."""
        return self.snapshot().services

    def snapshot(self) -> RegistrySnapshot:
        """Take a consistent copy of services and certificates."""
        with self._lock:
            services = [
                self._services[name].model_copy(deep=True)
                for name in sorted(self._services)
            ]
            certs = frozenset(self._certs)
        return RegistrySnapshot(services=services, certs=certs)

    def __len__(self) -> int:
        with self._lock:
            return len(self._services)

    def __contains__(self, service_name: str) -> bool:
        with self._lock:
            return service_name in self._services
