"""Registry change -> compile -> reload orchestration."""

import logging
import threading
from typing import Optional, Union

from ..registry.models import Service
from ..registry.registry import ServiceRegistry
from ..shared.config import Config
from ..shared.exceptions import PidFileError
from ..certmanager.store import CertificateStore
from .compiler import ConfigCompiler, ConfigReader
from .reloader import ProcessReloader

logger = logging.getLogger(__name__)


class ProxyController:
    """Applies registry changes to the running proxy.

    Each public operation mutates the registry, recompiles the configuration
    and reloads the proxy. Operations are serialized so two compile/reload
    pairs never interleave.
    """

    def __init__(
        self,
        registry: ServiceRegistry,
        compiler: ConfigCompiler,
        reloader: ProcessReloader,
        reader: Optional[ConfigReader] = None,
    ):
        self.registry = registry
        self.compiler = compiler
        self.reloader = reloader
        self.reader = reader or ConfigReader(compiler.configs_path)
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: Config, runner=None) -> "ProxyController":
        """Wire every component from the environment configuration."""
        registry = ServiceRegistry(CertificateStore(config.CERTS_PATH))
        compiler = ConfigCompiler(
            registry,
            templates_path=config.TEMPLATES_PATH,
            configs_path=config.CONFIGS_PATH,
            fragments_path=config.FRAGMENTS_PATH,
        )
        reloader = ProcessReloader(
            config_path=compiler.config_path,
            pid_file=config.PID_FILE,
            binary=config.HAPROXY_BINARY,
            runner=runner,
        )
        return cls(registry, compiler, reloader, ConfigReader(config.CONFIGS_PATH))

    def reconfigure(self, service: Service) -> None:
        """Register or replace a service and apply it."""
        with self._lock:
            self.registry.add_service(service)
            self._apply()

    def remove(self, service_name: str) -> None:
        """Unregister a service and apply the change."""
        with self._lock:
            self.registry.remove_service(service_name)
            self._apply()

    def add_cert(self, cert_name: str, content: Optional[Union[str, bytes]] = None) -> None:
        """Register a certificate, storing its content first when given."""
        with self._lock:
            if content:
                self.registry.cert_store.save(cert_name, content)
            self.registry.add_cert(cert_name)
            self._apply()

    def apply(self) -> None:
        """Recompile and reload without changing the registry."""
        with self._lock:
            self._apply()

    def read_config(self) -> str:
        return self.reader.read_config()

    def _apply(self) -> None:
        self.compiler.compile()
        try:
            self.reloader.reload()
        except PidFileError as e:
            # No PID file means no proxy is running yet
            logger.warning(f"{e}; starting a new proxy instead of reloading")
            self.reloader.start()
