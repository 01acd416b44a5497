"""HAProxy configuration compiler.

Every compile is a full rebuild: the base template with the environment
overrides applied, the frontend rules of every registered service, then each
fragment file found on disk (or a dummy backend when there is nothing at all
to route to). The result is written to ``<configs_path>/haproxy.cfg``.
"""

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

from ..registry.registry import ServiceRegistry
from ..shared.exceptions import ConfigError, ProxyIOError
from .frontends import DUMMY_BACKEND, render_frontends
from .options import CompilerOptions
from .transforms import apply_template_options

logger = logging.getLogger(__name__)

TEMPLATE_FILE = "haproxy.tmpl"
CONFIG_FILE = "haproxy.cfg"
FRONTEND_FRAGMENT_SUFFIX = "fe.cfg"
BACKEND_FRAGMENT_SUFFIX = "be.cfg"
SECTION_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class CompiledConfig:
    """Final configuration text and the file it belongs in."""
    text: str
    path: str


class ConfigCompiler:
    """Builds the proxy configuration from the registry and the templates directory."""

    def __init__(
        self,
        registry: ServiceRegistry,
        templates_path: str = "/cfg/tmpl",
        configs_path: str = "/cfg",
        fragments_path: Optional[str] = None,
        options: Optional[CompilerOptions] = None,
    ):
        """Initialize the compiler.

        Args:
            registry: Registry to snapshot on every compile
            templates_path: Directory holding ``haproxy.tmpl``
            configs_path: Directory the compiled ``haproxy.cfg`` is written to
            fragments_path: Directory of per-service fragment files
                (defaults to templates_path)
            options: Fixed template overrides; when None they are read from
                the environment on every compile
        """
        self.registry = registry
        self.templates_path = templates_path
        self.configs_path = configs_path
        self.fragments_path = fragments_path or templates_path
        self.options = options

    @property
    def config_path(self) -> str:
        return os.path.join(self.configs_path, CONFIG_FILE)

    def compile(self) -> bool:
        """Render the configuration and write it to disk.

        Returns:
            True once the file has been written

        Raises:
            ConfigError: Invalid environment options, template unreadable or
                fragments directory unlistable
            ProxyIOError: A fragment could not be read or the write failed
        """
        compiled = self.render()
        try:
            with open(compiled.path, "w", encoding="utf-8") as f:
                f.write(compiled.text)
        except OSError as e:
            logger.error(f"Failed to write {compiled.path}: {e}")
            raise ProxyIOError(f"Could not write {compiled.path}: {e}", path=compiled.path) from e

        logger.info(f"Wrote {len(compiled.text)} bytes of configuration to {compiled.path}")
        return True

    def render(self) -> CompiledConfig:
        """Build the configuration text without writing it."""
        options = self.options if self.options is not None else self._options_from_env()
        template = self._read_template()

        # One snapshot per compile so services and certs agree with each other
        snapshot = self.registry.snapshot()
        cert_paths = [self.registry.cert_store.path_for(name) for name in sorted(snapshot.certs)]

        body = apply_template_options(template, options, cert_paths)
        body += render_frontends(snapshot.services)

        fragments = self._read_fragments()
        sections = [body]
        if fragments:
            sections.extend(fragments)
        elif snapshot.is_empty:
            logger.info("No services or fragments registered, adding dummy backend")
            sections.append(DUMMY_BACKEND)

        logger.debug(
            f"Rendered configuration: {len(snapshot.services)} services, "
            f"{len(snapshot.certs)} certificates, {len(fragments)} fragments"
        )
        return CompiledConfig(text=SECTION_SEPARATOR.join(sections), path=self.config_path)

    def _options_from_env(self) -> CompilerOptions:
        try:
            return CompilerOptions.from_env()
        except ValueError as e:
            # pydantic ValidationError is a ValueError too
            logger.error(f"Invalid template options in environment: {e}")
            raise ConfigError(f"Invalid template options: {e}") from e

    def _read_template(self) -> str:
        path = os.path.join(self.templates_path, TEMPLATE_FILE)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            logger.error(f"Failed to read template {path}: {e}")
            raise ConfigError(f"Could not read the template {path}: {e}") from e

    def list_fragments(self) -> List[str]:
        """List fragment file names: frontends first, then backends, each sorted."""
        try:
            names = sorted(os.listdir(self.fragments_path))
        except OSError as e:
            logger.error(f"Failed to list fragments directory {self.fragments_path}: {e}")
            raise ConfigError(f"Could not read the directory {self.fragments_path}: {e}") from e

        frontends = [n for n in names if n.endswith(FRONTEND_FRAGMENT_SUFFIX)]
        backends = [n for n in names if n.endswith(BACKEND_FRAGMENT_SUFFIX)]
        return frontends + backends

    def _read_fragments(self) -> List[str]:
        contents = []
        for name in self.list_fragments():
            path = os.path.join(self.fragments_path, name)
            try:
                with open(path, "r", encoding="utf-8") as f:
                    contents.append(f.read())
            except OSError as e:
                logger.error(f"Failed to read fragment {path}: {e}")
                raise ProxyIOError(f"Could not read the file {path}: {e}", path=path) from e
        return contents


class ConfigReader:
    """Reads back the last compiled configuration."""

    def __init__(self, configs_path: str = "/cfg"):
        self.configs_path = configs_path

    @property
    def config_path(self) -> str:
        return os.path.join(self.configs_path, CONFIG_FILE)

    def read_config(self) -> str:
        path = self.config_path
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            logger.error(f"Failed to read configuration {path}: {e}")
            raise ProxyIOError(f"Could not read {path}: {e}", path=path) from e
