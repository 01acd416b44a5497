"""Pytest configuration and shared fixtures."""

import os
import pytest

from proxy_sidecar.certmanager import CertificateStore
from proxy_sidecar.haproxy import ConfigCompiler, ProcessReloader
from proxy_sidecar.registry import ServiceRegistry

from support import OPTION_ENV_VARS, TEMPLATE_CONTENT, FRAGMENTS, RecordingRunner


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Make sure no template override leaks in from the outer environment."""
    for name in OPTION_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def paths(tmp_path):
    """Create templates, configs and certs directories with the base template."""
    templates = tmp_path / "tmpl"
    configs = tmp_path / "cfg"
    certs = tmp_path / "certs"
    for d in (templates, configs, certs):
        d.mkdir()
    (templates / "haproxy.tmpl").write_text(TEMPLATE_CONTENT)
    return {
        "templates": str(templates),
        "configs": str(configs),
        "certs": str(certs),
        "pid_file": str(tmp_path / "haproxy.pid"),
        "config_file": os.path.join(str(configs), "haproxy.cfg"),
    }


@pytest.fixture
def fragments(paths):
    """Write the per-service fragment files next to the template."""
    for name, content in FRAGMENTS.items():
        with open(os.path.join(paths["templates"], name), "w") as f:
            f.write(content)
    return FRAGMENTS


@pytest.fixture
def registry(paths) -> ServiceRegistry:
    return ServiceRegistry(CertificateStore(paths["certs"]))


@pytest.fixture
def compiler(registry, paths) -> ConfigCompiler:
    return ConfigCompiler(
        registry,
        templates_path=paths["templates"],
        configs_path=paths["configs"],
    )


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def reloader(paths, runner) -> ProcessReloader:
    return ProcessReloader(
        config_path=paths["config_file"],
        pid_file=paths["pid_file"],
        runner=runner,
    )

