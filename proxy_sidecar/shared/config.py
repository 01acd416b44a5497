"""Centralized configuration management for the proxy sidecar."""

import os
from functools import lru_cache


class Config:
    """Configuration class with all environment variables."""

    # API Server Configuration
    SERVER_HOST: str = os.getenv('SERVER_HOST', '0.0.0.0')
    API_PORT: int = int(os.getenv('API_PORT', '8080'))

    # Filesystem layout
    TEMPLATES_PATH: str = os.getenv('TEMPLATES_PATH', '/cfg/tmpl')
    CONFIGS_PATH: str = os.getenv('CONFIGS_PATH', '/cfg')
    # Fragments live next to the base template unless told otherwise
    FRAGMENTS_PATH: str = os.getenv('FRAGMENTS_PATH', '') or TEMPLATES_PATH
    CERTS_PATH: str = os.getenv('CERTS_PATH', '/certs')

    # Proxy process
    PID_FILE: str = os.getenv('PID_FILE', '/var/run/haproxy.pid')
    HAPROXY_BINARY: str = os.getenv('HAPROXY_BINARY', 'haproxy')
    RELOAD_ON_START: bool = os.getenv('RELOAD_ON_START', 'false').lower() == 'true'

    # Logging
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO').upper()

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration values."""
        errors = []

        if not cls.SERVER_HOST:
            errors.append("SERVER_HOST is required")

        if not (1 <= cls.API_PORT <= 65535):
            errors.append(f"API_PORT must be between 1 and 65535, got {cls.API_PORT}")

        for name in ('TEMPLATES_PATH', 'CONFIGS_PATH', 'CERTS_PATH', 'PID_FILE', 'HAPROXY_BINARY'):
            if not getattr(cls, name):
                errors.append(f"{name} is required")

        if errors:
            raise ValueError(f"Configuration errors: {'; '.join(errors)}")

    @classmethod
    def config_file(cls) -> str:
        """Get the path of the compiled proxy configuration."""
        return os.path.join(cls.CONFIGS_PATH, 'haproxy.cfg')


@lru_cache()
def get_config() -> Config:
    """Get validated configuration instance."""
    Config.validate()
    return Config()
