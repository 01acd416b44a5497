"""Shared configuration, logging and error types."""

from .config import Config, get_config
from .exceptions import SidecarError, ConfigError, ProxyIOError, ProcessError, PidFileError

__all__ = [
    'Config',
    'get_config',
    'SidecarError',
    'ConfigError',
    'ProxyIOError',
    'ProcessError',
    'PidFileError',
]
