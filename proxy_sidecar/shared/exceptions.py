"""Exception types raised by the sidecar control plane."""

from typing import Optional


class SidecarError(Exception):
    """Base class for all control plane errors."""


class ConfigError(SidecarError):
    """The base template or the fragments directory could not be used."""


class ProxyIOError(SidecarError):
    """A single file read or write failed.

    Attributes:
        path: The file that could not be read or written
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ProcessError(SidecarError):
    """The proxy process could not be started or reloaded."""


class PidFileError(ProcessError):
    """The PID of the running proxy could not be read."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
