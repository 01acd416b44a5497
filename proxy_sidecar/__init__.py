"""Control plane for an HAProxy reverse-proxy sidecar."""

__version__ = "1.0.0"
