"""Certificate management component."""

from .store import CertificateStore, validate_cert_name

__all__ = [
    'CertificateStore',
    'validate_cert_name',
]
