"""Certificate file store.

Certificates are opaque files in a single directory, addressed by name.
Nothing here parses or validates their content.
"""

import logging
import os
from typing import Dict, Iterable, Union

from ..shared.exceptions import ProxyIOError

logger = logging.getLogger(__name__)


def validate_cert_name(cert_name: str) -> str:
    """Reject names that would resolve outside the certificate directory."""
    if not cert_name or "/" in cert_name or os.sep in cert_name or cert_name in (".", ".."):
        raise ValueError(f"Invalid certificate name: {cert_name!r}")
    return cert_name


class CertificateStore:
    """Resolves certificate names to files under the certificate directory."""

    def __init__(self, certs_path: str = "/certs"):
        self.certs_path = certs_path

    def path_for(self, cert_name: str) -> str:
        """Get the on-disk path of a certificate."""
        return os.path.join(self.certs_path, cert_name)

    def read(self, cert_name: str) -> bytes:
        """Read a single certificate as raw bytes.

        Raises:
            ProxyIOError: If the file cannot be read
        """
        path = self.path_for(cert_name)
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            logger.error(f"Failed to read certificate {cert_name} from {path}: {e}")
            raise ProxyIOError(f"Could not read certificate {path}: {e}", path=path) from e

    def read_all(self, cert_names: Iterable[str]) -> Dict[str, bytes]:
        """Read every named certificate; any failure fails the whole call."""
        certs = {}
        for cert_name in cert_names:
            certs[cert_name] = self.read(cert_name)
        return certs

    def save(self, cert_name: str, content: Union[str, bytes]) -> str:
        """Write certificate content under its name.

        Returns:
            Path the certificate was written to
        """
        validate_cert_name(cert_name)
        path = self.path_for(cert_name)
        data = content.encode("utf-8") if isinstance(content, str) else content
        try:
            os.makedirs(self.certs_path, exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Failed to write certificate {cert_name} to {path}: {e}")
            raise ProxyIOError(f"Could not write certificate {path}: {e}", path=path) from e

        logger.info(f"Stored certificate {cert_name} ({len(data)} bytes)")
        return path
