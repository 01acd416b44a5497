"""API request and response models."""

import base64
from typing import Dict, List
from pydantic import BaseModel


class HealthStatus(BaseModel):
    """Health check response model."""
    status: str
    services_registered: int
    certificates_loaded: int
    https_enabled: bool
    config_written: bool


class OperationResult(BaseModel):
    """Result of a registry change that was applied to the proxy."""
    message: str
    service_name: str = ""
    cert_name: str = ""


class CertificateContent(BaseModel):
    """Certificate file content.

    PEM and other text files are returned as-is with encoding ``utf-8``;
    anything else (DER, PKCS#12) is base64 encoded with encoding ``base64``.
    """
    content: str
    encoding: str

    @classmethod
    def from_bytes(cls, data: bytes) -> "CertificateContent":
        try:
            return cls(content=data.decode("utf-8"), encoding="utf-8")
        except UnicodeDecodeError:
            return cls(content=base64.b64encode(data).decode("ascii"), encoding="base64")


class CertificateList(BaseModel):
    """Known certificates with their contents."""
    certificates: Dict[str, CertificateContent]
    names: List[str]
