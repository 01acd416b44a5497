"""Certificate endpoints."""

import asyncio
import logging
from fastapi import APIRouter, HTTPException, Request

from ...certmanager.store import validate_cert_name
from ...haproxy.controller import ProxyController
from ..models import CertificateContent, CertificateList, OperationResult

logger = logging.getLogger(__name__)


def create_router(controller: ProxyController) -> APIRouter:
    """Create certificate endpoints router."""
    router = APIRouter(tags=["certificates"])

    @router.get("", response_model=CertificateList)
    async def list_certificates():
        """Return every known certificate with its file content."""
        certs = await asyncio.to_thread(controller.registry.get_certs)
        return CertificateList(
            certificates={name: CertificateContent.from_bytes(data) for name, data in certs.items()},
            names=sorted(certs),
        )

    @router.put("/{cert_name}", response_model=OperationResult)
    async def put_certificate(cert_name: str, request: Request):
        """Register a certificate and reload the proxy.

        A non-empty request body is stored as the certificate file first;
        an empty body registers a certificate that is already on disk.
        """
        try:
            validate_cert_name(cert_name)
        except ValueError as e:
            raise HTTPException(400, str(e))

        content = await request.body()
        await asyncio.to_thread(controller.add_cert, cert_name, content or None)

        logger.info(f"Certificate {cert_name} registered")
        return OperationResult(message=f"Certificate {cert_name} added", cert_name=cert_name)

    return router
