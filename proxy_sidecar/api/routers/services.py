"""Service registration endpoints."""

import asyncio
import logging
from typing import List
from fastapi import APIRouter, HTTPException

from ...haproxy.controller import ProxyController
from ...registry.models import Service
from ..models import OperationResult

logger = logging.getLogger(__name__)


def create_router(controller: ProxyController) -> APIRouter:
    """Create router for service registration.

    Every change is compiled into the proxy configuration and followed by a
    reload before the response is sent.
    """
    router = APIRouter(tags=["services"])

    @router.get("", response_model=List[Service])
    async def list_services():
        """List registered services ordered by name."""
        return controller.registry.list_services()

    @router.get("/{service_name}", response_model=Service)
    async def get_service(service_name: str):
        service = controller.registry.get_service(service_name)
        if not service:
            raise HTTPException(404, f"Service {service_name} not found")
        return service

    @router.post("", response_model=OperationResult)
    async def reconfigure_service(service: Service):
        """Register or replace a service and reload the proxy."""
        logger.info(f"Reconfiguring service {service.service_name} ({service.req_mode})")
        await asyncio.to_thread(controller.reconfigure, service)
        return OperationResult(
            message=f"Service {service.service_name} configured",
            service_name=service.service_name,
        )

    @router.delete("/{service_name}", response_model=OperationResult)
    async def remove_service(service_name: str):
        """Remove a service and reload the proxy. Unknown names are accepted."""
        logger.info(f"Removing service {service_name}")
        await asyncio.to_thread(controller.remove, service_name)
        return OperationResult(
            message=f"Service {service_name} removed",
            service_name=service_name,
        )

    return router
