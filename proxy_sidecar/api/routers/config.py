"""Compiled configuration endpoint."""

import asyncio
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from ...haproxy.controller import ProxyController


def create_router(controller: ProxyController) -> APIRouter:
    router = APIRouter(tags=["config"])

    @router.get("", response_class=PlainTextResponse)
    async def get_config():
        """Return the last compiled proxy configuration as plain text."""
        text = await asyncio.to_thread(controller.read_config)
        return PlainTextResponse(text)

    return router
