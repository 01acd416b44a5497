"""Main entry point for the proxy sidecar."""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .shared.config import Config, get_config
from .shared.exceptions import SidecarError
from .shared.python_logger_config import setup_python_logging
from .haproxy.controller import ProxyController

logger = logging.getLogger(__name__)


def build_controller(config: Config) -> ProxyController:
    """Create the registry, compiler and reloader for this process."""
    controller = ProxyController.from_config(config)
    logger.info(
        f"Controller ready: templates={config.TEMPLATES_PATH}, configs={config.CONFIGS_PATH}, "
        f"fragments={config.FRAGMENTS_PATH}, certs={config.CERTS_PATH}, pid_file={config.PID_FILE}"
    )
    return controller


def create_asgi_app() -> FastAPI:
    """Create the FastAPI ASGI app for production deployment.

    Returns:
        FastAPI app instance
    """
    from .api.server import create_api_app

    config = get_config()
    controller = build_controller(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting proxy sidecar API")
        if config.RELOAD_ON_START:
            # An empty registry still compiles to a startable config
            await asyncio.to_thread(controller.apply)
        yield
        logger.info("Proxy sidecar API shutting down")

    return create_api_app(controller, lifespan=lifespan)


async def serve_api(config: Config) -> None:
    """Serve the API with Hypercorn until cancelled."""
    from hypercorn.asyncio import serve
    from hypercorn.config import Config as HypercornConfig

    app = create_asgi_app()

    api_config = HypercornConfig()
    api_config.bind = [f"{config.SERVER_HOST}:{config.API_PORT}"]
    api_config.loglevel = config.LOG_LEVEL.upper()
    logger.info(f"API binding to {config.SERVER_HOST}:{config.API_PORT}")

    await serve(app, api_config)


def main() -> None:
    """Main entry point for CLI execution.

    Used when running the server via ``python run.py`` or
    ``python -m proxy_sidecar.main``.
    """
    setup_python_logging(Config.LOG_LEVEL)

    try:
        config = get_config()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logger.info("=" * 60)
    logger.info("Proxy sidecar starting")
    logger.info("=" * 60)

    try:
        asyncio.run(serve_api(config))
    except KeyboardInterrupt:
        logger.info("Shutting down on interrupt")
    except SidecarError as e:
        logger.error(f"Proxy sidecar failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
