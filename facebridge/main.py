"""Face OSC Bridge - FastAPI Application Entry Point.

WebSocket  → OSC UDP   → show-control engine  (live face parameters)
WebSocket  → ArtNet TC → show-control engine  (timeline sync)
ArtNet TC  ← engine    → bridge → OSC + WS    (receive mode, engine is TC master)

Run:
    facebridge
    python -m facebridge.main
"""

import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from facebridge import __version__
from facebridge.api.routes import bridge, health
from facebridge.api.websocket.hub import ClientHub
from facebridge.bridge.context import BridgeContext, RuntimeConfig
from facebridge.bridge.controller import BridgeController
from facebridge.config.settings import Settings, get_settings
from facebridge.exceptions import DatasetError
from facebridge.observability.logging import init_logging
from facebridge.osc.sender import OscConfig, OscSender
from facebridge.timecode.artnet import ArtNetConfig, ArtNetEndpoint

logger = structlog.get_logger(__name__)


def autoload_dataset(controller: BridgeController, path: str | None) -> bool:
    """Load a dataset JSON file at start-up if it exists.

    Unreadable or malformed files are logged and skipped.

    Returns:
        True if a dataset was loaded
    """
    if not path:
        return False

    dataset_file = Path(path)
    if not dataset_file.is_file():
        return False

    try:
        payload = json.loads(dataset_file.read_text(encoding="utf-8"))
        controller.load_dataset(payload)
    except (OSError, json.JSONDecodeError, DatasetError) as e:
        logger.warning("dataset_autoload_failed", path=str(dataset_file), error=str(e))
        return False

    logger.info("dataset_autoloaded", path=str(dataset_file))
    return True


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager.

        Opens the OSC and ArtNet channels, wires the controller, and tears
        everything down on shutdown.
        """
        logger.info(
            "facebridge_starting",
            version=__version__,
            environment=settings.environment,
            port=settings.api_port,
        )

        init_logging(
            json_format=settings.environment == "production",
            level=settings.log_level,
        )

        hub = ClientHub()
        osc = OscSender(OscConfig(host=settings.osc_host, port=settings.osc_port))
        artnet = ArtNetEndpoint(
            ArtNetConfig(
                bind_host=settings.artnet_bind_host,
                port=settings.artnet_port,
                broadcast=settings.artnet_broadcast,
            )
        )
        context = BridgeContext.create(
            osc,
            config=RuntimeConfig.from_settings(settings),
            threshold=settings.change_threshold,
        )
        controller = BridgeController(
            context,
            artnet=artnet,
            osc=osc,
            publish=hub.broadcast,
            tick_ms=settings.playback_tick_ms,
        )

        try:
            osc.open()
            health.set_component_health("osc", True)

            if settings.artnet_enabled:
                # Failing to bind the ArtNet port is fatal
                await artnet.open(on_packet=controller.handle_timecode_packet)
                health.set_component_health("artnet", True)

            await controller.start()
            health.set_component_health("playback_pump", True)

            autoload_dataset(controller, settings.dataset_path)

            health.set_ready(True)
            logger.info(
                "facebridge_ready",
                osc=f"{settings.osc_host}:{settings.osc_port}",
                artnet=f"{settings.artnet_broadcast}:{settings.artnet_port}",
                tc_mode=settings.tc_mode,
                tc_fps=settings.tc_fps,
            )

        except Exception as e:
            logger.error("facebridge_startup_failed", error=str(e))
            raise

        app.state.hub = hub
        app.state.osc = osc
        app.state.artnet = artnet
        app.state.controller = controller

        yield  # Application runs here

        logger.info("facebridge_shutting_down")
        health.set_ready(False)

        await controller.stop()
        await hub.disconnect_all()
        artnet.close()
        osc.close()
        for component in health.get_component_health():
            health.set_component_health(component, False)

        logger.info("facebridge_shutdown_complete")

    app = FastAPI(
        title="Face OSC Bridge",
        description="Capture parameters to OSC, synchronised by ArtNet timecode",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url=None,
    )

    # Browser UI is served from file:// or another port
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.environment == "development" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(bridge.router)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


def run() -> None:
    """Console entry point."""
    import uvicorn

    settings = get_settings()

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, settings.log_level),
    )

    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
