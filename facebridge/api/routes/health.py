"""Health check endpoints.

- /healthz: Liveness check (is the process alive?)
- /readyz: Readiness check (are the OSC and ArtNet channels up?)
- /status: Bridge status snapshot (mode, dataset, counters)
"""

from typing import Any

from fastapi import APIRouter, Request, Response, status

router = APIRouter(tags=["health"])


# Health status tracking
_ready: bool = False
_components: dict[str, bool] = {
    "osc": False,
    "artnet": False,
    "playback_pump": False,
}

# ArtNet may be disabled by configuration; readiness only needs these
CRITICAL_COMPONENTS = ["osc", "playback_pump"]


def set_ready(ready: bool) -> None:
    """Set overall readiness status."""
    global _ready
    _ready = ready


def set_component_health(component: str, healthy: bool) -> None:
    """Set health status for a specific component."""
    if component in _components:
        _components[component] = healthy


def get_component_health() -> dict[str, bool]:
    """Get health status of all components."""
    return _components.copy()


@router.get("/healthz", response_model=dict[str, str])
async def healthz() -> dict[str, str]:
    """Liveness check.

    Returns 200 if the process is alive.
    """
    return {"status": "alive"}


@router.get("/readyz")
async def readyz(response: Response) -> dict[str, Any]:
    """Readiness check.

    Returns 200 if the bridge can dispatch.
    Returns 503 if any critical component is down.
    """
    all_critical_ready = all(_components.get(c, False) for c in CRITICAL_COMPONENTS)

    if _ready and all_critical_ready:
        return {
            "status": "ready",
            "components": _components,
        }

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {
        "status": "not_ready",
        "components": _components,
    }


@router.get("/status")
async def bridge_status(request: Request) -> dict[str, Any]:
    """Bridge status snapshot plus transport counters."""
    controller = request.app.state.controller
    ctx = controller.context
    osc = request.app.state.osc
    artnet = request.app.state.artnet

    return {
        **controller.status(),
        "fps": ctx.config.fps,
        "artnetHost": ctx.config.artnet_broadcast,
        "oscHost": ctx.config.osc_host,
        "oscPort": ctx.config.osc_port,
        "threshold": ctx.dispatcher.threshold,
        "playing": controller.is_playing,
        "clients": request.app.state.hub.active_connections,
        "oscSent": osc.messages_sent,
        "oscErrors": osc.error_count,
        "tcSent": artnet.packets_sent,
        "tcReceived": artnet.packets_received,
    }
