"""Bridge WebSocket route - Browser session endpoint.

The browser connects once and streams JSON session messages (live
parameters, timecode sends, mode changes, dataset uploads). Every
client receives the bridge's notifications (status, mode echo,
dataset echo, timecode echo, playback progress). Errors from a failed
operation go back to the session that sent it.

The endpoint is served at both "/" (legacy browser clients connect to
ws://host:8081) and "/ws".
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from facebridge.observability.logging import bind_client, get_logger, unbind_client

logger = get_logger(__name__)

router = APIRouter(tags=["bridge"])


@router.websocket("/")
@router.websocket("/ws")
async def bridge_websocket(websocket: WebSocket) -> None:
    """WebSocket endpoint for browser sessions.

    Messages are handled to completion in arrival order. Malformed
    messages are dropped without closing the connection.
    """
    controller = websocket.app.state.controller
    hub = websocket.app.state.hub

    client = await hub.connect(websocket)
    bind_client(client.client_id)

    try:
        # Current state on connect
        client.send(controller.status())

        while client.is_connected:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break

            raw = message.get("text") or message.get("bytes")
            if raw:
                controller.handle_raw_message(raw, reply=client.send)

    except WebSocketDisconnect:
        pass

    finally:
        unbind_client()
        await hub.disconnect(client.client_id)
