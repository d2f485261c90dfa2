"""WebSocket API package."""

from facebridge.api.websocket.hub import ClientConnection, ClientHub

__all__ = [
    "ClientConnection",
    "ClientHub",
]
