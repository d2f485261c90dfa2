"""WebSocket Client Hub - Notification fan-out to browser sessions.

Each connected browser gets a bounded send queue drained by its own
task, so a slow client never blocks the bridge. When a client's queue
is full, new notifications for that client are dropped.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from facebridge.config.constants import BRIDGE
from facebridge.observability.logging import get_logger

logger = get_logger(__name__)


class ClientConnection:
    """One browser WebSocket with its outbound queue.

    Usage:
        client = ClientConnection()
        await client.connect(websocket)

        client.send({"type": "tc", "timeMs": 1500})

        await client.disconnect()
    """

    def __init__(
        self,
        client_id: str | None = None,
        queue_size: int = BRIDGE.CLIENT_QUEUE_SIZE,
    ) -> None:
        self._client_id = client_id or uuid.uuid4().hex[:8]
        self._websocket: WebSocket | None = None
        self._connected = False
        self._send_queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._send_task: asyncio.Task | None = None

    @property
    def client_id(self) -> str:
        """Client identifier."""
        return self._client_id

    @property
    def is_connected(self) -> bool:
        """Whether WebSocket is connected."""
        return self._connected

    async def connect(self, websocket: WebSocket) -> None:
        """Accept and store WebSocket connection.

        Args:
            websocket: FastAPI WebSocket instance
        """
        await websocket.accept()
        self._websocket = websocket
        self._connected = True

        self._send_task = asyncio.create_task(self._send_loop())

    async def disconnect(self) -> None:
        """Disconnect WebSocket."""
        self._connected = False

        if self._send_task:
            self._send_task.cancel()
            try:
                await self._send_task
            except asyncio.CancelledError:
                pass
            self._send_task = None

        if self._websocket and self._websocket.client_state == WebSocketState.CONNECTED:
            try:
                await self._websocket.close()
            except RuntimeError:
                # Already closed by the peer
                pass

    def send(self, message: dict[str, Any]) -> bool:
        """Queue a notification for this client.

        Returns:
            True if queued, False if disconnected or the queue is full
        """
        if not self._connected:
            return False

        try:
            self._send_queue.put_nowait(message)
            return True
        except asyncio.QueueFull:
            logger.debug(
                "client_message_dropped",
                client_id=self._client_id,
                message_type=message.get("type"),
            )
            return False

    async def _send_loop(self) -> None:
        """Background loop to send queued notifications."""
        while self._connected:
            try:
                message = await asyncio.wait_for(
                    self._send_queue.get(),
                    timeout=0.1,
                )

                if self._websocket and self._connected:
                    await self._websocket.send_json(message)

            except asyncio.TimeoutError:
                continue
            except WebSocketDisconnect:
                self._connected = False
                break
            except Exception as e:
                logger.warning(
                    "client_send_error",
                    client_id=self._client_id,
                    error=str(e),
                )
                continue


class ClientHub:
    """Tracks connected browsers and broadcasts notifications.

    Usage:
        hub = ClientHub()

        client = await hub.connect(websocket)
        hub.broadcast({"type": "dataLoaded", "frames": 900})

        await hub.disconnect(client.client_id)
    """

    def __init__(self, queue_size: int = BRIDGE.CLIENT_QUEUE_SIZE) -> None:
        self._queue_size = queue_size
        self._clients: dict[str, ClientConnection] = {}

    async def connect(self, websocket: WebSocket) -> ClientConnection:
        """Accept a browser and register it.

        Args:
            websocket: FastAPI WebSocket

        Returns:
            Connected ClientConnection
        """
        client = ClientConnection(queue_size=self._queue_size)
        await client.connect(websocket)
        self._clients[client.client_id] = client

        logger.info(
            "ws_client_connected",
            client_id=client.client_id,
            total=len(self._clients),
        )
        return client

    async def disconnect(self, client_id: str) -> None:
        """Disconnect and forget a client.

        Args:
            client_id: Client identifier
        """
        client = self._clients.pop(client_id, None)
        if client:
            await client.disconnect()
            logger.info(
                "ws_client_disconnected",
                client_id=client_id,
                remaining=len(self._clients),
            )

    async def disconnect_all(self) -> None:
        """Disconnect every client."""
        for client_id in list(self._clients.keys()):
            await self.disconnect(client_id)

    def broadcast(self, message: dict[str, Any]) -> int:
        """Queue a notification for every connected client.

        Returns:
            Number of clients it was queued for
        """
        return sum(1 for client in list(self._clients.values()) if client.send(message))

    def send_to(self, client_id: str, message: dict[str, Any]) -> bool:
        """Queue a notification for one client."""
        client = self._clients.get(client_id)
        if client:
            return client.send(message)
        return False

    @property
    def active_connections(self) -> int:
        """Number of connected clients."""
        return len(self._clients)
