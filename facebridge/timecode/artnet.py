"""ArtNet UDP Endpoint - Send and receive OpTimeCode.

One UDP socket bound to the ArtNet port (6454) is used both ways:
- Send mode: timecode packets are broadcast to the show-control engine
- Receive mode: the show-control engine is timecode master and its
  packets are handed to the bridge controller

Only OpTimeCode is understood; any other datagram is passed to the
callback as-is and dropped there by the codec.

Usage:
    endpoint = ArtNetEndpoint(ArtNetConfig(broadcast="2.255.255.255"))
    await endpoint.open(on_packet=controller.handle_timecode_packet)

    endpoint.send_timecode(1500.0, fps=30)

    endpoint.close()
"""

import asyncio
import socket
from dataclasses import dataclass
from typing import Callable

from facebridge.config.constants import ARTNET, BRIDGE
from facebridge.exceptions import ArtNetSendError, TimecodeError
from facebridge.observability.logging import get_logger
from facebridge.timecode.codec import encode

logger = get_logger(__name__)

PacketHandler = Callable[[bytes], None]


@dataclass
class ArtNetConfig:
    """Configuration for the ArtNet endpoint."""

    bind_host: str = "0.0.0.0"
    port: int = ARTNET.PORT

    # Default destination for outbound timecode
    broadcast: str = BRIDGE.ARTNET_BROADCAST


@dataclass
class ArtNetState:
    """Internal counters for the ArtNet endpoint."""

    open: bool = False
    packets_sent: int = 0
    packets_received: int = 0
    errors: int = 0


class _ArtNetProtocol(asyncio.DatagramProtocol):
    """asyncio protocol forwarding datagrams to the endpoint."""

    def __init__(self, endpoint: "ArtNetEndpoint") -> None:
        self._endpoint = endpoint

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        self._endpoint._on_datagram(data)

    def error_received(self, exc: Exception) -> None:
        self._endpoint._state.errors += 1
        logger.warning("artnet_socket_error", error=str(exc))


class ArtNetEndpoint:
    """ArtNet OpTimeCode sender/receiver over a broadcast UDP socket."""

    def __init__(
        self,
        config: ArtNetConfig | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        """Initialize endpoint.

        Args:
            config: ArtNet configuration
            on_error: Callback for send errors
        """
        self._config = config or ArtNetConfig()
        self._on_error = on_error
        self._state = ArtNetState()
        self._transport: asyncio.DatagramTransport | None = None
        self._on_packet: PacketHandler | None = None

    async def open(self, on_packet: PacketHandler | None = None) -> None:
        """Bind the UDP socket and start receiving.

        Args:
            on_packet: Called with the raw bytes of every datagram

        Raises:
            OSError: If the port cannot be bound (fatal at start-up)
        """
        if self._state.open:
            return

        self._on_packet = on_packet

        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        except OSError as e:
            # Sending to unicast targets still works without the flag
            logger.warning("artnet_broadcast_unavailable", error=str(e))
        sock.bind((self._config.bind_host, self._config.port))
        sock.setblocking(False)

        loop = asyncio.get_running_loop()
        transport, _ = await loop.create_datagram_endpoint(
            lambda: _ArtNetProtocol(self),
            sock=sock,
        )
        self._transport = transport
        self._state = ArtNetState(open=True)

        logger.info(
            "artnet_opened",
            bind_host=self._config.bind_host,
            port=self._config.port,
            broadcast=self._config.broadcast,
        )

    def close(self) -> None:
        """Close the UDP socket."""
        self._state.open = False

        if self._transport:
            self._transport.close()
            self._transport = None

        logger.info(
            "artnet_closed",
            packets_sent=self._state.packets_sent,
            packets_received=self._state.packets_received,
            errors=self._state.errors,
        )

    def send_timecode(
        self,
        time_ms: float,
        fps: float,
        host: str | None = None,
    ) -> bool:
        """Encode and send one timecode packet.

        Fire-and-forget: failures are logged and counted, never raised.

        Args:
            time_ms: Absolute time in milliseconds
            fps: Frame rate
            host: Destination override (defaults to the broadcast target)

        Returns:
            True if the datagram was handed to the socket
        """
        dest = host or self._config.broadcast

        try:
            packet = encode(time_ms, fps)
            if not self._state.open or self._transport is None:
                raise ArtNetSendError(dest, self._config.port, "endpoint not open")
            self._transport.sendto(packet, (dest, self._config.port))
            self._state.packets_sent += 1
            return True

        except (OSError, TimecodeError, ArtNetSendError) as e:
            self._state.errors += 1
            logger.warning("artnet_send_error", host=dest, error=str(e))

            if self._on_error:
                self._on_error(e)

            return False

    def set_broadcast(self, host: str) -> None:
        """Change the default timecode destination."""
        self._config.broadcast = host

    def _on_datagram(self, data: bytes) -> None:
        self._state.packets_received += 1
        if self._on_packet:
            self._on_packet(data)

    @property
    def is_open(self) -> bool:
        """Whether the socket is bound."""
        return self._state.open

    @property
    def packets_sent(self) -> int:
        """Total timecode packets sent."""
        return self._state.packets_sent

    @property
    def packets_received(self) -> int:
        """Total datagrams received."""
        return self._state.packets_received

    @property
    def error_count(self) -> int:
        """Total send/socket errors."""
        return self._state.errors

    @property
    def config(self) -> ArtNetConfig:
        """Current configuration."""
        return self._config
