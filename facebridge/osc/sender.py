"""OSC UDP Sender - Parameter messages to the show-control engine.

Sends OSC messages over UDP (python-osc SimpleUDPClient) to Pangolin
Beyond or any other OSC receiver. Addresses are passed through verbatim,
e.g.:
    /beyond/zone/<name>/livecontrol/angley
    /beyond/cue/<page>/<idx>/livecontrol/sizey

Sends are fire-and-forget: a failed send is logged and counted, never
retried and never raised to the caller.

Usage:
    sender = OscSender(OscConfig(host="127.0.0.1", port=8000))
    sender.open()

    sender.send("/beyond/zone/face/livecontrol/angley", 12.5)

    sender.retarget("10.0.0.5", 8000)
    sender.close()
"""

from dataclasses import dataclass
from typing import Any, Callable

from pythonosc.osc_message_builder import BuildError
from pythonosc.udp_client import SimpleUDPClient

from facebridge.config.constants import BRIDGE
from facebridge.exceptions import InvalidConfigError, OscSendError
from facebridge.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class OscConfig:
    """Configuration for the OSC sender."""

    host: str = BRIDGE.OSC_HOST
    port: int = BRIDGE.OSC_PORT


@dataclass
class OscState:
    """Internal counters for the OSC sender."""

    open: bool = False
    messages_sent: int = 0
    errors: int = 0


class OscSender:
    """Fire-and-forget OSC client."""

    def __init__(
        self,
        config: OscConfig | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        """Initialize OSC sender.

        Args:
            config: OSC target configuration
            on_error: Callback for send errors
        """
        self._config = config or OscConfig()
        self._on_error = on_error
        self._state = OscState()
        self._client: SimpleUDPClient | None = None

    def open(self) -> None:
        """Create the UDP client for the configured target."""
        if self._state.open:
            return

        self._client = SimpleUDPClient(self._config.host, self._config.port)
        self._state = OscState(open=True)

        logger.info(
            "osc_opened",
            host=self._config.host,
            port=self._config.port,
        )

    def close(self) -> None:
        """Close and drop the UDP client."""
        self._state.open = False
        if self._client is not None:
            self._client.close()
            self._client = None

        logger.info(
            "osc_closed",
            messages_sent=self._state.messages_sent,
            errors=self._state.errors,
        )

    def retarget(self, host: str, port: int) -> None:
        """Rebuild the client for a new host/port and close the old one.

        Raises:
            InvalidConfigError: If the target cannot be resolved; the
                previous client stays in use
        """
        if not 0 < port < 65536:
            raise InvalidConfigError("osc_port", port, "port out of range")

        try:
            client = SimpleUDPClient(host, port)
        except OSError as e:
            raise InvalidConfigError("osc_host", host, str(e)) from e

        previous, self._client = self._client, client
        if previous is not None:
            previous.close()
        self._config = OscConfig(host=host, port=port)
        self._state.open = True

    def send(self, address: str, *args: Any) -> bool:
        """Send one OSC message.

        Args:
            address: OSC address pattern
            *args: Message arguments (none, one or many)

        Returns:
            True if the datagram was handed to the socket
        """
        try:
            if not self._state.open or self._client is None:
                raise OscSendError(address, "sender not open")
            self._client.send_message(address, list(args))
            self._state.messages_sent += 1
            return True

        except (OSError, BuildError, ValueError, OscSendError) as e:
            self._state.errors += 1
            logger.warning("osc_send_error", address=address, error=str(e))

            if self._on_error:
                self._on_error(e)

            return False

    @property
    def is_open(self) -> bool:
        """Whether the client exists."""
        return self._state.open

    @property
    def messages_sent(self) -> int:
        """Total messages sent."""
        return self._state.messages_sent

    @property
    def error_count(self) -> int:
        """Total send errors."""
        return self._state.errors

    @property
    def config(self) -> OscConfig:
        """Current target."""
        return self._config
