"""Bridge Constants - Wire format and timing contracts.

ArtNet values follow the Art-Net 4 OpTimeCode packet layout. Timing
values are in milliseconds unless otherwise noted.
"""

from dataclasses import dataclass, field
from typing import Final


@dataclass(frozen=True)
class ArtNetConstants:
    """Immutable ArtNet OpTimeCode wire constants."""

    HEADER: Final[bytes] = b"Art-Net\x00"
    OP_TIMECODE: Final[int] = 0x9700  # Little-endian on the wire
    PROT_VER_HI: Final[int] = 0
    PROT_VER_LO: Final[int] = 14
    PACKET_SIZE: Final[int] = 19
    PORT: Final[int] = 6454

    # Byte offsets inside the OpTimeCode packet
    OFFSET_FRAMES: Final[int] = 14
    OFFSET_SECONDS: Final[int] = 15
    OFFSET_MINUTES: Final[int] = 16
    OFFSET_HOURS: Final[int] = 17
    OFFSET_TYPE: Final[int] = 18

    # Timecode type code -> frames per second
    FPS_BY_TYPE: dict[int, float] = field(
        default_factory=lambda: {0: 24.0, 1: 25.0, 2: 29.97, 3: 30.0}
    )
    DEFAULT_FPS: Final[float] = 30.0


@dataclass(frozen=True)
class BridgeConstants:
    """Immutable bridge timing and filtering defaults."""

    # Receive path
    DEBOUNCE_MS: Final[float] = 5.0  # Drop received TC closer than this to the last one

    # Dispatch path
    CHANGE_THRESHOLD: Final[float] = 0.02  # Minimum value change to resend OSC

    # Playback clock
    PLAYBACK_TICK_MS: Final[float] = 1.0  # Polling cadence of the playback loop

    # Client hub
    CLIENT_QUEUE_SIZE: Final[int] = 64  # Outbound notifications buffered per client

    # OSC target (Pangolin Beyond defaults)
    OSC_HOST: Final[str] = "127.0.0.1"
    OSC_PORT: Final[int] = 8000

    # ArtNet broadcast target
    ARTNET_BROADCAST: Final[str] = "2.255.255.255"


# Singleton instances for import
ARTNET = ArtNetConstants()
BRIDGE = BridgeConstants()

SUPPORTED_FPS: Final[tuple[float, ...]] = (24.0, 25.0, 29.97, 30.0)
