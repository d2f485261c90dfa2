"""ArtNet TimeCode Codec - 19-byte OpTimeCode packets.

Packet layout (Art-Net 4 OpTimeCode):
- 8 bytes: ID "Art-Net\\0"
- 2 bytes: OpCode 0x9700 (little-endian)
- 1 byte: ProtVerHi (0)
- 1 byte: ProtVerLo (14)
- 1 byte: Filler
- 1 byte: StreamId
- 1 byte each: Frames, Seconds, Minutes, Hours, Type

Type codes: 0 = Film 24, 1 = EBU 25, 2 = DF 29.97, 3 = SMPTE 30.
Each field is one byte; a time whose frame count does not fit is rejected.

Frames are truncated, not rounded, so decode(encode(t, fps)) lands within
one frame duration (1000 / fps ms) below t.
"""

import math
import struct
from dataclasses import dataclass
from enum import IntEnum

from facebridge.config.constants import ARTNET
from facebridge.exceptions import TimecodeError

# ID, OpCode, ProtVerHi, ProtVerLo, Filler, StreamId, Frames, Seconds, Minutes, Hours, Type
_PACKET_FORMAT = "<8sHBBBBBBBBB"
_OPCODE_FORMAT = "<H"
_FIELD_MAX = 0xFF

MS_PER_HOUR = 3_600_000
MS_PER_MINUTE = 60_000
MS_PER_SECOND = 1_000


class FpsType(IntEnum):
    """ArtNet timecode type codes."""

    FILM_24 = 0
    EBU_25 = 1
    DF_29_97 = 2
    SMPTE_30 = 3

    @classmethod
    def from_fps(cls, fps: float) -> "FpsType":
        """Map a frame rate to its type code.

        Anything below 30 that is not 24 or 25 is treated as drop-frame 29.97.
        """
        if fps == 24:
            return cls.FILM_24
        if fps == 25:
            return cls.EBU_25
        if fps < 30:
            return cls.DF_29_97
        return cls.SMPTE_30

    @classmethod
    def from_code(cls, code: int) -> "FpsType":
        """Map a received type byte, unknown codes fall back to the default rate."""
        try:
            return cls(code)
        except ValueError:
            return cls.from_fps(ARTNET.DEFAULT_FPS)

    @property
    def fps(self) -> float:
        """Frames per second for this type."""
        return ARTNET.FPS_BY_TYPE[int(self)]


@dataclass(frozen=True)
class TimecodeValue:
    """SMPTE-style timecode position.

    Attributes:
        hours: 0-23
        minutes: 0-59
        seconds: 0-59
        frames: Frame within the second
        fps_type: Frame rate type code
    """

    hours: int
    minutes: int
    seconds: int
    frames: int
    fps_type: FpsType = FpsType.SMPTE_30

    @property
    def fps(self) -> float:
        """Frames per second implied by the type code."""
        return self.fps_type.fps

    @property
    def time_ms(self) -> float:
        """Absolute position in milliseconds."""
        return self.to_time_ms(self.fps)

    def to_time_ms(self, fps: float) -> float:
        """Absolute position in milliseconds at an explicit frame rate."""
        total_s = (
            self.hours * 3600
            + self.minutes * 60
            + self.seconds
            + self.frames / fps
        )
        return total_s * 1000

    @classmethod
    def from_time_ms(cls, time_ms: float, fps: float) -> "TimecodeValue":
        """Decompose an absolute time into timecode fields.

        Args:
            time_ms: Absolute time in milliseconds
            fps: Frame rate used for the frame field

        Raises:
            TimecodeError: If time or fps is not a finite number, or the
                frame count does not fit the one-byte field
        """
        if not math.isfinite(time_ms):
            raise TimecodeError("time must be finite", time_ms=time_ms)
        if not math.isfinite(fps) or fps <= 0:
            raise TimecodeError(f"fps must be positive, got {fps}", time_ms=time_ms)

        total_s = time_ms / 1000
        frames = math.floor((total_s % 1) * fps)
        if frames > _FIELD_MAX:
            raise TimecodeError(f"frame {frames} at {fps} fps does not fit one byte", time_ms=time_ms)

        return cls(
            hours=math.floor(time_ms / MS_PER_HOUR) % 24,
            minutes=math.floor(time_ms / MS_PER_MINUTE) % 60,
            seconds=math.floor(time_ms / MS_PER_SECOND) % 60,
            frames=frames,
            fps_type=FpsType.from_fps(fps),
        )

    def to_bytes(self) -> bytes:
        """Serialize as a 19-byte OpTimeCode packet."""
        return struct.pack(
            _PACKET_FORMAT,
            ARTNET.HEADER,
            ARTNET.OP_TIMECODE,
            ARTNET.PROT_VER_HI,
            ARTNET.PROT_VER_LO,
            0,  # Filler
            0,  # StreamId
            self.frames,
            self.seconds,
            self.minutes,
            self.hours,
            int(self.fps_type),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "TimecodeValue | None":
        """Parse an OpTimeCode packet.

        Returns:
            TimecodeValue, or None for anything that is not an OpTimeCode
            packet (short, foreign signature, other opcode)
        """
        if len(data) < ARTNET.PACKET_SIZE:
            return None
        if bytes(data[:8]) != ARTNET.HEADER:
            return None
        (opcode,) = struct.unpack_from(_OPCODE_FORMAT, data, 8)
        if opcode != ARTNET.OP_TIMECODE:
            return None

        return cls(
            hours=data[ARTNET.OFFSET_HOURS],
            minutes=data[ARTNET.OFFSET_MINUTES],
            seconds=data[ARTNET.OFFSET_SECONDS],
            frames=data[ARTNET.OFFSET_FRAMES],
            fps_type=FpsType.from_code(data[ARTNET.OFFSET_TYPE]),
        )

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}:{self.frames:02d}"


def encode(time_ms: float, fps: float) -> bytes:
    """Encode an absolute time as an OpTimeCode packet.

    Args:
        time_ms: Absolute time in milliseconds
        fps: Frame rate (24, 25, 29.97 or 30)

    Returns:
        19-byte packet
    """
    return TimecodeValue.from_time_ms(time_ms, fps).to_bytes()


def decode(data: bytes) -> TimecodeValue | None:
    """Decode an OpTimeCode packet, None if the datagram is not one."""
    return TimecodeValue.from_bytes(data)


def frame_duration_ms(fps: float) -> float:
    """Duration of one frame in milliseconds."""
    return 1000 / fps
