"""Timecode module - ArtNet OpTimeCode codec and UDP endpoint."""

from facebridge.timecode.artnet import ArtNetConfig, ArtNetEndpoint
from facebridge.timecode.codec import (
    FpsType,
    TimecodeValue,
    decode,
    encode,
    frame_duration_ms,
)

__all__ = [
    "ArtNetConfig",
    "ArtNetEndpoint",
    "FpsType",
    "TimecodeValue",
    "decode",
    "encode",
    "frame_duration_ms",
]
