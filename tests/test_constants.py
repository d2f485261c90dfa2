"""Tests for bridge constants.

Constants are wire contracts; these tests pin them.
"""

import pytest

from facebridge.config.constants import (
    ARTNET,
    BRIDGE,
    SUPPORTED_FPS,
    ArtNetConstants,
)


class TestArtNetConstants:
    """Tests for the OpTimeCode layout."""

    def test_header(self):
        """8-byte signature including the NUL."""
        assert ARTNET.HEADER == b"Art-Net\x00"
        assert len(ARTNET.HEADER) == 8

    def test_opcode_and_version(self):
        """OpTimeCode, protocol 14."""
        assert ARTNET.OP_TIMECODE == 0x9700
        assert (ARTNET.PROT_VER_HI, ARTNET.PROT_VER_LO) == (0, 14)

    def test_offsets_fit_packet(self):
        """Field offsets are consecutive and end at the last byte."""
        offsets = [
            ARTNET.OFFSET_FRAMES,
            ARTNET.OFFSET_SECONDS,
            ARTNET.OFFSET_MINUTES,
            ARTNET.OFFSET_HOURS,
            ARTNET.OFFSET_TYPE,
        ]
        assert offsets == list(range(14, 19))
        assert ARTNET.PACKET_SIZE == 19

    def test_fps_types(self):
        """Type codes 0-3 cover the supported rates."""
        assert tuple(ARTNET.FPS_BY_TYPE.values()) == SUPPORTED_FPS

    def test_immutable(self):
        """Constants cannot be reassigned."""
        with pytest.raises(AttributeError):
            ARTNET.PORT = 1  # type: ignore[misc]

    def test_fresh_instance_matches(self):
        """Instances are interchangeable."""
        assert ArtNetConstants() == ARTNET


class TestBridgeConstants:
    """Tests for timing and filtering defaults."""

    def test_defaults(self):
        """Debounce, threshold and tick."""
        assert BRIDGE.DEBOUNCE_MS == 5.0
        assert BRIDGE.CHANGE_THRESHOLD == 0.02
        assert BRIDGE.PLAYBACK_TICK_MS == 1.0

    def test_default_fps_is_supported(self):
        """Unknown type bytes fall back to a rate the codec can encode."""
        assert ARTNET.DEFAULT_FPS in SUPPORTED_FPS
