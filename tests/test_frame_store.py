"""Tests for FrameStore lookups.

Tests cover:
- nearest() lower-bound search
- interpolate() between frames
- Clamping before the first and after the last frame
- Empty store and degenerate segments
"""

import pytest

from facebridge.playback.dataset import Frame
from facebridge.playback.frame_store import FrameStore


@pytest.fixture
def store() -> FrameStore:
    """Two frames: v goes 0 -> 10 over one second."""
    return FrameStore([
        Frame(0.0, {"v": 0.0}),
        Frame(1000.0, {"v": 10.0}),
    ])


class TestNearest:
    """Tests for nearest()."""

    def test_empty_store(self):
        """No frames, no answer."""
        assert FrameStore().nearest(10) is None

    def test_first_frame_at_or_after(self, store):
        """Lower bound picks the next frame."""
        assert store.nearest(1).time_ms == 1000.0
        assert store.nearest(0).time_ms == 0.0

    def test_past_end_gives_last(self, store):
        """Queries past the end return the last frame."""
        assert store.nearest(5000).time_ms == 1000.0

    def test_many_frames(self):
        """Binary search over a longer capture."""
        store = FrameStore([Frame(float(t), {"v": float(t)}) for t in range(0, 10_000, 33)])
        assert store.nearest(100).time_ms == 132.0


class TestInterpolate:
    """Tests for interpolate()."""

    def test_midpoint(self, store):
        """Halfway between frames is halfway in value."""
        frame = store.interpolate(500)

        assert frame.params["v"] == pytest.approx(5.0)
        assert frame.time_ms == 500

    def test_exact_first_frame(self, store):
        """t = 0 returns the first frame exactly."""
        assert store.interpolate(0).params["v"] == 0.0

    def test_before_first_clamps(self, store):
        """No extrapolation below the first frame."""
        assert store.interpolate(-50).params["v"] == 0.0

    def test_after_last_clamps(self, store):
        """No extrapolation past the last frame."""
        frame = store.interpolate(1500)

        assert frame.params["v"] == 10.0
        assert frame.time_ms == 1000.0

    def test_exact_hit_returns_frame(self):
        """A query on a middle frame returns that frame."""
        store = FrameStore([
            Frame(0.0, {"v": 0.0}),
            Frame(1000.0, {"v": 10.0}),
            Frame(2000.0, {"v": 0.0}),
        ])
        assert store.interpolate(1000).params["v"] == 10.0
        assert store.interpolate(1500).params["v"] == pytest.approx(5.0)

    def test_every_parameter_interpolated(self):
        """All parameters blend with the same t."""
        store = FrameStore([
            Frame(0.0, {"a": 0.0, "b": 100.0}),
            Frame(100.0, {"a": 1.0, "b": 0.0}),
        ])
        frame = store.interpolate(25)

        assert frame.params == pytest.approx({"a": 0.25, "b": 75.0})

    def test_missing_parameter_holds(self):
        """A parameter absent from the later frame keeps its value."""
        store = FrameStore([
            Frame(0.0, {"a": 4.0}),
            Frame(100.0, {}),
        ])
        assert store.interpolate(50).params["a"] == 4.0

    def test_duplicate_timestamps(self):
        """A shared timestamp resolves to the last frame carrying it."""
        store = FrameStore([
            Frame(0.0, {"v": 0.0}),
            Frame(100.0, {"v": 1.0}),
            Frame(100.0, {"v": 2.0}),
            Frame(200.0, {"v": 3.0}),
        ])
        assert store.interpolate(100).params["v"] == 2.0
        assert store.interpolate(99).params["v"] == pytest.approx(0.99)
        assert store.interpolate(150).params["v"] == pytest.approx(2.5)

    def test_duplicate_final_timestamp(self):
        """Duplicates at the end clamp to the last one."""
        store = FrameStore([Frame(0.0, {"v": 0.0}), Frame(50.0, {"v": 1.0}), Frame(50.0, {"v": 4.0})])

        assert store.interpolate(50).params["v"] == 4.0
        assert store.interpolate(80).params["v"] == 4.0

    def test_empty_store(self):
        """No frames, no answer."""
        assert FrameStore().interpolate(0) is None

    def test_single_frame(self):
        """One frame is returned for every query."""
        store = FrameStore([Frame(500.0, {"v": 7.0})])

        assert store.interpolate(0).params["v"] == 7.0
        assert store.interpolate(900).params["v"] == 7.0


class TestLoad:
    """Tests for load()."""

    def test_load_replaces(self, store):
        """Loading replaces the whole sequence."""
        store.load([Frame(0.0, {"w": 1.0})])

        assert len(store) == 1
        assert store.interpolate(0).params == {"w": 1.0}

    def test_duration(self, store):
        """Duration is the last frame's time."""
        assert store.duration_ms == 1000.0
        store.clear()
        assert store.duration_ms == 0.0
