"""Frame Store - Time-indexed lookup over the active frame sequence.

Lookups are O(log n) lower-bound searches over frame times. The store
never sorts: frames must be loaded in ascending time order.

Interpolation is clamped at both ends of the capture:
- before (or at) the first frame -> the first frame verbatim
- at or after the last frame -> the last frame verbatim

Frames sharing a timestamp resolve to the last of them.
"""

from bisect import bisect_left, bisect_right
from typing import Sequence

from facebridge.playback.dataset import Frame


class FrameStore:
    """Holds the active frame sequence and answers time lookups.

    Usage:
        store = FrameStore()
        store.load(dataset.frames)

        frame = store.interpolate(tc.time_ms)
        if frame:
            dispatcher.send_batch(frame.params)
    """

    def __init__(self, frames: Sequence[Frame] = ()) -> None:
        self._frames: tuple[Frame, ...] = ()
        self._times: list[float] = []
        self.load(frames)

    def load(self, frames: Sequence[Frame]) -> None:
        """Replace the active sequence wholesale.

        Args:
            frames: Frames sorted ascending by time_ms
        """
        self._frames = tuple(frames)
        self._times = [f.time_ms for f in self._frames]

    def clear(self) -> None:
        """Drop all frames."""
        self.load(())

    def _lower_bound(self, time_ms: float) -> int:
        # First index with time >= query, clamped to the last frame
        return min(bisect_left(self._times, time_ms), len(self._times) - 1)

    def nearest(self, time_ms: float) -> Frame | None:
        """First frame at or after time_ms, without interpolation.

        Past the end of the capture this is the last frame.
        """
        if not self._frames:
            return None
        return self._frames[self._lower_bound(time_ms)]

    def interpolate(self, time_ms: float) -> Frame | None:
        """Linearly interpolated frame at time_ms.

        Every parameter of the earlier neighbour is blended toward the later
        one. A parameter missing from the later frame holds its value.

        Returns:
            Frame stamped with time_ms, a clamped boundary frame, or None
            when the store is empty
        """
        if not self._frames:
            return None

        # Frames before i are at or before time_ms
        i = bisect_right(self._times, time_ms)
        if i == 0:
            return self._frames[0]
        if i == len(self._frames):
            return self._frames[-1]

        a = self._frames[i - 1]
        if time_ms == a.time_ms:
            return a

        b = self._frames[i]
        t = (time_ms - a.time_ms) / (b.time_ms - a.time_ms)
        params = {
            name: va + (b.params.get(name, va) - va) * t
            for name, va in a.params.items()
        }
        return Frame(time_ms=time_ms, params=params)

    @property
    def frames(self) -> tuple[Frame, ...]:
        """The active sequence."""
        return self._frames

    @property
    def duration_ms(self) -> float:
        """Time of the last frame (0 when empty)."""
        return self._times[-1] if self._times else 0.0

    def __len__(self) -> int:
        return len(self._frames)
