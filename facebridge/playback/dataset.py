"""Capture Dataset - Parameter frames and one-shot triggers.

Dataset JSON (as uploaded by the browser or auto-loaded at start-up):
{
    "frames": [
        {"timeMs": 0, "/beyond/zone/face/livecontrol/angley": 12.5, ...},
        ...
    ],
    "triggers": [
        {"timeMs": 1200, "address": "/beyond/cue/1/3/start", "args": [1]},
        ...
    ]
}

Frames must arrive sorted by timeMs (not validated). Triggers are sorted
on load. Parsing is all-or-nothing: a malformed entry raises DatasetError
and nothing is returned.
"""

import math
from dataclasses import dataclass, field
from typing import Any

from facebridge.exceptions import DatasetError

Scalar = int | float | str | bool

TIME_KEY = "timeMs"


def _as_time(value: Any, section: str, index: int) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DatasetError(f"{TIME_KEY} must be a number", index=index, section=section)
    if not math.isfinite(value):
        raise DatasetError(f"{TIME_KEY} must be finite", index=index, section=section)
    return float(value)


@dataclass(frozen=True)
class Frame:
    """One captured parameter frame.

    Attributes:
        time_ms: Position on the capture timeline
        params: OSC address (or parameter name) -> value, in capture order
    """

    time_ms: float
    params: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, float]:
        """Flatten back to the wire shape."""
        return {TIME_KEY: self.time_ms, **self.params}

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> "Frame":
        """Create from a wire frame dict.

        Raises:
            DatasetError: If the frame is not an object, lacks a numeric
                timeMs, or carries a non-numeric parameter
        """
        if not isinstance(data, dict):
            raise DatasetError("frame must be an object", index=index, section="frames")
        if TIME_KEY not in data:
            raise DatasetError(f"frame has no {TIME_KEY}", index=index, section="frames")

        time_ms = _as_time(data[TIME_KEY], "frames", index)
        params: dict[str, float] = {}
        for name, value in data.items():
            if name == TIME_KEY:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise DatasetError(
                    f"parameter {name!r} must be a number",
                    index=index,
                    section="frames",
                )
            params[name] = float(value)

        return cls(time_ms=time_ms, params=params)


@dataclass(frozen=True)
class Trigger:
    """A one-shot OSC message fired when playback reaches time_ms."""

    time_ms: float
    address: str
    args: tuple[Scalar, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {TIME_KEY: self.time_ms, "address": self.address, "args": list(self.args)}

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> "Trigger":
        """Create from a wire trigger dict.

        Raises:
            DatasetError: If time, address or args are malformed
        """
        if not isinstance(data, dict):
            raise DatasetError("trigger must be an object", index=index, section="triggers")

        time_ms = _as_time(data.get(TIME_KEY), "triggers", index)

        address = data.get("address")
        if not isinstance(address, str) or not address:
            raise DatasetError("trigger address must be a string", index=index, section="triggers")

        args = data.get("args") or []
        if not isinstance(args, list) or not all(
            isinstance(a, (int, float, str, bool)) for a in args
        ):
            raise DatasetError("trigger args must be a list of scalars", index=index, section="triggers")

        return cls(time_ms=time_ms, address=address, args=tuple(args))


@dataclass(frozen=True)
class Dataset:
    """A loaded capture: frames plus triggers.

    Frames keep their upload order; triggers are held sorted by time.
    """

    frames: tuple[Frame, ...]
    triggers: tuple[Trigger, ...] = ()

    @property
    def frame_count(self) -> int:
        """Number of frames."""
        return len(self.frames)

    @property
    def duration_ms(self) -> float:
        """Time of the last frame (0 when empty)."""
        return self.frames[-1].time_ms if self.frames else 0.0

    @classmethod
    def from_dict(cls, data: Any) -> "Dataset":
        """Parse and validate a dataset payload.

        Args:
            data: Decoded JSON object

        Returns:
            Dataset with triggers sorted ascending by time

        Raises:
            DatasetError: On any malformed part; nothing is partially loaded
        """
        if not isinstance(data, dict):
            raise DatasetError("dataset must be an object")

        raw_frames = data.get("frames")
        if not isinstance(raw_frames, list):
            raise DatasetError("frames must be a list", section="frames")
        if not raw_frames:
            raise DatasetError("dataset has no frames", section="frames")

        raw_triggers = data.get("triggers") or []
        if not isinstance(raw_triggers, list):
            raise DatasetError("triggers must be a list", section="triggers")

        frames = tuple(Frame.from_dict(f, i) for i, f in enumerate(raw_frames))
        triggers = tuple(
            sorted(
                (Trigger.from_dict(t, i) for i, t in enumerate(raw_triggers)),
                key=lambda t: t.time_ms,
            )
        )
        return cls(frames=frames, triggers=triggers)
