"""Playback module - Capture data, lookups, triggers and the playback clock.

Provides:
- Dataset / Frame / Trigger: Parsed capture data
- FrameStore: Nearest and interpolated frame lookup
- TriggerScheduler: One-shot ordered trigger firing
- PlaybackClock: Threaded real-time drain emitting events
"""

from facebridge.playback.clock import (
    CompleteEvent,
    FrameEvent,
    PlaybackClock,
    PlaybackEvent,
    ProgressEvent,
    TimecodeEvent,
    TriggerEvent,
)
from facebridge.playback.dataset import Dataset, Frame, Trigger
from facebridge.playback.frame_store import FrameStore
from facebridge.playback.triggers import TriggerScheduler

__all__ = [
    # Data
    "Dataset",
    "Frame",
    "Trigger",
    # Lookup
    "FrameStore",
    "TriggerScheduler",
    # Clock
    "PlaybackClock",
    "PlaybackEvent",
    "FrameEvent",
    "TimecodeEvent",
    "TriggerEvent",
    "ProgressEvent",
    "CompleteEvent",
]
