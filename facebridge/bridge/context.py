"""Bridge Context - Mutable runtime state of one bridge process.

Everything the browser session can change at runtime, plus the state the
dispatch path carries between events, lives here and is handed to the
controller explicitly instead of sitting in module globals.

Only the event-loop thread touches a BridgeContext; inbound events are
handled one at a time, so no locking is needed.
"""

from dataclasses import dataclass, field

from facebridge.config.settings import Settings
from facebridge.osc.dispatcher import ParameterDispatcher, ParameterSink
from facebridge.playback.dataset import Dataset
from facebridge.playback.frame_store import FrameStore
from facebridge.playback.triggers import TriggerScheduler


@dataclass
class RuntimeConfig:
    """Session-adjustable configuration."""

    mode: str = "send"  # send | receive | off
    fps: float = 30.0
    artnet_broadcast: str = "2.255.255.255"
    osc_host: str = "127.0.0.1"
    osc_port: int = 8000
    debounce_ms: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "RuntimeConfig":
        """Seed runtime values from start-up settings."""
        return cls(
            mode=settings.tc_mode,
            fps=settings.tc_fps,
            artnet_broadcast=settings.artnet_broadcast,
            osc_host=settings.osc_host,
            osc_port=settings.osc_port,
            debounce_ms=settings.debounce_ms,
        )


@dataclass
class BridgeContext:
    """Runtime config plus the active dataset and dispatch state."""

    config: RuntimeConfig
    dispatcher: ParameterDispatcher
    frame_store: FrameStore = field(default_factory=FrameStore)
    scheduler: TriggerScheduler = field(default_factory=TriggerScheduler)
    dataset: Dataset | None = None
    last_received_ms: float | None = None

    @classmethod
    def create(
        cls,
        sink: ParameterSink,
        config: RuntimeConfig | None = None,
        threshold: float = 0.02,
    ) -> "BridgeContext":
        """Build a context around an OSC sink."""
        return cls(
            config=config or RuntimeConfig(),
            dispatcher=ParameterDispatcher(sink, threshold=threshold),
        )

    def install(self, dataset: Dataset) -> None:
        """Make dataset active: frames, triggers and a rewound cursor."""
        self.frame_store.load(dataset.frames)
        self.scheduler.load(dataset.triggers)
        self.dataset = dataset

    @property
    def loaded(self) -> bool:
        """Whether a dataset is active."""
        return self.dataset is not None

    @property
    def frame_count(self) -> int:
        """Frames in the active dataset."""
        return len(self.frame_store)
