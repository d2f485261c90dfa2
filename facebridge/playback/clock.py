"""Playback Clock - Independently clocked drain of a capture.

Each playback run executes on its own daemon thread so its ~1ms polling
loop is isolated from WebSocket and UDP work on the event loop.

Channels:
- Commands in: start() / stop(), called from the host thread
- Events out: one ordered emit callback, called from the run thread

Every tick:
1. elapsed = now - start (monotonic, ms)
2. Every due frame -> FrameEvent (+ TimecodeEvent when requested)
3. Every due trigger -> TriggerEvent
4. One ProgressEvent
5. Nothing left -> CompleteEvent, run ends

The run works on deep copies of the frames and triggers, so draining
never touches the caller's dataset. start() cancels any previous run and
returns without waiting for its thread; events carry a run_id so a host
can discard anything a superseded run emitted before it observed the
cancel.

Timing notes:
- Uses time.perf_counter_ns(), monotonic with the best available resolution
- Cancellation is polled once per tick (worst case ~1 tick latency)
"""

from __future__ import annotations

import copy
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Final, Sequence

from facebridge.config.constants import BRIDGE
from facebridge.observability.logging import PlaybackLogger, get_logger
from facebridge.playback.dataset import Frame, Scalar, Trigger

logger = get_logger(__name__)

NS_PER_MS: Final[int] = 1_000_000


# -----------------------------------------------------------------------------
# Events (run thread -> host)
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FrameEvent:
    """A captured frame became due."""

    run_id: int
    time_ms: float
    params: dict[str, float]


@dataclass(frozen=True)
class TimecodeEvent:
    """Timecode for a drained frame should be sent."""

    run_id: int
    time_ms: float


@dataclass(frozen=True)
class TriggerEvent:
    """A trigger became due."""

    run_id: int
    address: str
    args: tuple[Scalar, ...]


@dataclass(frozen=True)
class ProgressEvent:
    """Once per tick."""

    run_id: int
    elapsed_ms: float
    total_ms: float


@dataclass(frozen=True)
class CompleteEvent:
    """Everything has been drained."""

    run_id: int
    elapsed_ms: float


PlaybackEvent = FrameEvent | TimecodeEvent | TriggerEvent | ProgressEvent | CompleteEvent
EventSink = Callable[[PlaybackEvent], None]


@dataclass
class _PlaybackRun:
    """State private to one run thread."""

    run_id: int
    frames: deque[Frame]
    triggers: deque[Trigger]
    send_timecode: bool
    total_ms: float
    start_ns: int = 0
    cancelled: threading.Event = field(default_factory=threading.Event)
    thread: threading.Thread | None = None


class PlaybackClock:
    """Real-time playback loop emitting frame, trigger and timecode events.

    Usage:
        clock = PlaybackClock(emit=on_event)
        run_id = clock.start(dataset.frames, dataset.triggers, send_timecode=True)

        # later, from any thread
        clock.stop()
    """

    def __init__(
        self,
        emit: EventSink,
        tick_ms: float = BRIDGE.PLAYBACK_TICK_MS,
    ) -> None:
        """Initialize clock.

        Args:
            emit: Receives every event, in order, on the run thread
            tick_ms: Polling cadence in milliseconds
        """
        self._emit = emit
        self._tick_s = tick_ms / 1000.0
        self._lock = threading.Lock()
        self._run: _PlaybackRun | None = None
        self._next_run_id = 0

    def _now_ns(self) -> int:
        return time.perf_counter_ns()

    def start(
        self,
        frames: Sequence[Frame],
        triggers: Sequence[Trigger] = (),
        send_timecode: bool = False,
    ) -> int:
        """Start a new run, cancelling any run still in progress.

        Never blocks on the cancelled run's thread, so it is safe to call
        from the event loop.

        Args:
            frames: Frames sorted ascending by time_ms
            triggers: Triggers in any order (sorted here)
            send_timecode: Also emit a TimecodeEvent per drained frame

        Returns:
            run_id stamped on every event of this run
        """
        frame_copy = copy.deepcopy(list(frames))
        trigger_copy = sorted(copy.deepcopy(list(triggers)), key=lambda t: t.time_ms)

        with self._lock:
            previous = self._run
            self._next_run_id += 1
            run = _PlaybackRun(
                run_id=self._next_run_id,
                frames=deque(frame_copy),
                triggers=deque(trigger_copy),
                send_timecode=send_timecode,
                total_ms=frame_copy[-1].time_ms if frame_copy else 0.0,
            )
            self._run = run

        if previous is not None:
            previous.cancelled.set()

        PlaybackLogger(run.run_id).run_started(
            frames=len(run.frames),
            triggers=len(run.triggers),
            total_ms=run.total_ms,
        )

        run.start_ns = self._now_ns()
        run.thread = threading.Thread(
            target=self._loop,
            args=(run,),
            name=f"playback-{run.run_id}",
            daemon=True,
        )
        run.thread.start()
        return run.run_id

    def stop(self) -> None:
        """Cancel the current run; the loop observes it on its next tick."""
        with self._lock:
            run = self._run
        if run is not None:
            run.cancelled.set()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the current run thread to exit.

        Returns:
            True if no run thread is alive afterwards
        """
        with self._lock:
            run = self._run
        if run is None or run.thread is None:
            return True
        run.thread.join(timeout)
        return not run.thread.is_alive()

    def _loop(self, run: _PlaybackRun) -> None:
        """Tick until drained or cancelled."""
        log = PlaybackLogger(run.run_id)
        elapsed = 0.0

        try:
            while not run.cancelled.is_set():
                elapsed = (self._now_ns() - run.start_ns) / NS_PER_MS

                while run.frames and run.frames[0].time_ms <= elapsed:
                    frame = run.frames.popleft()
                    self._emit(FrameEvent(run.run_id, frame.time_ms, dict(frame.params)))
                    if run.send_timecode:
                        self._emit(TimecodeEvent(run.run_id, frame.time_ms))

                while run.triggers and run.triggers[0].time_ms <= elapsed:
                    trigger = run.triggers.popleft()
                    self._emit(TriggerEvent(run.run_id, trigger.address, trigger.args))

                self._emit(ProgressEvent(run.run_id, elapsed, run.total_ms))

                if not run.frames and not run.triggers:
                    self._emit(CompleteEvent(run.run_id, elapsed))
                    log.run_completed(elapsed)
                    return

                run.cancelled.wait(self._tick_s)

            log.run_cancelled(elapsed)

        except Exception as e:
            # Host side went away (closed loop); end this run quietly
            logger.warning("playback_emit_error", run_id=run.run_id, error=str(e))

        finally:
            run.cancelled.set()

    @property
    def is_running(self) -> bool:
        """Whether a run is in progress."""
        with self._lock:
            run = self._run
        return run is not None and not run.cancelled.is_set()

    @property
    def current_run_id(self) -> int | None:
        """run_id of the latest run started, None before the first."""
        with self._lock:
            return self._run.run_id if self._run else None
