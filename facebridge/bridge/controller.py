"""Bridge Controller - Composes the timecode, lookup and dispatch path.

Three time sources meet here:

    ArtNet TC (receive mode) ──┐
                               ├─→ [BridgeController] ─→ ParameterDispatcher ─→ OSC
    PlaybackClock events ──────┤                     └─→ ArtNetEndpoint (TC out)
                               │
    Browser session messages ──┘                     ─→ observers (status/echo)

Everything except the PlaybackClock's run thread executes on the asyncio
event loop; clock events are marshalled onto the loop through an
asyncio.Queue and drained by a pump task, one at a time.

Usage:
    controller = BridgeController(context, artnet=endpoint, publish=hub.broadcast)
    await controller.start()

    controller.handle_raw_message(text, reply=client.send)  # from the WebSocket
    controller.handle_timecode_packet(data)                  # from the ArtNet socket

    await controller.stop()
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Protocol

from facebridge.bridge.context import BridgeContext
from facebridge.bridge.messages import (
    ConfigMessage,
    LoadDataMessage,
    OscBatchMessage,
    PlaybackFrameMessage,
    PlayMessage,
    SendTimecodeMessage,
    SessionMessage,
    StopMessage,
    TimecodeModeMessage,
    TriggerMessage,
    parse_session_message,
)
from facebridge.config.constants import BRIDGE
from facebridge.exceptions import BridgeError, DatasetError, SessionMessageError
from facebridge.observability.logging import BridgeLogger, get_logger
from facebridge.playback.clock import (
    CompleteEvent,
    FrameEvent,
    PlaybackClock,
    PlaybackEvent,
    ProgressEvent,
    TimecodeEvent,
    TriggerEvent,
)
from facebridge.playback.dataset import Dataset
from facebridge.timecode.codec import decode

logger = get_logger(__name__)

Publisher = Callable[[dict[str, Any]], Any]

# Progress is emitted every clock tick; observers get it at most this often
PROGRESS_PUBLISH_MS = 100.0


class TimecodeTransport(Protocol):
    """Outbound timecode channel (ArtNetEndpoint, test doubles)."""

    def send_timecode(self, time_ms: float, fps: float, host: str | None = None) -> bool:
        ...

    def set_broadcast(self, host: str) -> None:
        ...


class OscTarget(Protocol):
    """OSC client that can be pointed elsewhere at runtime."""

    def retarget(self, host: str, port: int) -> None:
        ...


class BridgeController:
    """Routes session messages, received timecode and playback events."""

    def __init__(
        self,
        context: BridgeContext,
        artnet: TimecodeTransport,
        osc: OscTarget | None = None,
        publish: Publisher | None = None,
        tick_ms: float = BRIDGE.PLAYBACK_TICK_MS,
    ) -> None:
        """Initialize controller.

        Args:
            context: Runtime state (config, dataset, dispatcher)
            artnet: Outbound timecode channel
            osc: OSC client to retarget on config messages
            publish: Broadcasts a notification dict to every observer
            tick_ms: Playback clock cadence
        """
        self._ctx = context
        self._artnet = artnet
        self._osc = osc
        self._publish = publish
        self._log = BridgeLogger()

        self._loop: asyncio.AbstractEventLoop | None = None
        self._events: asyncio.Queue[PlaybackEvent] | None = None
        self._pump_task: asyncio.Task | None = None
        self._clock = PlaybackClock(emit=self._emit_from_clock, tick_ms=tick_ms)
        self._last_progress_ms = -PROGRESS_PUBLISH_MS

        self._handlers: dict[type, Callable[[Any], None]] = {
            OscBatchMessage: self._on_osc_batch,
            PlaybackFrameMessage: self._on_osc_batch,
            SendTimecodeMessage: self._on_send_timecode,
            TriggerMessage: self._on_trigger,
            TimecodeModeMessage: self._on_tc_mode,
            LoadDataMessage: self._on_load_data,
            ConfigMessage: self._on_config,
            PlayMessage: self._on_play,
            StopMessage: self._on_stop,
        }

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Start the playback event pump on the running loop."""
        if self._pump_task is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._events = asyncio.Queue()
        self._pump_task = asyncio.create_task(self._pump())

    async def stop(self) -> None:
        """Stop playback and the event pump."""
        self._clock.stop()
        await asyncio.to_thread(self._clock.join, 0.1)

        if self._pump_task:
            self._pump_task.cancel()
            try:
                await self._pump_task
            except asyncio.CancelledError:
                pass
            self._pump_task = None

    # -------------------------------------------------------------------------
    # Inbound: ArtNet timecode (receive mode)
    # -------------------------------------------------------------------------

    def handle_timecode_packet(self, data: bytes) -> bool:
        """Process one received ArtNet datagram.

        Returns:
            True if the packet was accepted (not noise, not debounced)
        """
        if self._ctx.config.mode != "receive":
            return False

        tc = decode(data)
        if tc is None:
            return False

        time_ms = tc.time_ms
        last = self._ctx.last_received_ms
        if last is not None and abs(time_ms - last) < self._ctx.config.debounce_ms:
            return False
        self._ctx.last_received_ms = time_ms

        frame = self._ctx.frame_store.interpolate(time_ms)
        if frame is not None:
            self._ctx.dispatcher.send_batch(frame.params)
            for trigger in self._ctx.scheduler.advance(time_ms):
                self._ctx.dispatcher.send(trigger.address, *trigger.args)
                self._log.trigger_fired(trigger.address, trigger.time_ms)

        self._notify({"type": "tc", "timeMs": time_ms})
        return True

    # -------------------------------------------------------------------------
    # Inbound: session messages
    # -------------------------------------------------------------------------

    def handle_raw_message(self, raw: str | bytes, reply: Publisher | None = None) -> bool:
        """Parse and handle one WebSocket message.

        Malformed messages are dropped.

        Args:
            raw: Message text or bytes
            reply: Sends a notification back to the originating session only

        Returns:
            True if the message was handled
        """
        try:
            message = parse_session_message(raw)
        except SessionMessageError as e:
            self._log.message_dropped(e.details.get("reason", e.message), e.details.get("message_type"))
            return False
        return self.handle_message(message, reply)

    def handle_message(self, message: SessionMessage, reply: Publisher | None = None) -> bool:
        """Handle one parsed session message.

        A failed operation is reported to reply, never broadcast.

        Returns:
            True if the message was handled
        """
        handler = self._handlers.get(type(message))
        if handler is None:
            self._log.message_dropped("unhandled message type", getattr(message, "type", None))
            return False
        try:
            handler(message)
        except BridgeError as e:
            logger.warning("session_message_failed", **e.to_dict())
            if reply is not None:
                reply({"type": "error", "message": e.message})
            return False
        return True

    def _on_osc_batch(self, message: OscBatchMessage | PlaybackFrameMessage) -> None:
        self._ctx.dispatcher.send_batch(message.osc)

    def _on_send_timecode(self, message: SendTimecodeMessage) -> None:
        self._artnet.send_timecode(
            message.time_ms,
            message.fps or self._ctx.config.fps,
            message.host,
        )

    def _on_trigger(self, message: TriggerMessage) -> None:
        self._ctx.dispatcher.send(message.address, *message.args)
        self._log.trigger_fired(message.address)

    def _on_tc_mode(self, message: TimecodeModeMessage) -> None:
        self.set_mode(message.mode, message.fps, message.host)

    def _on_load_data(self, message: LoadDataMessage) -> None:
        self.load_dataset(message.data)

    def _on_config(self, message: ConfigMessage) -> None:
        self.configure_osc(
            host=message.host,
            port=message.port,
            threshold=message.threshold,
            reset_cache=message.reset_cache,
        )

    def _on_play(self, message: PlayMessage) -> None:
        self.start_playback(message.send_tc)

    def _on_stop(self, message: StopMessage) -> None:
        self.stop_playback()

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def set_mode(
        self,
        mode: str | None = None,
        fps: float | None = None,
        host: str | None = None,
    ) -> None:
        """Update timecode mode, rate and broadcast target; rewind triggers."""
        config = self._ctx.config
        config.mode = mode or config.mode
        config.fps = fps or config.fps
        if host:
            config.artnet_broadcast = host
            self._artnet.set_broadcast(host)

        self._ctx.scheduler.reset()
        self._ctx.last_received_ms = None

        self._log.mode_changed(config.mode, config.fps, config.artnet_broadcast)
        self._notify({"type": "tcMode", "mode": config.mode})

    def load_dataset(self, payload: Any) -> Dataset:
        """Validate and install a dataset payload.

        Raises:
            DatasetError: If the payload is malformed; the active dataset
                is left untouched
        """
        try:
            dataset = Dataset.from_dict(payload)
        except DatasetError as e:
            self._log.dataset_rejected(e.to_dict())
            raise

        self._ctx.install(dataset)
        self._log.dataset_loaded(
            frames=dataset.frame_count,
            triggers=len(dataset.triggers),
            duration_s=dataset.duration_ms / 1000,
        )
        self._notify({"type": "dataLoaded", "frames": dataset.frame_count})
        return dataset

    def configure_osc(
        self,
        host: str | None = None,
        port: int | None = None,
        threshold: float | None = None,
        reset_cache: bool = False,
    ) -> None:
        """Retarget the OSC client and/or change filtering.

        Raises:
            InvalidConfigError: If the new target cannot be used
        """
        config = self._ctx.config
        dispatcher = self._ctx.dispatcher

        if (host or port) and self._osc is not None:
            new_host = host or config.osc_host
            new_port = port or config.osc_port
            self._osc.retarget(new_host, new_port)
            config.osc_host, config.osc_port = new_host, new_port

        if threshold is not None:
            dispatcher.threshold = threshold
        if reset_cache:
            dispatcher.clear_cache()

        self._log.osc_retargeted(config.osc_host, config.osc_port, dispatcher.threshold)
        self._notify({
            "type": "config",
            "host": config.osc_host,
            "port": config.osc_port,
            "threshold": dispatcher.threshold,
        })

    def start_playback(self, send_tc: bool | None = None) -> int | None:
        """Play the active dataset on the playback clock.

        Args:
            send_tc: Emit timecode per frame; None follows send mode

        Returns:
            run_id, or None when no dataset is loaded
        """
        dataset = self._ctx.dataset
        if dataset is None:
            logger.info("playback_ignored", reason="no dataset loaded")
            return None

        if send_tc is None:
            send_tc = self._ctx.config.mode == "send"

        self._last_progress_ms = -PROGRESS_PUBLISH_MS
        return self._clock.start(dataset.frames, dataset.triggers, send_timecode=send_tc)

    def stop_playback(self) -> None:
        """Stop the playback clock."""
        self._clock.stop()

    def status(self) -> dict[str, Any]:
        """Connection status snapshot sent to new clients."""
        return {
            "type": "status",
            "tcMode": self._ctx.config.mode,
            "loaded": self._ctx.loaded,
            "frames": self._ctx.frame_count,
        }

    # -------------------------------------------------------------------------
    # Playback events (run thread -> loop)
    # -------------------------------------------------------------------------

    def _emit_from_clock(self, event: PlaybackEvent) -> None:
        """Runs on the clock thread; hands the event to the loop."""
        if self._loop is None or self._events is None:
            return
        self._loop.call_soon_threadsafe(self._events.put_nowait, event)

    async def _pump(self) -> None:
        """Drain playback events in order."""
        assert self._events is not None
        while True:
            event = await self._events.get()
            try:
                self.handle_playback_event(event)
            except Exception as e:
                logger.warning("playback_event_error", error=str(e), event=type(event).__name__)

    def handle_playback_event(self, event: PlaybackEvent) -> None:
        """Act on one clock event; events of superseded runs are dropped."""
        if event.run_id != self._clock.current_run_id:
            return

        if isinstance(event, FrameEvent):
            self._ctx.dispatcher.send_batch(event.params)
        elif isinstance(event, TimecodeEvent):
            # Never broadcast while listening; our own packets would loop back
            if self._ctx.config.mode == "send":
                self._artnet.send_timecode(event.time_ms, self._ctx.config.fps)
        elif isinstance(event, TriggerEvent):
            self._ctx.dispatcher.send(event.address, *event.args)
            self._log.trigger_fired(event.address)
        elif isinstance(event, ProgressEvent):
            if event.elapsed_ms - self._last_progress_ms >= PROGRESS_PUBLISH_MS:
                self._last_progress_ms = event.elapsed_ms
                self._notify({
                    "type": "progress",
                    "elapsed": event.elapsed_ms,
                    "total": event.total_ms,
                })
        elif isinstance(event, CompleteEvent):
            self._notify({"type": "playbackDone", "elapsed": event.elapsed_ms})

    def _notify(self, message: dict[str, Any]) -> None:
        if self._publish is not None:
            self._publish(message)

    @property
    def context(self) -> BridgeContext:
        """Runtime state."""
        return self._ctx

    @property
    def clock(self) -> PlaybackClock:
        """Playback clock."""
        return self._clock

    @property
    def is_playing(self) -> bool:
        """Whether a playback run is in progress."""
        return self._clock.is_running
