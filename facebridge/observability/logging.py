"""Structured Logging - JSON logs with event names.

Provides structured logging for:
- Client session events (connect, disconnect)
- Mode and target changes
- Dataset loads
- Trigger firing
- Playback runs
- Transport failures

Every record is an event name plus key/value context.
"""

import logging
import sys
from typing import Any

import structlog


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON; else human-readable
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Also configure standard logging (uvicorn) to the same stream
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


def bind_client(client_id: str) -> None:
    """Bind client_id to all logs in current context.

    Args:
        client_id: WebSocket client identifier
    """
    structlog.contextvars.bind_contextvars(client_id=client_id)


def unbind_client() -> None:
    """Remove client_id from log context."""
    structlog.contextvars.unbind_contextvars("client_id")


# -----------------------------------------------------------------------------
# Event-specific logging functions
# -----------------------------------------------------------------------------


class BridgeLogger:
    """Logger for bridge control events."""

    def __init__(self, name: str = "bridge") -> None:
        self._log = get_logger(name)

    def mode_changed(self, mode: str, fps: float, host: str) -> None:
        """Log timecode mode change."""
        self._log.info(
            "tc_mode_changed",
            event_type="bridge.mode_changed",
            mode=mode,
            fps=fps,
            host=host,
        )

    def osc_retargeted(self, host: str, port: int, threshold: float) -> None:
        """Log OSC target or threshold change."""
        self._log.info(
            "osc_retargeted",
            event_type="bridge.osc_retargeted",
            host=host,
            port=port,
            threshold=threshold,
        )

    def dataset_loaded(self, frames: int, triggers: int, duration_s: float) -> None:
        """Log a successful dataset load."""
        self._log.info(
            "dataset_loaded",
            event_type="dataset.loaded",
            frames=frames,
            triggers=triggers,
            duration_s=round(duration_s, 1),
        )

    def dataset_rejected(self, error: dict[str, Any]) -> None:
        """Log a rejected dataset payload."""
        self._log.warning(
            "dataset_rejected",
            event_type="dataset.rejected",
            **error,
        )

    def trigger_fired(self, address: str, time_ms: float | None = None) -> None:
        """Log a fired trigger."""
        self._log.info(
            "trigger_fired",
            event_type="trigger.fired",
            address=address,
            time_ms=time_ms,
        )

    def message_dropped(self, reason: str, message_type: str | None = None) -> None:
        """Log a dropped session message."""
        self._log.debug(
            "session_message_dropped",
            event_type="session.message_dropped",
            reason=reason,
            message_type=message_type,
        )


class PlaybackLogger:
    """Logger for playback clock runs."""

    def __init__(self, run_id: int | None = None) -> None:
        self._log = get_logger("playback")
        if run_id is not None:
            self._log = self._log.bind(run_id=run_id)

    def run_started(self, frames: int, triggers: int, total_ms: float) -> None:
        """Log playback run start."""
        self._log.info(
            "playback_started",
            event_type="playback.started",
            frames=frames,
            triggers=triggers,
            total_ms=total_ms,
        )

    def run_completed(self, elapsed_ms: float) -> None:
        """Log playback run completion."""
        self._log.info(
            "playback_completed",
            event_type="playback.completed",
            elapsed_ms=round(elapsed_ms, 3),
        )

    def run_cancelled(self, elapsed_ms: float) -> None:
        """Log playback run cancellation."""
        self._log.info(
            "playback_cancelled",
            event_type="playback.cancelled",
            elapsed_ms=round(elapsed_ms, 3),
        )


def init_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Initialize logging with defaults.

    Call this once at application startup.
    """
    configure_logging(level=level, json_format=json_format)
