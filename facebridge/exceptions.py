"""Face OSC Bridge Exception Hierarchy.

Provides structured exception classes for the bridge core.

Hierarchy:
    BridgeError (base)
    ├── ConfigurationError
    │   └── InvalidConfigError
    ├── DatasetError
    ├── TimecodeError
    ├── SessionMessageError
    └── TransportError
        ├── OscSendError
        └── ArtNetSendError

None of these are fatal to a running bridge: callers log them and carry on.
"""

from typing import Any


class BridgeError(Exception):
    """Base exception for all bridge errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(BridgeError):
    """Base exception for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    def __init__(
        self,
        config_key: str,
        value: Any,
        reason: str,
    ) -> None:
        super().__init__(
            message=f"Invalid configuration for {config_key}: {reason}",
            details={
                "config_key": config_key,
                "value": str(value),
                "reason": reason,
            },
            recoverable=True,  # Previous value stays in effect
        )


# =============================================================================
# Dataset Errors
# =============================================================================


class DatasetError(BridgeError):
    """Raised when a dataset payload cannot be loaded.

    The previously loaded dataset stays authoritative.
    """

    def __init__(
        self,
        reason: str,
        index: int | None = None,
        section: str | None = None,
    ) -> None:
        details: dict[str, Any] = {"reason": reason}
        if section:
            details["section"] = section
        if index is not None:
            details["index"] = index
        super().__init__(
            message=f"Invalid dataset: {reason}",
            details=details,
            recoverable=True,
        )


# =============================================================================
# Timecode Errors
# =============================================================================


class TimecodeError(BridgeError):
    """Raised when a timecode value cannot be encoded."""

    def __init__(self, reason: str, time_ms: float | None = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if time_ms is not None:
            details["time_ms"] = time_ms
        super().__init__(
            message=f"Timecode error: {reason}",
            details=details,
            recoverable=True,
        )


# =============================================================================
# Session Errors
# =============================================================================


class SessionMessageError(BridgeError):
    """Raised when an inbound session message is malformed."""

    def __init__(self, reason: str, message_type: str | None = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if message_type:
            details["message_type"] = message_type
        super().__init__(
            message=f"Malformed session message: {reason}",
            details=details,
            recoverable=True,  # Message is dropped, connection stays open
        )


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(BridgeError):
    """Base exception for transport-related errors."""

    pass


class OscSendError(TransportError):
    """Raised when an OSC datagram cannot be sent."""

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(
            message=f"OSC send failed for {address}: {reason}",
            details={"address": address, "reason": reason},
            recoverable=True,
        )


class ArtNetSendError(TransportError):
    """Raised when an ArtNet datagram cannot be sent."""

    def __init__(self, host: str, port: int, reason: str) -> None:
        super().__init__(
            message=f"ArtNet send to {host}:{port} failed: {reason}",
            details={"host": host, "port": port, "reason": reason},
            recoverable=True,
        )
