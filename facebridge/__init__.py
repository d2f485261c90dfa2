"""Face OSC Bridge - capture parameters to OSC and ArtNet timecode."""

__version__ = "4.0.0"

# Export exception hierarchy for easy importing
from facebridge.exceptions import (
    BridgeError,
    ConfigurationError,
    InvalidConfigError,
    DatasetError,
    TimecodeError,
    SessionMessageError,
    TransportError,
    OscSendError,
    ArtNetSendError,
)

__all__ = [
    "__version__",
    # Base
    "BridgeError",
    # Configuration
    "ConfigurationError",
    "InvalidConfigError",
    # Data
    "DatasetError",
    "TimecodeError",
    "SessionMessageError",
    # Transport
    "TransportError",
    "OscSendError",
    "ArtNetSendError",
]
