"""OSC module - Threshold-filtered parameter sends over UDP."""

from facebridge.osc.dispatcher import (
    BatchResult,
    ParameterDispatcher,
    ParameterSink,
    coerce_value,
)
from facebridge.osc.sender import OscConfig, OscSender

__all__ = [
    "BatchResult",
    "OscConfig",
    "OscSender",
    "ParameterDispatcher",
    "ParameterSink",
    "coerce_value",
]
