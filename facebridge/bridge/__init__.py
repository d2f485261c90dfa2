"""Bridge module - Runtime context, session messages and the controller.

Provides:
- BridgeContext / RuntimeConfig: Explicit per-process runtime state
- SessionMessage: Closed union of inbound WebSocket messages
- BridgeController: Receive path, message handling, playback events
"""

from facebridge.bridge.context import BridgeContext, RuntimeConfig
from facebridge.bridge.controller import BridgeController
from facebridge.bridge.messages import SessionMessage, parse_session_message

__all__ = [
    "BridgeContext",
    "RuntimeConfig",
    "BridgeController",
    "SessionMessage",
    "parse_session_message",
]
