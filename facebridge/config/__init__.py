"""Configuration module."""

from facebridge.config.constants import ARTNET, BRIDGE, SUPPORTED_FPS
from facebridge.config.settings import Settings, get_settings

__all__ = [
    "ARTNET",
    "BRIDGE",
    "SUPPORTED_FPS",
    "Settings",
    "get_settings",
]
