"""Application Settings - Environment-based configuration.

Uses Pydantic Settings for validation and type coercion.

These are start-up defaults only. Everything the browser session can change
(mode, fps, targets, threshold) is copied into the bridge context at start-up
and mutated there, never here.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from facebridge.config.constants import ARTNET, BRIDGE, SUPPORTED_FPS


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="WebSocket/API bind host")
    api_port: int = Field(default=8081, ge=1024, le=65535, description="WebSocket/API port")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment name"
    )

    # OSC target (show-control engine)
    osc_host: str = Field(default=BRIDGE.OSC_HOST, description="OSC target host")
    osc_port: int = Field(default=BRIDGE.OSC_PORT, ge=1, le=65535, description="OSC target port")
    change_threshold: float = Field(
        default=BRIDGE.CHANGE_THRESHOLD,
        ge=0.0,
        description="Minimum value change before a parameter is resent",
    )

    # ArtNet timecode
    artnet_enabled: bool = Field(default=True, description="Bind the ArtNet UDP socket")
    artnet_bind_host: str = Field(default="0.0.0.0", description="ArtNet bind address")
    artnet_port: int = Field(default=ARTNET.PORT, ge=1, le=65535, description="ArtNet UDP port")
    artnet_broadcast: str = Field(
        default=BRIDGE.ARTNET_BROADCAST, description="ArtNet timecode destination"
    )
    tc_fps: float = Field(default=ARTNET.DEFAULT_FPS, description="Timecode frames per second")
    tc_mode: Literal["send", "receive", "off"] = Field(
        default="send", description="Timecode mode"
    )
    debounce_ms: float = Field(
        default=BRIDGE.DEBOUNCE_MS,
        ge=0.0,
        le=100.0,
        description="Received timecode debounce window",
    )

    # Playback
    playback_tick_ms: float = Field(
        default=BRIDGE.PLAYBACK_TICK_MS,
        gt=0.0,
        le=50.0,
        description="Playback loop polling cadence",
    )

    # Dataset auto-load
    dataset_path: str | None = Field(
        default="face-data.json",
        description="Dataset JSON loaded at start-up when the file exists",
    )

    @field_validator("tc_fps")
    @classmethod
    def validate_tc_fps(cls, v: float) -> float:
        """Only the four ArtNet timecode rates are allowed."""
        if v not in SUPPORTED_FPS:
            raise ValueError(f"tc_fps must be one of {SUPPORTED_FPS}")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
