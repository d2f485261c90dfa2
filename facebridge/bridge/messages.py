"""Session Messages - Closed set of inbound WebSocket messages.

Every browser message is a JSON object tagged by "type". The tags form a
pydantic discriminated union, so an unknown tag or a malformed payload
fails validation and the message is dropped; the connection stays open.

Schema examples:
    {"type": "oscBatch", "osc": [{"addr": "/beyond/...", "val": 0.5}]}
    {"type": "sendTC", "timeMs": 1500, "fps": 30}
    {"type": "tcMode", "mode": "receive", "fps": 25, "host": "2.255.255.255"}
    {"type": "loadData", "data": {"frames": [...], "triggers": [...]}}
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from facebridge.config.constants import SUPPORTED_FPS
from facebridge.exceptions import SessionMessageError

TcMode = Literal["send", "receive", "off"]
OscArg = bool | int | float | str


class _Message(BaseModel):
    """Common model config: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _supported_fps(cls, v: float | None) -> float | None:
    """Only the four ArtNet timecode rates can be sent or selected."""
    if v is not None and v not in SUPPORTED_FPS:
        raise ValueError(f"fps must be one of {SUPPORTED_FPS}")
    return v


class OscBatchMessage(_Message):
    """Live parameters from the browser."""

    type: Literal["oscBatch"]
    osc: list[Any] | dict[str, Any] = Field(default_factory=list)


class PlaybackFrameMessage(_Message):
    """Browser-side playback frame, same handling as oscBatch."""

    type: Literal["playback"]
    osc: list[Any] | dict[str, Any] = Field(default_factory=list)


class SendTimecodeMessage(_Message):
    """Browser-driven timecode send."""

    type: Literal["sendTC"]
    time_ms: float = Field(alias="timeMs")
    fps: float | None = None
    host: str | None = None

    check_fps = field_validator("fps")(_supported_fps)


class TriggerMessage(_Message):
    """Single unconditional OSC message."""

    type: Literal["trigger"]
    address: str = Field(min_length=1)
    args: list[OscArg] = Field(default_factory=list)


class TimecodeModeMessage(_Message):
    """Change timecode mode, rate or broadcast target."""

    type: Literal["tcMode"]
    mode: TcMode | None = None
    fps: float | None = None
    host: str | None = None

    check_fps = field_validator("fps")(_supported_fps)


class LoadDataMessage(_Message):
    """Dataset upload; validated separately by Dataset.from_dict."""

    type: Literal["loadData"]
    data: Any = None


class ConfigMessage(_Message):
    """Retarget OSC, change threshold, or clear the dispatch cache."""

    type: Literal["config"]
    host: str | None = None
    port: int | None = Field(default=None, ge=1, le=65535)
    threshold: float | None = Field(default=None, ge=0)
    reset_cache: bool = Field(default=False, alias="resetCache")


class PlayMessage(_Message):
    """Start server-side playback of the loaded dataset."""

    type: Literal["play"]
    # None: send timecode only when the bridge is in send mode
    send_tc: bool | None = Field(default=None, alias="sendTC")


class StopMessage(_Message):
    """Stop server-side playback."""

    type: Literal["stop"]


SessionMessage = Annotated[
    Union[
        OscBatchMessage,
        PlaybackFrameMessage,
        SendTimecodeMessage,
        TriggerMessage,
        TimecodeModeMessage,
        LoadDataMessage,
        ConfigMessage,
        PlayMessage,
        StopMessage,
    ],
    Field(discriminator="type"),
]

MESSAGE_TYPES: tuple[type[_Message], ...] = (
    OscBatchMessage,
    PlaybackFrameMessage,
    SendTimecodeMessage,
    TriggerMessage,
    TimecodeModeMessage,
    LoadDataMessage,
    ConfigMessage,
    PlayMessage,
    StopMessage,
)

_adapter: TypeAdapter[SessionMessage] = TypeAdapter(SessionMessage)


def parse_session_message(raw: str | bytes | dict[str, Any]) -> SessionMessage:
    """Parse one inbound message.

    Args:
        raw: JSON text/bytes or an already decoded object

    Returns:
        Typed message

    Raises:
        SessionMessageError: On invalid JSON, unknown type, or bad payload
    """
    try:
        if isinstance(raw, dict):
            return _adapter.validate_python(raw)
        return _adapter.validate_json(raw)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        raise SessionMessageError(
            reason=first.get("msg", "validation failed"),
            message_type=_peek_type(raw),
        ) from e


def _peek_type(raw: str | bytes | dict[str, Any]) -> str | None:
    if isinstance(raw, dict):
        tag = raw.get("type")
        return tag if isinstance(tag, str) else None
    return None
