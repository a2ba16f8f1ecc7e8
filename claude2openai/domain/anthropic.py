"""
Anthropic Messages Domain Model

Request, response and stream event models of the upstream protocol.
"""

from typing import Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from typing_extensions import Literal


# Fixed completion ceiling sent with every request
DEFAULT_MAX_TOKENS = 4096

# Media type assumed for remote images
DEFAULT_IMAGE_MEDIA_TYPE = "image/jpeg"


class ImageSource(BaseModel):
    type: Literal["base64", "url"]
    media_type: str
    data: str


class TextBlock(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImageBlock(BaseModel):
    type: Literal["image"] = "image"
    source: ImageSource


ContentBlock = Union[TextBlock, ImageBlock]


class AnthropicMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: list[ContentBlock]


class AnthropicMessagesRequest(BaseModel):
    """Messages API request body"""

    model: str
    max_tokens: int = DEFAULT_MAX_TOKENS
    system: Optional[str] = None
    messages: list[AnthropicMessage]
    stream: bool = False
    temperature: Optional[float] = None
    top_p: Optional[float] = None

    def to_body(self) -> dict[str, Any]:
        """Serialize for the wire, leaving unset optional fields out"""
        return self.model_dump(exclude_none=True)


# ============ Unary Response ============


class ResponseContentBlock(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    text: Optional[str] = None

    @field_validator("type", "text", mode="before")
    @classmethod
    def _non_string_to_none(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None


class ResponseUsage(BaseModel):
    model_config = ConfigDict(extra="allow")

    input_tokens: int = 0
    output_tokens: int = 0

    @field_validator("input_tokens", "output_tokens", mode="before")
    @classmethod
    def _non_int_to_zero(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, int):
            return 0
        return value


class ResponseError(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = "upstream_error"
    message: str = ""


class AnthropicMessagesResponse(BaseModel):
    """Messages API response body, lenient about shape drift"""

    model_config = ConfigDict(extra="allow")

    id: str = ""
    model: str = ""
    content: list[ResponseContentBlock] = Field(default_factory=list)
    usage: ResponseUsage = Field(default_factory=ResponseUsage)
    error: Optional[ResponseError] = None

    @field_validator("id", "model", mode="before")
    @classmethod
    def _non_string_to_empty(cls, value: Any) -> Any:
        return value if isinstance(value, str) else ""

    @field_validator("content", "usage", mode="before")
    @classmethod
    def _drift_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        if info.field_name == "content":
            if not isinstance(value, list):
                return []
            # Blocks that are not objects carry no text
            return [block for block in value if isinstance(block, dict)]
        return value if isinstance(value, dict) else {}


# ============ Stream Events ============


class TextDelta(BaseModel):
    type: Literal["text_delta"]
    text: str


class OtherDelta(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None


class ContentBlockDeltaEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["content_block_delta"]
    index: int = 0
    delta: Union[TextDelta, OtherDelta] = Field(union_mode="left_to_right")


class StreamErrorEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["error"]
    error: ResponseError = Field(default_factory=ResponseError)


StreamEvent = Union[ContentBlockDeltaEvent, StreamErrorEvent]


def parse_stream_payload(payload: Any) -> Optional[StreamEvent]:
    """
    Map a decoded data payload onto one of the known event shapes.

    Returns None for anything unrecognized.
    """
    if not isinstance(payload, dict):
        return None

    event_type = payload.get("type")
    try:
        if event_type == "content_block_delta":
            return ContentBlockDeltaEvent.model_validate(payload)
        if event_type == "error":
            return StreamErrorEvent.model_validate(payload)
    except ValidationError:
        return None
    return None
