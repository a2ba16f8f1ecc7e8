"""
OpenAI Chat Completions Domain Model

Request, response and streaming chunk models of the client-facing protocol.
"""

import time
import uuid
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator
from typing_extensions import Literal, get_args


ChatRole = Literal["system", "user", "assistant"]


class TextPart(BaseModel):
    """Text content part"""

    type: Literal["text"] = "text"
    text: str = ""


class ImageUrlPart(BaseModel):
    """Image content part, either a remote URL or a base64 data URI"""

    type: Literal["image_url"] = "image_url"
    url: str

    @property
    def is_data_uri(self) -> bool:
        return self.url.startswith("data:image/")


ContentPart = Union[TextPart, ImageUrlPart]


def _parse_content_part(part: Any) -> Optional[ContentPart]:
    if not isinstance(part, dict):
        return None

    part_type = part.get("type")
    if part_type == "text":
        text = part.get("text")
        return TextPart(text=text if isinstance(text, str) else "")

    if part_type == "image_url":
        image_url = part.get("image_url")
        url = image_url.get("url") if isinstance(image_url, dict) else image_url
        if isinstance(url, str) and url:
            return ImageUrlPart(url=url)
        return None

    # Unknown part types are dropped
    return None


class ChatMessage(BaseModel):
    """Chat message; list content is parsed into typed parts on input"""

    role: ChatRole
    content: Union[str, list[ContentPart], None] = None

    @field_validator("role", mode="before")
    @classmethod
    def _check_role(cls, value: Any) -> Any:
        if value not in get_args(ChatRole):
            raise ValueError("role must be system, user or assistant")
        return value

    @field_validator("content", mode="before")
    @classmethod
    def _parse_parts(cls, value: Any) -> Any:
        if isinstance(value, list):
            parts = [_parse_content_part(item) for item in value]
            return [part for part in parts if part is not None]
        return value


class ChatCompletionRequest(BaseModel):
    """Chat Completions request body"""

    model: str = ""
    messages: list[ChatMessage] = Field(default_factory=list)
    stream: bool = False
    temperature: Optional[float] = None
    top_p: Optional[float] = None

    @field_validator("model", mode="before")
    @classmethod
    def _none_model(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("stream", mode="before")
    @classmethod
    def _none_stream(cls, value: Any) -> Any:
        return False if value is None else value


# ============ Unary Response ============


class ResponseMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str


class Choice(BaseModel):
    index: int = 0
    message: ResponseMessage
    logprobs: Optional[Any] = None
    finish_reason: str = "stop"


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletionResponse(BaseModel):
    """Non-streaming Chat Completions response"""

    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int = Field(default_factory=lambda: int(time.time()))
    model: str
    choices: list[Choice]
    usage: Usage


# ============ Streaming ============


class ChunkDelta(BaseModel):
    role: Optional[Literal["assistant"]] = None
    content: Optional[str] = None


class ChunkChoice(BaseModel):
    index: int = 0
    delta: ChunkDelta = Field(default_factory=ChunkDelta)
    finish_reason: Optional[str] = None


class ChatCompletionChunk(BaseModel):
    """One streamed Chat Completions chunk"""

    id: str
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    created: int
    model: str
    choices: list[ChunkChoice]

    def to_payload(self) -> dict[str, Any]:
        """
        Dump to the wire shape: unset delta fields are omitted while
        finish_reason is always present, null until the final chunk.
        """
        payload = self.model_dump()
        for choice in payload["choices"]:
            choice["delta"] = {k: v for k, v in choice["delta"].items() if v is not None}
        return payload


def new_completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4()}"


# ============ Models ============


class ModelCard(BaseModel):
    id: str
    object: Literal["model"] = "model"
    owned_by: str = "user"


class ModelList(BaseModel):
    object: Literal["list"] = "list"
    data: list[ModelCard] = Field(default_factory=list)
