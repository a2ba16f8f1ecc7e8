"""
Request translation (OpenAI Chat Completions -> Anthropic Messages)

Folds an OpenAI conversation into the Anthropic shape: one separate system
prompt plus user/assistant turns made of typed content blocks.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from claude2openai.common.errors import BadRequestError
from claude2openai.domain.anthropic import (
    DEFAULT_IMAGE_MEDIA_TYPE,
    AnthropicMessage,
    AnthropicMessagesRequest,
    ContentBlock,
    ImageBlock,
    ImageSource,
    TextBlock,
)
from claude2openai.domain.openai import (
    ChatCompletionRequest,
    ChatMessage,
    ImageUrlPart,
    TextPart,
)

logger = logging.getLogger(__name__)


def _image_block(part: ImageUrlPart) -> Optional[ImageBlock]:
    if not part.is_data_uri:
        return ImageBlock(
            source=ImageSource(
                type="url",
                media_type=DEFAULT_IMAGE_MEDIA_TYPE,
                data=part.url,
            )
        )

    prefix, sep, payload = part.url.partition(",")
    if not sep or not payload:
        logger.debug("Skipping data URI image without payload")
        return None

    media_type = prefix[len("data:"):]
    if media_type.endswith(";base64"):
        media_type = media_type[: -len(";base64")]
    return ImageBlock(source=ImageSource(type="base64", media_type=media_type, data=payload))


def extract_system_prompt(message: ChatMessage) -> str:
    """
    Flatten a system message to plain text.

    String content is used verbatim; for part lists the text of every text
    part is concatenated in order and images are ignored.
    """
    content = message.content
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return "".join(part.text for part in content if isinstance(part, TextPart))


def normalize_content(message: ChatMessage) -> list[ContentBlock]:
    """
    Convert the content of a user/assistant message into content blocks.
    """
    content = message.content
    if content is None:
        return []
    if isinstance(content, str):
        return [TextBlock(text=content)]

    blocks: list[ContentBlock] = []
    for part in content:
        if isinstance(part, TextPart):
            blocks.append(TextBlock(text=part.text))
        elif isinstance(part, ImageUrlPart):
            block = _image_block(part)
            if block is not None:
                blocks.append(block)
    return blocks


def translate_request(
    chat_request: ChatCompletionRequest, stream: bool
) -> AnthropicMessagesRequest:
    """
    Build the upstream request for a client request.

    Args:
        chat_request: Parsed client request, model already resolved
        stream: Whether the upstream should stream its reply

    Returns:
        AnthropicMessagesRequest: Request ready for serialization

    Raises:
        BadRequestError: The request has no messages
    """
    if not chat_request.messages:
        raise BadRequestError("messages must not be empty", code="empty_messages")

    system: Optional[str] = None
    messages: list[AnthropicMessage] = []
    for message in chat_request.messages:
        if message.role == "system":
            # A later system message replaces an earlier one
            system = extract_system_prompt(message)
            continue

        blocks = normalize_content(message)
        if not blocks:
            continue
        messages.append(AnthropicMessage(role=message.role, content=blocks))

    upstream_request = AnthropicMessagesRequest(
        model=chat_request.model,
        system=system,
        messages=messages,
        stream=stream,
        temperature=chat_request.temperature,
        top_p=chat_request.top_p,
    )

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Translated upstream request: %s",
            json.dumps(upstream_request.to_body(), ensure_ascii=False),
        )
    return upstream_request
