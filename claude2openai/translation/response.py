"""
Unary response translation (Anthropic Messages -> OpenAI Chat Completions)
"""

from __future__ import annotations

import json
import logging
from typing import Any, Union

from pydantic import ValidationError

from claude2openai.common.errors import UpstreamDecodeError, UpstreamReportedError
from claude2openai.domain.anthropic import AnthropicMessagesResponse, ResponseContentBlock
from claude2openai.domain.openai import (
    ChatCompletionResponse,
    Choice,
    ResponseMessage,
    Usage,
)

logger = logging.getLogger(__name__)


def extract_text(content: list[ResponseContentBlock]) -> str:
    """
    Collect the assistant text from the upstream content blocks.

    Text blocks (or untyped blocks carrying text) are preferred. When none
    match, every block's text is used, and as a last resort the first
    block's text.
    """
    parts = [
        block.text
        for block in content
        if block.text is not None
        and (block.type == "text" or (not block.type and block.text))
    ]
    text = "".join(parts)
    if text or not content:
        return text

    text = "".join(block.text or "" for block in content)
    if text:
        return text
    return content[0].text or ""


def _decode_body(body: Union[bytes, str, dict[str, Any]]) -> dict[str, Any]:
    if isinstance(body, dict):
        return body
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("Upstream returned a non-JSON body: %s", e)
        raise UpstreamDecodeError() from e
    if not isinstance(data, dict):
        logger.warning("Upstream returned a non-object JSON body")
        raise UpstreamDecodeError()
    return data


def translate_response(
    status_code: int, body: Union[bytes, str, dict[str, Any]]
) -> ChatCompletionResponse:
    """
    Convert an upstream Messages reply into a Chat Completions reply.

    Args:
        status_code: Upstream HTTP status code
        body: Raw or decoded upstream body

    Returns:
        ChatCompletionResponse: Client reply

    Raises:
        UpstreamDecodeError: The body is not a JSON object
        UpstreamReportedError: The upstream reported an error
    """
    data = _decode_body(body)
    try:
        upstream = AnthropicMessagesResponse.model_validate(data)
    except ValidationError as e:
        logger.warning("Upstream body does not match the Messages schema: %s", e)
        raise UpstreamDecodeError() from e

    if upstream.error is not None:
        logger.warning(
            "Upstream reported error: status=%s type=%s message=%s",
            status_code,
            upstream.error.type,
            upstream.error.message,
        )
        raise UpstreamReportedError(
            error_type=upstream.error.type,
            message=upstream.error.message,
            status_code=status_code,
        )
    if status_code >= 400:
        logger.warning("Upstream returned status %s without error object", status_code)
        raise UpstreamReportedError(
            error_type="upstream_error",
            message=f"Upstream returned status {status_code}",
            status_code=status_code,
        )

    usage = upstream.usage
    return ChatCompletionResponse(
        id=upstream.id,
        model=upstream.model,
        choices=[Choice(message=ResponseMessage(content=extract_text(upstream.content)))],
        usage=Usage(
            prompt_tokens=usage.input_tokens,
            completion_tokens=usage.output_tokens,
            total_tokens=usage.input_tokens + usage.output_tokens,
        ),
    )
