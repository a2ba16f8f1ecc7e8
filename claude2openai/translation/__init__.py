"""
Protocol translation between OpenAI Chat Completions and Anthropic Messages
"""

from claude2openai.translation.request import (
    extract_system_prompt,
    normalize_content,
    translate_request,
)
from claude2openai.translation.response import extract_text, translate_response
from claude2openai.translation.stream import StreamState, StreamTranslator

__all__ = [
    "extract_system_prompt",
    "normalize_content",
    "translate_request",
    "extract_text",
    "translate_response",
    "StreamState",
    "StreamTranslator",
]
