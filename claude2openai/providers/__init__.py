"""
Upstream provider client module initialization
"""

from claude2openai.providers.anthropic_client import AnthropicClient, build_messages_url

__all__ = [
    "AnthropicClient",
    "build_messages_url",
]
