"""
Service Layer Module Initialization
"""

from claude2openai.services.model_allowlist import ModelAllowlist
from claude2openai.services.proxy_service import ProxyService, parse_chat_request

__all__ = [
    "ModelAllowlist",
    "ProxyService",
    "parse_chat_request",
]
