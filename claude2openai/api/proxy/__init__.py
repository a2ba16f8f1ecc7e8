"""
Proxy API Module Initialization
"""

from claude2openai.api.proxy.openai import router as openai_router

__all__ = [
    "openai_router",
]
