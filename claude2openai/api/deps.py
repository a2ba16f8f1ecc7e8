"""
API Dependency Module

Provides the dependencies required by FastAPI routes.
"""

from typing import Annotated

from fastapi import Depends, Header, Request

from claude2openai.common.errors import BadRequestError
from claude2openai.services.proxy_service import ProxyService


def get_proxy_service(request: Request) -> ProxyService:
    """Get the proxy service wired at startup"""
    return ProxyService(
        client=request.app.state.upstream_client,
        allowlist=request.app.state.model_allowlist,
    )


def _extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[len("Bearer "):].strip() or None


async def get_upstream_api_key(
    authorization: str = Header(None, description="Bearer token"),
) -> str:
    """
    Extract the upstream API key from the Authorization header

    The key is forwarded as-is; the gateway does not validate it.

    Raises:
        BadRequestError: Header missing or not in `Bearer <key>` form
    """
    token = _extract_bearer_token(authorization)
    if token is None:
        raise BadRequestError(
            "invalid Authorization header format",
            code="invalid_authorization_header",
        )
    return token


# Dependency type aliases
ProxyServiceDep = Annotated[ProxyService, Depends(get_proxy_service)]
UpstreamApiKey = Annotated[str, Depends(get_upstream_api_key)]
