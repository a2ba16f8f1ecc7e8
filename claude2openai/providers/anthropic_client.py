"""
Anthropic Protocol Client

Sends translated requests to the upstream Messages endpoint.
"""

import json
import logging
from typing import Optional

import httpx

from claude2openai.common.errors import ConfigurationError, UpstreamUnavailableError
from claude2openai.config import Settings
from claude2openai.domain.anthropic import AnthropicMessagesRequest

logger = logging.getLogger(__name__)


def build_messages_url(base_url: str) -> str:
    """
    Append the Messages path to the upstream base URL.

    Raises:
        ConfigurationError: The base URL already carries the API path
    """
    cleaned_base = base_url.strip().rstrip("/")
    if not cleaned_base:
        raise ConfigurationError("Upstream base URL must not be empty")
    if cleaned_base.endswith("/v1") or cleaned_base.endswith("/v1/messages"):
        raise ConfigurationError(
            f"Upstream base URL '{base_url}' must not include the /v1 path; "
            "it is appended automatically",
            details={"base_url": base_url},
        )
    return f"{cleaned_base}/v1/messages"


class AnthropicClient:
    """
    Anthropic Protocol Client

    Holds one httpx.AsyncClient for the lifetime of the process. Requests are
    never retried; transport failures surface as UpstreamUnavailableError.
    """

    # Anthropic API Version
    ANTHROPIC_VERSION = "2023-06-01"

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize client

        Args:
            base_url: Upstream base URL, without /v1
            timeout: Request timeout (seconds), httpx default when None
            transport: Optional httpx transport (used by tests)
        """
        self.url = build_messages_url(base_url)
        client_kwargs = {"transport": transport}
        if timeout:
            client_kwargs["timeout"] = httpx.Timeout(timeout)
        self._client = httpx.AsyncClient(**client_kwargs)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AnthropicClient":
        return cls(settings.UPSTREAM_BASE_URL, timeout=settings.HTTP_TIMEOUT, transport=transport)

    async def close(self) -> None:
        """Close the underlying HTTP client"""
        await self._client.aclose()

    def _prepare_headers(self, api_key: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": api_key,
            "anthropic-version": self.ANTHROPIC_VERSION,
        }

    def _build_request(self, body: AnthropicMessagesRequest, api_key: str) -> httpx.Request:
        payload = body.to_body()
        logger.debug(
            "Anthropic Request: url=%s stream=%s body=%s",
            self.url,
            body.stream,
            json.dumps(payload, ensure_ascii=False),
        )
        return self._client.build_request(
            "POST",
            self.url,
            headers=self._prepare_headers(api_key),
            json=payload,
        )

    async def create_message(self, body: AnthropicMessagesRequest, api_key: str) -> httpx.Response:
        """
        Send a non-streaming request and read the whole body.

        Args:
            body: Translated request
            api_key: Upstream API key

        Returns:
            httpx.Response: Fully read upstream response

        Raises:
            UpstreamUnavailableError: The upstream could not be reached
        """
        request = self._build_request(body, api_key)
        try:
            return await self._client.send(request)
        except httpx.RequestError as e:
            logger.error("Anthropic request failed: %s", e)
            raise UpstreamUnavailableError() from e

    async def stream_message(self, body: AnthropicMessagesRequest, api_key: str) -> httpx.Response:
        """
        Send a streaming request and return once the headers arrive.

        The caller owns the returned response and must close it with
        `aclose()`.

        Raises:
            UpstreamUnavailableError: The upstream could not be reached
        """
        request = self._build_request(body, api_key)
        try:
            return await self._client.send(request, stream=True)
        except httpx.RequestError as e:
            logger.error("Anthropic stream request failed: %s", e)
            raise UpstreamUnavailableError() from e
