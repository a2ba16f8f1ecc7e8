"""
Proxy Service Module

Core business logic: parses the client request, translates it, forwards it to
the upstream and translates the reply back.
"""

import json
import logging
from typing import Any, AsyncGenerator, Awaitable, Callable, Optional, Union

import httpx
from pydantic import ValidationError

from claude2openai.common.errors import BadRequestError, UpstreamStreamTruncatedError
from claude2openai.domain.openai import ChatCompletionRequest, ChatCompletionResponse, ModelCard, ModelList
from claude2openai.providers.anthropic_client import AnthropicClient
from claude2openai.services.model_allowlist import ModelAllowlist
from claude2openai.translation.request import translate_request
from claude2openai.translation.response import translate_response
from claude2openai.translation.stream import StreamTranslator

logger = logging.getLogger(__name__)


def parse_chat_request(raw: Union[bytes, str, dict[str, Any]]) -> ChatCompletionRequest:
    """
    Parse a client request body.

    Raises:
        BadRequestError: The body is not valid JSON or violates the schema
    """
    if not isinstance(raw, dict):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise BadRequestError(f"Invalid JSON body: {e}", code="invalid_json") from e
    if not isinstance(raw, dict):
        raise BadRequestError("Request body must be a JSON object", code="invalid_json")

    try:
        return ChatCompletionRequest.model_validate(raw)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        message = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in errors
        )
        raise BadRequestError(f"Invalid request: {message}", code="invalid_request") from e


class ProxyService:
    """
    Proxy Service

    Stateless per request; the client and allowlist are shared, read-only
    collaborators built at startup.
    """

    def __init__(self, client: AnthropicClient, allowlist: ModelAllowlist):
        self.client = client
        self.allowlist = allowlist

    def list_models(self) -> ModelList:
        return ModelList(data=[ModelCard(id=model) for model in self.allowlist])

    def _prepare(self, chat_request: ChatCompletionRequest, stream: bool):
        requested_model = chat_request.model
        model = self.allowlist.resolve(requested_model)
        if model != requested_model:
            logger.debug("Model '%s' is not allowed, using '%s'", requested_model, model)
        chat_request = chat_request.model_copy(update={"model": model})
        return chat_request, translate_request(chat_request, stream=stream)

    async def process_request(
        self, chat_request: ChatCompletionRequest, api_key: str
    ) -> ChatCompletionResponse:
        """
        Handle a non-streaming completion.

        Raises:
            BadRequestError: Empty message list
            UpstreamUnavailableError: Upstream unreachable
            UpstreamDecodeError: Upstream body unparseable
            UpstreamReportedError: Upstream returned an error
        """
        chat_request, upstream_request = self._prepare(chat_request, stream=False)
        logger.info("Chat completion: model=%s stream=false", chat_request.model)

        response = await self.client.create_message(upstream_request, api_key)
        return translate_response(response.status_code, response.content)

    async def process_request_stream(
        self,
        chat_request: ChatCompletionRequest,
        api_key: str,
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
    ) -> tuple[AsyncGenerator[bytes, None], httpx.Response]:
        """
        Handle a streaming completion.

        The upstream response headers are awaited before returning so that
        upstream errors can still be reported with a proper status code.

        Returns:
            tuple: (Client SSE frames, open upstream response). The caller
            must close the response if the generator is never iterated.
        """
        chat_request, upstream_request = self._prepare(chat_request, stream=True)
        logger.info("Chat completion: model=%s stream=true", chat_request.model)

        translator = StreamTranslator(model=chat_request.model)
        response = await self.client.stream_message(upstream_request, api_key)

        if response.status_code >= 400:
            try:
                body = await response.aread()
            finally:
                await response.aclose()
            # Always raises for an error status
            translate_response(response.status_code, body)

        return self._stream(translator, response, is_disconnected), response

    async def _stream(
        self,
        translator: StreamTranslator,
        response: httpx.Response,
        is_disconnected: Optional[Callable[[], Awaitable[bool]]],
    ) -> AsyncGenerator[bytes, None]:
        try:
            async for frame in translator.translate(response.aiter_bytes(), is_disconnected):
                yield frame
        except UpstreamStreamTruncatedError as e:
            logger.warning(
                "Upstream stream truncated: id=%s state=%s details=%s",
                translator.completion_id,
                translator.state.value,
                e.details,
            )
        finally:
            await response.aclose()
