import httpx
import pytest

from claude2openai.common.errors import ConfigurationError, UpstreamUnavailableError
from claude2openai.domain.anthropic import AnthropicMessagesRequest
from claude2openai.providers.anthropic_client import AnthropicClient, build_messages_url


def _body(stream: bool = False) -> AnthropicMessagesRequest:
    return AnthropicMessagesRequest.model_validate(
        {
            "model": "claude-3-haiku-20240307",
            "messages": [{"role": "user", "content": [{"type": "text", "text": "Hi"}]}],
            "stream": stream,
        }
    )


@pytest.mark.parametrize(
    "base_url",
    ["https://api.anthropic.com", "https://api.anthropic.com/", "https://proxy.local/anthropic"],
)
def test_messages_path_is_appended(base_url):
    assert build_messages_url(base_url) == base_url.rstrip("/") + "/v1/messages"


@pytest.mark.parametrize(
    "base_url",
    [
        "https://api.anthropic.com/v1",
        "https://api.anthropic.com/v1/",
        "https://api.anthropic.com/v1/messages",
        "",
    ],
)
def test_base_url_with_api_path_is_rejected(base_url):
    with pytest.raises(ConfigurationError):
        build_messages_url(base_url)


@pytest.mark.asyncio
async def test_create_message_sends_required_headers_and_body(make_upstream):
    upstream, client = make_upstream(lambda request: httpx.Response(200, json={"id": "msg_1"}))

    response = await client.create_message(_body(), "sk-ant-test")

    assert response.status_code == 200
    [request] = upstream.requests
    assert str(request.url) == "https://upstream.test/v1/messages"
    assert request.method == "POST"
    assert request.headers["x-api-key"] == "sk-ant-test"
    assert request.headers["anthropic-version"] == "2023-06-01"
    assert request.headers["content-type"] == "application/json"
    assert "authorization" not in request.headers
    assert upstream.last_body == {
        "model": "claude-3-haiku-20240307",
        "max_tokens": 4096,
        "messages": [{"role": "user", "content": [{"type": "text", "text": "Hi"}]}],
        "stream": False,
    }


@pytest.mark.asyncio
async def test_stream_message_returns_open_response(make_upstream):
    upstream, client = make_upstream(
        lambda request: httpx.Response(
            200,
            headers={"content-type": "text/event-stream"},
            content=b"event: message_start\n\n",
        )
    )

    response = await client.stream_message(_body(stream=True), "sk-ant-test")
    try:
        data = b"".join([chunk async for chunk in response.aiter_bytes()])
    finally:
        await response.aclose()

    assert data == b"event: message_start\n\n"
    assert upstream.last_body["stream"] is True


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["create_message", "stream_message"])
async def test_transport_failure_raises_upstream_unavailable(make_upstream, method):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    upstream, client = make_upstream(refuse)

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        await getattr(client, method)(_body(), "sk-ant-test")

    assert exc_info.value.status_code == 500
    assert "refused" not in exc_info.value.message
    assert len(upstream.requests) == 1


def test_client_construction_fails_fast_on_bad_base_url():
    with pytest.raises(ConfigurationError):
        AnthropicClient("https://api.anthropic.com/v1")
