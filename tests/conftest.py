"""
Test Configuration Module
"""

import json
from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio

from claude2openai.providers.anthropic_client import AnthropicClient
from claude2openai.services.model_allowlist import ModelAllowlist


TEST_MODELS = ["claude-3-haiku-20240307", "claude-3-opus-20240229"]


class FakeUpstream:
    """Records requests sent to the upstream and replies with a canned response"""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def last_body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def allowlist() -> ModelAllowlist:
    return ModelAllowlist(TEST_MODELS)


@pytest_asyncio.fixture
async def make_upstream():
    """Build a FakeUpstream and an AnthropicClient wired to it"""
    clients: list[AnthropicClient] = []

    def factory(responder: Callable[[httpx.Request], httpx.Response]):
        upstream = FakeUpstream(responder)
        client = AnthropicClient(
            "https://upstream.test",
            transport=httpx.MockTransport(upstream),
        )
        clients.append(client)
        return upstream, client

    yield factory

    for client in clients:
        await client.close()
