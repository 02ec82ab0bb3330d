"""Shared fixtures: settings and a fake chat-completion endpoint."""

import json
from typing import Any, Callable, Generator

import httpx
import pytest

from japp.models import GeneratorSettings


def completion_response(content: Any, status_code: int = 200) -> httpx.Response:
    """Build a chat-completion response whose first choice carries `content`."""
    return httpx.Response(
        status_code,
        json={"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]},
    )


class FakeEndpoint:
    """Records outgoing requests and answers them with a fixed handler."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def settings() -> GeneratorSettings:
    return GeneratorSettings(api_key="test-key")


@pytest.fixture
def make_client() -> Generator[Callable[..., tuple[httpx.Client, FakeEndpoint]], None, None]:
    """Factory for an httpx client routed to a FakeEndpoint."""
    clients = []

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> tuple[httpx.Client, FakeEndpoint]:
        endpoint = FakeEndpoint(handler)
        client = httpx.Client(transport=httpx.MockTransport(endpoint))
        clients.append(client)
        return client, endpoint

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
def reply_with() -> Callable[[Any], Callable[[httpx.Request], httpx.Response]]:
    """Handler factory answering every request with the given reply content."""

    def factory(content: Any) -> Callable[[httpx.Request], httpx.Response]:
        return lambda request: completion_response(content)

    return factory
