import json
from typing import Any, Callable, List

import httpx
import pytest

from shopsavvy import ShopSavvyClient

TEST_KEY = "ss_test_abc123"


class Recorder:
    """Mock transport handler that records requests and replays one response."""

    def __init__(self, status_code: int = 200, payload: Any = None, text: str = None):
        self.status_code = status_code
        self.payload = payload if payload is not None else {"success": True, "data": {}}
        self.text = text
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_query(self) -> str:
        return self.last.url.query.decode()

    @property
    def last_body(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def make_client() -> Callable[..., ShopSavvyClient]:
    clients = []

    def _make(handler, **kwargs) -> ShopSavvyClient:
        kwargs.setdefault("api_key", TEST_KEY)
        client = ShopSavvyClient(transport=httpx.MockTransport(handler), **kwargs)
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()
