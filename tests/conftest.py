import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from mcp_search.auth.prompts import StaticTokenPrompt
from mcp_search.auth.storage import InMemoryTokenStore
from mcp_search.auth.token_manager import TokenManager
from mcp_search.config import ClientConfig
from mcp_search.transport.client import SearchClient

BASE_URL = "https://mcp.test"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def sse_body(message: dict[str, Any], event: str = "message") -> str:
    return f"event: {event}\ndata: {json.dumps(message)}\n\n"


def double_encoded(payload: Any) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": 1,
        "result": {"content": [{"type": "text", "text": json.dumps(payload)}]},
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client(clock: FakeClock) -> Callable[..., SearchClient]:
    def _make(
        handler: Callable[[httpx.Request], httpx.Response],
        *,
        token: str | None = "secret-token",
        store: InMemoryTokenStore | None = None,
    ) -> SearchClient:
        tokens = TokenManager(
            store=store or InMemoryTokenStore(),
            prompt=StaticTokenPrompt(token),
            ttl_seconds=3600,
            clock=clock,
        )
        return SearchClient(
            ClientConfig(base_url=BASE_URL),
            tokens,
            transport=httpx.MockTransport(handler),
        )

    return _make
