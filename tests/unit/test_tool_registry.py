import asyncio
import json

import httpx
import pytest
from pydantic import ValidationError

from mcp_search.agent.registry import RemoteToolRegistry, RemoteToolSpec
from mcp_search.agent.tools import SearchToolInput, register_builtin_tools


def _search_handler(seen: list[dict]):
    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={"jsonrpc": "2.0", "id": 1, "result": {"results": [{"content": "Policy text", "score": 0.75}]}},
        )

    return _handler


def test_tool_registry_validation(make_client) -> None:
    seen: list[dict] = []
    registry = RemoteToolRegistry(make_client(_search_handler(seen)))
    register_builtin_tools(registry)

    records = asyncio.run(registry.execute("search", {"search_text": "policy"}))

    assert [r.content for r in records] == ["Policy text"]
    assert seen[0]["params"] == {
        "name": "search",
        "arguments": {"search_text": "policy", "search_type": "hybrid"},
    }

    with pytest.raises(ValidationError):
        asyncio.run(registry.execute("search", {"search_text": ""}))
    with pytest.raises(ValidationError):
        asyncio.run(registry.execute("search", {"search_text": "x", "search_type": "fuzzy"}))
    assert len(seen) == 1


def test_unknown_tool_rejected(make_client) -> None:
    registry = RemoteToolRegistry(make_client(_search_handler([])))

    with pytest.raises(KeyError):
        asyncio.run(registry.execute("search", {"search_text": "x"}))


def test_duplicate_tool_registration_rejected(make_client) -> None:
    registry = RemoteToolRegistry(make_client(_search_handler([])))
    spec = RemoteToolSpec(name="search", description="search", args_schema=SearchToolInput)

    registry.register(spec)
    with pytest.raises(ValueError):
        registry.register(spec)


def test_langchain_export_runs_remote_tool(make_client) -> None:
    registry = RemoteToolRegistry(make_client(_search_handler([])))
    register_builtin_tools(registry)

    tools = registry.as_langchain_tools()
    output = asyncio.run(tools[0].ainvoke({"search_text": "policy", "search_type": "keyword"}))

    assert tools[0].name == "search"
    assert output == "[1] score=0.7500 Policy text"
