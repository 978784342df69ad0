"""Built-in remote tool definitions."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from mcp_search.agent.registry import RemoteToolRegistry, RemoteToolSpec

SearchType = Literal["hybrid", "semantic", "keyword"]


class SearchToolInput(BaseModel):
    search_text: str = Field(min_length=1)
    search_type: SearchType = "hybrid"


def register_builtin_tools(registry: RemoteToolRegistry) -> None:
    """Register the tools every MCP search server is expected to expose.

    Tools:
    - `search`: hybrid, semantic, or keyword search over the server's index.
    """
    registry.register(
        RemoteToolSpec(
            name="search",
            description="Search the remote knowledge index and return scored passages.",
            args_schema=SearchToolInput,
            tags=["retrieval", "mcp"],
        )
    )
