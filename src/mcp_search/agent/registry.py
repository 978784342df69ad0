"""Remote tool registry built on Pydantic v2 models."""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, Field

from mcp_search.present import format_results_text
from mcp_search.transport.client import SearchClient
from mcp_search.types import ResultRecord


class RemoteToolSpec(BaseModel):
    """Declarative description of a tool exposed by the MCP server."""

    name: str = Field(min_length=1)
    description: str
    args_schema: type[BaseModel]
    tags: list[str] = Field(default_factory=list)

    def validate_arguments(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self.args_schema.model_validate(payload).model_dump()


class RemoteToolRegistry:
    """Validates arguments locally before invoking tools on the server."""

    def __init__(self, client: SearchClient) -> None:
        self.client = client
        self._tools: dict[str, RemoteToolSpec] = {}

    def register(self, spec: RemoteToolSpec) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    def specs(self) -> list[RemoteToolSpec]:
        return list(self._tools.values())

    async def execute(self, name: str, payload: dict[str, Any]) -> list[ResultRecord]:
        spec = self._tools.get(name)
        if spec is None:
            raise KeyError(f"Unknown tool: {name}")
        arguments = spec.validate_arguments(payload)
        return await self.client.invoke_tool(spec.name, arguments)

    def as_langchain_tools(self) -> list[StructuredTool]:
        tools: list[StructuredTool] = []
        for spec in self._tools.values():
            tools.append(
                StructuredTool.from_function(
                    coroutine=self._build_coroutine(spec),
                    name=spec.name,
                    description=spec.description,
                    args_schema=spec.args_schema,
                )
            )
        return tools

    def _build_coroutine(self, spec: RemoteToolSpec) -> Callable[..., Coroutine[Any, Any, str]]:
        async def _callable(**kwargs: Any) -> str:
            records = await self.execute(spec.name, kwargs)
            return format_results_text(records)

        return _callable
