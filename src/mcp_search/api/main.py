"""FastAPI entrypoint exposing search, connection and auth endpoints."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from mcp_search.auth.prompts import EnvTokenPrompt
from mcp_search.errors import (
    AuthRequired,
    MalformedResponse,
    RemoteToolError,
    SearchClientError,
    TransportError,
)
from mcp_search.obs.tracing import CallTraceStore
from mcp_search.present import present_results
from mcp_search.transport.client import SearchClient, create_client


class SearchRequest(BaseModel):
    search_text: str = Field(min_length=1)
    search_type: str = Field(default="hybrid", min_length=1)


class ToolCallRequest(BaseModel):
    arguments: dict[str, Any] = Field(default_factory=dict)


def create_app(
    client: SearchClient | None = None,
    trace_store: CallTraceStore | None = None,
) -> FastAPI:
    """Build the app around one client; the default reads `MCP_*` env vars."""
    client = client or create_client(prompt=EnvTokenPrompt())
    trace_store = trace_store or CallTraceStore()
    client.set_observer(trace_store)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await client.aclose()

    app = FastAPI(title="MCP Search Client", version="0.1.0", lifespan=lifespan)
    app.state.client = client
    app.state.trace_store = trace_store

    @app.exception_handler(SearchClientError)
    async def _client_error(_: Request, exc: SearchClientError) -> JSONResponse:
        return JSONResponse(status_code=_status_for(exc), content={"detail": str(exc), "kind": type(exc).__name__})

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "base_url": client.config.base_url,
            "authenticated": client.tokens.is_authenticated,
        }

    @app.post("/search")
    async def search(request: SearchRequest) -> dict[str, Any]:
        records = await client.search(request.search_text, request.search_type)
        return {
            "count": len(records),
            "items": [asdict(view) for view in present_results(records)],
        }

    @app.post("/tools/{name}")
    async def call_tool(name: str, request: ToolCallRequest) -> dict[str, Any]:
        try:
            payload = await client.invoke_tool_raw(name, request.arguments)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {"tool": name, "payload": payload}

    @app.get("/connection")
    async def connection() -> dict[str, bool]:
        return {"connected": await client.test_connection()}

    @app.post("/auth/clear")
    def clear_auth() -> dict[str, bool]:
        client.clear_auth()
        return {"cleared": True}

    @app.get("/traces")
    def traces(limit: int = 20) -> dict[str, Any]:
        return {"items": [asdict(record) for record in trace_store.list_recent(limit=limit)]}

    @app.get("/metrics")
    def metrics() -> dict[str, Any]:
        return trace_store.summary()

    return app


def _status_for(exc: SearchClientError) -> int:
    if isinstance(exc, AuthRequired):
        return 401
    if isinstance(exc, TransportError):
        return 502 if exc.status is not None else 504
    if isinstance(exc, (RemoteToolError, MalformedResponse)):
        return 502
    return 500
